# application/ports/audio_trimmer_port.py
# Port interface for audio trimming with gain.

from abc import ABC, abstractmethod
import numpy as np

from trimmer.buffer import SampleBuffer, TimeWindow


class IAudioTrimmer(ABC):
    """Abstract base class for audio trimming."""

    @abstractmethod
    def trim(
        self,
        buffer: SampleBuffer,
        window: TimeWindow,
        gain: float,
    ) -> np.ndarray:
        """
        Cut a time range out of a buffer and scale it.

        Args:
            buffer: Decoded source audio.
            window: Selection in seconds.
            gain:   Linear multiplier (>= 0).

        Returns:
            Interleaved float32 samples, same channel layout as the buffer.
        """
        ...
