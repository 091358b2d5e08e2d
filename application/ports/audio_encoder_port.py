# application/ports/audio_encoder_port.py
# Port interface for serializing samples to a container format.

from abc import ABC, abstractmethod
import numpy as np


class IAudioEncoder(ABC):
    """Abstract base class for audio encoders."""

    @property
    @abstractmethod
    def extension(self) -> str:
        """File extension of the produced container (e.g., '.wav')."""
        ...

    @property
    def mimetype(self) -> str:
        return "application/octet-stream"

    @abstractmethod
    def encode(
        self,
        samples: np.ndarray,
        sample_rate: int,
        channel_count: int,
    ) -> tuple[bytes, int]:
        """
        Serialize interleaved float samples.

        Args:
            samples:       Interleaved float32 samples.
            sample_rate:   Frames per second in Hz.
            channel_count: Number of interleaved channels.

        Returns:
            (data, clipped): the complete file contents and the number of
            samples the encoder had to clamp to fit its sample format.
        """
        ...
