# infrastructure/audio/numpy_audio_trimmer.py
# Implementation of IAudioTrimmer using NumPy array slicing.

import numpy as np

from application.ports.audio_trimmer_port import IAudioTrimmer
from trimmer.buffer import SampleBuffer, TimeWindow
from trimmer.trim import extract


class NumpyAudioTrimmer(IAudioTrimmer):
    """Trim audio by slicing the interleaved sample array."""

    def trim(
        self,
        buffer: SampleBuffer,
        window: TimeWindow,
        gain: float,
    ) -> np.ndarray:
        return extract(buffer, window, gain)
