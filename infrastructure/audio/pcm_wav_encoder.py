# infrastructure/audio/pcm_wav_encoder.py
# Implementation of IAudioEncoder producing 16-bit PCM WAV.

import numpy as np

from application.ports.audio_encoder_port import IAudioEncoder
from trimmer.wav import encode_wav_counted


class PcmWavEncoder(IAudioEncoder):
    """Canonical 44-byte-header, 16-bit little-endian PCM WAV."""

    @property
    def extension(self) -> str:
        return ".wav"

    @property
    def mimetype(self) -> str:
        return "audio/wav"

    def encode(
        self,
        samples: np.ndarray,
        sample_rate: int,
        channel_count: int,
    ) -> tuple[bytes, int]:
        return encode_wav_counted(samples, sample_rate, channel_count)
