# trimmer/wav.py
# Canonical 16-bit PCM WAV encoder (RIFF container, little-endian).

import logging
import struct
from dataclasses import dataclass

import numpy as np

from trimmer.errors import InvalidArgumentError

logger = logging.getLogger(__name__)

PCM_FORMAT_CODE: int = 1
BITS_PER_SAMPLE: int = 16
BYTES_PER_SAMPLE: int = BITS_PER_SAMPLE // 8
FMT_CHUNK_SIZE: int = 16
HEADER_SIZE: int = 44
PCM16_MAX: int = 32767
PCM16_MIN: int = -32768

# RIFF/WAVE header: tag, riff size, form, fmt tag, fmt size, format code,
# channels, sample rate, byte rate, block align, bits per sample,
# data tag, data size
_HEADER_STRUCT: struct.Struct = struct.Struct("<4sI4s4sIHHIIHH4sI")

_UINT16_MAX: int = 0xFFFF
_UINT32_MAX: int = 0xFFFFFFFF
_MAX_DATA_BYTES: int = _UINT32_MAX - (HEADER_SIZE - 8)
# block_align is a uint16 field
_MAX_CHANNELS: int = _UINT16_MAX // BYTES_PER_SAMPLE


@dataclass(frozen=True)
class WavHeader:
    """Fields of a canonical 44-byte PCM WAV header."""

    riff_size: int
    channel_count: int
    sample_rate: int
    byte_rate: int
    block_align: int
    bits_per_sample: int
    data_size: int

    @property
    def frame_count(self) -> int:
        return self.data_size // self.block_align


def to_pcm16(samples: np.ndarray) -> tuple[np.ndarray, int]:
    """
    Convert float samples to signed 16-bit integers.

    Each sample becomes round(sample * 32767), clamped to
    [-32768, 32767]. NaN samples become 0.

    Returns:
        (pcm, clipped) where pcm is a little-endian int16 array and
        clipped is the number of samples the clamp changed.
    """
    scaled: np.ndarray = np.rint(np.asarray(samples, dtype=np.float64) * PCM16_MAX)
    clipped: int = int(np.count_nonzero((scaled > PCM16_MAX) | (scaled < PCM16_MIN)))

    scaled = np.nan_to_num(scaled, nan=0.0, posinf=PCM16_MAX, neginf=PCM16_MIN)
    pcm: np.ndarray = np.clip(scaled, PCM16_MIN, PCM16_MAX).astype("<i2")
    return pcm, clipped


def encode_wav(samples: np.ndarray, sample_rate: int, channel_count: int) -> bytes:
    """
    Serialize interleaved float samples as a 16-bit PCM WAV byte stream.

    Args:
        samples:       Interleaved float samples. A (frames, channels)
                       array is flattened in row order.
        sample_rate:   Frames per second in Hz.
        channel_count: Number of interleaved channels.

    Returns:
        The complete file: 44-byte header followed by the data chunk.
    """
    data, _ = encode_wav_counted(samples, sample_rate, channel_count)
    return data


def encode_wav_counted(
    samples: np.ndarray, sample_rate: int, channel_count: int
) -> tuple[bytes, int]:
    """Like encode_wav, but also return how many samples were clamped."""
    data: np.ndarray = np.asarray(samples, dtype=np.float32).reshape(-1)

    if data.size == 0:
        raise InvalidArgumentError(
            "Cannot encode an empty sample array.\n"
            "    → Select a non-empty range before exporting."
        )
    if channel_count <= 0:
        raise InvalidArgumentError(
            f"Channel count must be positive. Got: {channel_count}."
        )
    if sample_rate <= 0:
        raise InvalidArgumentError(
            f"Sample rate must be positive. Got: {sample_rate}."
        )
    if channel_count > _MAX_CHANNELS:
        raise InvalidArgumentError(
            f"Too many channels for a WAV header: {channel_count} "
            f"(max {_MAX_CHANNELS})."
        )
    if data.size % channel_count:
        raise InvalidArgumentError(
            f"Sample count {data.size} is not a multiple of "
            f"channel count {channel_count}."
        )

    block_align: int = channel_count * BYTES_PER_SAMPLE
    if sample_rate * block_align > _UINT32_MAX:
        raise InvalidArgumentError(
            f"Sample rate {sample_rate} Hz with {channel_count} channels "
            f"does not fit a WAV header."
        )

    data_size: int = data.size * BYTES_PER_SAMPLE
    if data_size > _MAX_DATA_BYTES:
        raise InvalidArgumentError(
            f"Audio too large for a WAV file: {data_size} data bytes.\n"
            f"    → Export a shorter selection."
        )

    pcm, clipped = to_pcm16(data)
    if clipped:
        logger.warning(
            "clamped %d of %d samples to the 16-bit range", clipped, data.size
        )

    header: bytes = _HEADER_STRUCT.pack(
        b"RIFF",
        HEADER_SIZE - 8 + data_size,
        b"WAVE",
        b"fmt ",
        FMT_CHUNK_SIZE,
        PCM_FORMAT_CODE,
        channel_count,
        sample_rate,
        sample_rate * block_align,
        block_align,
        BITS_PER_SAMPLE,
        b"data",
        data_size,
    )
    return header + pcm.tobytes(), clipped


def read_wav_header(data: bytes) -> WavHeader:
    """Parse the header written by encode_wav."""
    if len(data) < HEADER_SIZE:
        raise InvalidArgumentError(
            f"WAV data too short: {len(data)} bytes (header is {HEADER_SIZE})."
        )

    (
        riff, riff_size, wave, fmt, fmt_size, format_code, channels,
        sample_rate, byte_rate, block_align, bits, data_tag, data_size,
    ) = _HEADER_STRUCT.unpack_from(data)

    if riff != b"RIFF" or wave != b"WAVE":
        raise InvalidArgumentError(
            f"Not a RIFF/WAVE stream: {riff!r} / {wave!r}."
        )
    if fmt != b"fmt " or fmt_size != FMT_CHUNK_SIZE or data_tag != b"data":
        raise InvalidArgumentError("Unexpected chunk layout; expected canonical fmt + data.")
    if format_code != PCM_FORMAT_CODE or bits != BITS_PER_SAMPLE:
        raise InvalidArgumentError(
            f"Unsupported encoding: format {format_code}, {bits}-bit."
        )

    return WavHeader(
        riff_size=riff_size,
        channel_count=channels,
        sample_rate=sample_rate,
        byte_rate=byte_rate,
        block_align=block_align,
        bits_per_sample=bits,
        data_size=data_size,
    )
