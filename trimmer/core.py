import logging
import os
import tempfile
import time
from dataclasses import dataclass
from typing import Optional, Callable

import numpy as np
import soundfile as sf
from pydub import AudioSegment

from trimmer.buffer import SampleBuffer, TimeWindow
from trimmer.errors import InvalidArgumentError
from trimmer.trim import extract
from trimmer.utils import (
    DEFAULT_BUCKET_COUNT,
    GAIN_RANGE,
    MAX_DURATION_SEC,
    NATIVE_INPUT_FORMATS,
    validate_input_file,
    validate_output_path,
    validate_param_range,
    validate_time_window,
)
from trimmer.wav import encode_wav_counted
from trimmer.waveform import summarize

logger = logging.getLogger(__name__)


@dataclass
class TrimResult:
    """Summary of a finished export."""
    output_path: str
    frames: int
    channels: int
    sample_rate: int
    clipped_samples: int
    elapsed: float

    @property
    def duration(self) -> float:
        return self.frames / self.sample_rate


def load_audio(path: str) -> SampleBuffer:
    """
    Decode an audio file into a SampleBuffer.

    WAV/FLAC/OGG are read directly by soundfile; other formats are decoded
    with pydub (needs ffmpeg) through a temporary WAV.
    """
    ext: str = os.path.splitext(path)[1].lower()

    samples: np.ndarray
    sr: int
    if ext in NATIVE_INPUT_FORMATS:
        samples, sr = sf.read(path, dtype="float32", always_2d=True)
    else:
        audio_segment: AudioSegment = AudioSegment.from_file(path)

        tmp_fd: int
        tmp_path: str
        tmp_fd, tmp_path = tempfile.mkstemp(suffix=".wav")
        os.close(tmp_fd)
        try:
            audio_segment.export(tmp_path, format="wav")
            samples, sr = sf.read(tmp_path, dtype="float32", always_2d=True)
        finally:
            os.unlink(tmp_path)

    duration_sec: float = len(samples) / sr
    if duration_sec > MAX_DURATION_SEC:
        raise InvalidArgumentError(
            f"Audio too long: {duration_sec:.0f}s (max {MAX_DURATION_SEC:.0f}s).\n"
            f"    → Use a shorter audio file."
        )

    logger.debug(
        "decoded %s frames=%d channels=%d sr=%d",
        path, len(samples), samples.shape[1], sr,
    )
    return SampleBuffer.from_frames(samples, sr)


def write_wav(path: str, data: bytes) -> None:
    """Write a finished WAV byte stream to disk in one call."""
    with open(path, "wb") as f:
        f.write(data)


def trim_audio(
    input_path : str,
    output_path: str,
    start_sec  : float = 0.0,
    end_sec    : Optional[float] = None,
    gain       : float = 1.0,
    progress_callback: Optional[Callable[[int, int, str], None]] = None,
    audio_trimmer=None,
    encoder=None,
    source: Optional[SampleBuffer] = None,
) -> TrimResult:
    """
    Full pipeline: load audio → trim + gain → encode WAV → save.

    Args:
        input_path:  Source audio file (mp3/wav/flac/ogg/aac/m4a).
        output_path: Destination .wav file.
        start_sec:   Selection start in seconds.
        end_sec:     Selection end in seconds (None = end of clip).
        gain:        Linear gain applied to the selection (0.0–2.0).
        progress_callback: Optional callback (step_idx, total_steps, step_name).
        audio_trimmer: Optional IAudioTrimmer; defaults to trimmer.trim.extract.
        encoder:     Optional IAudioEncoder; defaults to 16-bit PCM WAV.
        source:      Already-decoded audio for input_path, if the caller
                     has one; skips decoding the file again.

    The output file is only created once the WAV bytes are complete, so a
    failed trim never leaves a partial file behind.
    """
    validate_input_file(input_path)
    validate_output_path(output_path)
    validate_param_range(gain, "gain", *GAIN_RANGE)

    steps: list[str] = [
        "Loading audio file",
        "Trimming and applying gain",
        "Encoding WAV",
        "Saving file",
    ]
    total_steps: int = len(steps)

    def _report(step_idx: int) -> None:
        if progress_callback:
            progress_callback(step_idx, total_steps, steps[step_idx])

    start_time: float = time.time()

    # [1] Load audio
    _report(0)
    buffer: SampleBuffer = source if source is not None else load_audio(input_path)

    window: TimeWindow = TimeWindow(
        start_sec, buffer.duration if end_sec is None else end_sec
    )
    validate_time_window(window, buffer.duration)

    # [2] Trim
    _report(1)
    if audio_trimmer is not None:
        trimmed: np.ndarray = audio_trimmer.trim(buffer, window, gain)
    else:
        trimmed = extract(buffer, window, gain)

    # [3] Encode
    _report(2)
    if encoder is not None:
        wav_bytes, clipped = encoder.encode(trimmed, buffer.sample_rate, buffer.channel_count)
    else:
        wav_bytes, clipped = encode_wav_counted(trimmed, buffer.sample_rate, buffer.channel_count)

    # [4] Save
    _report(3)
    write_wav(output_path, wav_bytes)

    result = TrimResult(
        output_path=output_path,
        frames=len(trimmed) // buffer.channel_count,
        channels=buffer.channel_count,
        sample_rate=buffer.sample_rate,
        clipped_samples=clipped,
        elapsed=time.time() - start_time,
    )
    logger.info(
        "trimmed %s → %s window=%.3f–%.3fs gain=%.2f frames=%d",
        input_path, output_path, window.start_seconds, window.end_seconds,
        gain, result.frames,
    )
    return result


def waveform_for_file(path: str, bucket_count: int = DEFAULT_BUCKET_COUNT) -> np.ndarray:
    """Decode `path` and return its waveform summary."""
    validate_input_file(path)
    return summarize(load_audio(path), bucket_count)
