# trimmer/trim.py
# Sample-range extraction with linear gain.

import math

import numpy as np

from trimmer.buffer import SampleBuffer, TimeWindow
from trimmer.errors import InvalidArgumentError


def time_to_frame(seconds: float, sample_rate: int, frame_count: int) -> int:
    """Round a time in seconds to the nearest frame, clamped to [0, frame_count]."""
    if math.isnan(seconds):
        raise InvalidArgumentError(f"Time must be a number. Got: {seconds}.")
    # Clamp before rounding; huge finite times overflow to inf when scaled
    position: float = seconds * sample_rate
    if position <= 0:
        return 0
    if position >= frame_count:
        return frame_count
    return min(int(round(position)), frame_count)


def extract(buffer: SampleBuffer, window: TimeWindow, gain: float) -> np.ndarray:
    """
    Copy the frames inside `window` and scale them by `gain`.

    Args:
        buffer: Source audio.
        window: Selection in seconds. Frame indices are rounded, not
                truncated, and clamped to the clip.
        gain:   Linear multiplier, finite and >= 0. Applied to every
                channel alike.

    Returns:
        New interleaved float32 array with the same channel layout as the
        input. Output is not clamped; values may exceed [-1, 1].
    """
    if not math.isfinite(gain) or gain < 0:
        raise InvalidArgumentError(
            f"Gain must be a finite, non-negative number. Got: {gain}."
        )

    if not (math.isfinite(window.start_seconds) and math.isfinite(window.end_seconds)):
        raise InvalidArgumentError(
            f"Selection bounds must be finite. Got: {window.start_seconds}–{window.end_seconds}."
        )

    frame_count: int = buffer.frame_count
    start_frame: int = time_to_frame(window.start_seconds, buffer.sample_rate, frame_count)
    end_frame: int = time_to_frame(window.end_seconds, buffer.sample_rate, frame_count)

    if start_frame >= end_frame:
        raise InvalidArgumentError(
            f"Selection {window.start_seconds:.3f}s–{window.end_seconds:.3f}s "
            f"is empty (frames {start_frame}–{end_frame}).\n"
            f"    → Choose an end time after the start time."
        )

    channels: int = buffer.channel_count
    segment: np.ndarray = buffer.samples[start_frame * channels:end_frame * channels]
    return segment * np.float32(gain)
