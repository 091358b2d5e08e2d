# trimmer/waveform.py
# Peak-based waveform summary for display.

import numpy as np

from trimmer.buffer import SampleBuffer, TimeWindow
from trimmer.errors import InvalidArgumentError


def bucket_ranges(frame_count: int, bucket_count: int) -> list[tuple[int, int]]:
    """
    Split [0, frame_count) into bucket_count contiguous frame ranges.

    Every bucket is frame_count // bucket_count frames wide except the
    last, which also takes the remainder. When bucket_count exceeds
    frame_count all frames land in the last bucket and the rest are empty.
    """
    if bucket_count <= 0:
        raise InvalidArgumentError(
            f"Bucket count must be positive. Got: {bucket_count}."
        )
    width: int = frame_count // bucket_count
    ranges: list[tuple[int, int]] = [
        (i * width, (i + 1) * width) for i in range(bucket_count - 1)
    ]
    ranges.append(((bucket_count - 1) * width, frame_count))
    return ranges


def summarize(buffer: SampleBuffer, bucket_count: int) -> np.ndarray:
    """
    Reduce a buffer to one peak magnitude per bucket.

    Args:
        buffer:       Source audio. Must contain at least one frame.
        bucket_count: Number of output values (one per pixel column).

    Returns:
        float32 array of length bucket_count with values in [0, 1].
        Each value is the maximum |sample| across all channels and frames
        of the bucket; empty buckets are 0.
    """
    if bucket_count <= 0:
        raise InvalidArgumentError(
            f"Bucket count must be positive. Got: {bucket_count}.\n"
            f"    → Pass the pixel width of the waveform view."
        )
    frame_count: int = buffer.frame_count
    if frame_count == 0:
        raise InvalidArgumentError(
            "Cannot summarize an empty clip.\n"
            "    → Check for zero-length audio before rendering a waveform."
        )

    # Peak across channels for every frame, shape (frame_count,); NaN reads as silence
    magnitudes: np.ndarray = np.nan_to_num(np.abs(buffer.frames()), nan=0.0)
    per_frame: np.ndarray = magnitudes.max(axis=1)

    width: int = frame_count // bucket_count
    split: int = width * (bucket_count - 1)

    peaks: np.ndarray = np.zeros(bucket_count, dtype=np.float32)
    if width > 0:
        peaks[:-1] = per_frame[:split].reshape(bucket_count - 1, width).max(axis=1)
    peaks[-1] = per_frame[split:].max()

    return np.minimum(peaks, np.float32(1.0))


def column_heights(buckets: np.ndarray, height: int, fill: float = 0.8) -> np.ndarray:
    """Pixel height of each waveform column for a view `height` pixels tall."""
    values: np.ndarray = np.asarray(buckets, dtype=np.float64)
    return np.rint(values * height * fill).astype(np.int64)


def marker_positions(
    window: TimeWindow, duration: float, width: float
) -> tuple[float, float]:
    """
    X offsets of the start and end trim markers.

    Positions are proportional to the clip duration and clamped to
    [0, width].
    """
    if duration <= 0:
        raise InvalidArgumentError(
            f"Duration must be positive. Got: {duration}."
        )
    start_x: float = window.start_seconds / duration * width
    end_x: float = window.end_seconds / duration * width
    return (
        min(max(start_x, 0.0), width),
        min(max(end_x, 0.0), width),
    )
