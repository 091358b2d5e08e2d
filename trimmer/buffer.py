# trimmer/buffer.py
# Value types shared by the waveform, trim and encode stages.

from dataclasses import dataclass

import numpy as np

from trimmer.errors import InvalidArgumentError


@dataclass(frozen=True)
class SampleBuffer:
    """
    Decoded audio held in memory.

    Attributes:
        samples:       1-D float32 array, interleaved per channel.
        channel_count: Number of interleaved channels (>= 1).
        sample_rate:   Frames per second in Hz (>= 1).

    The samples array is copied on construction and marked read-only.
    """

    samples: np.ndarray
    channel_count: int
    sample_rate: int

    def __post_init__(self) -> None:
        if self.channel_count < 1:
            raise InvalidArgumentError(
                f"Channel count must be at least 1. Got: {self.channel_count}."
            )
        if self.sample_rate < 1:
            raise InvalidArgumentError(
                f"Sample rate must be at least 1 Hz. Got: {self.sample_rate}."
            )

        data: np.ndarray = np.array(self.samples, dtype=np.float32)
        if data.ndim != 1:
            raise InvalidArgumentError(
                f"Samples must be a flat interleaved array. Got shape {data.shape}.\n"
                f"    → Use SampleBuffer.from_frames() for (frames, channels) arrays."
            )
        if len(data) % self.channel_count:
            raise InvalidArgumentError(
                f"Sample count {len(data)} is not a multiple of "
                f"channel count {self.channel_count}."
            )

        data.setflags(write=False)
        object.__setattr__(self, "samples", data)

    @classmethod
    def from_frames(cls, frames: np.ndarray, sample_rate: int) -> "SampleBuffer":
        """Build a buffer from a (num_frames, channels) or 1-D mono array."""
        arr: np.ndarray = np.asarray(frames, dtype=np.float32)
        if arr.ndim == 1:
            return cls(arr, 1, sample_rate)
        if arr.ndim != 2:
            raise InvalidArgumentError(
                f"Expected a (frames, channels) array. Got shape {arr.shape}."
            )
        return cls(arr.reshape(-1), arr.shape[1], sample_rate)

    @property
    def frame_count(self) -> int:
        return len(self.samples) // self.channel_count

    @property
    def duration(self) -> float:
        """Length of the clip in seconds."""
        return self.frame_count / self.sample_rate

    def frames(self) -> np.ndarray:
        """Read-only (frame_count, channel_count) view of the samples."""
        return self.samples.reshape(self.frame_count, self.channel_count)


@dataclass(frozen=True)
class TimeWindow:
    """A [start, end) selection in seconds."""

    start_seconds: float
    end_seconds: float

    @classmethod
    def full(cls, buffer: SampleBuffer) -> "TimeWindow":
        return cls(0.0, buffer.duration)

    @property
    def length(self) -> float:
        return self.end_seconds - self.start_seconds
