# application/dto/trim_dto.py
# Data Transfer Objects for trim job requests and results.

from dataclasses import dataclass
from typing import Optional


@dataclass
class TrimRequestDTO:
    """Single trim request."""
    input_path: str
    output_path: str
    start_sec: float = 0.0
    end_sec: Optional[float] = None   # None = end of clip
    gain: float = 1.0


@dataclass
class TrimJobDTO:
    """State of a trim job as tracked by the job store."""
    job_id: str
    status: str = "queued"       # queued | processing | done | error
    progress: int = 0
    step: str = "Waiting to start"
    error: Optional[str] = None
    output_path: Optional[str] = None
    frames: int = 0
    clipped_samples: int = 0

    def public_view(self) -> dict:
        """Fields safe to return to HTTP clients."""
        return {
            "status": self.status,
            "progress": self.progress,
            "step": self.step,
            "error": self.error,
            "frames": self.frames,
            "clippedSamples": self.clipped_samples,
        }
