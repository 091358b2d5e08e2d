# infrastructure/web/job_store.py
# Centralized in-memory trim job store — single source of truth.
# Thread-safe: all mutations are guarded by a Lock.

from dataclasses import replace
from threading import Lock
from typing import Optional

from application.dto.trim_dto import TrimJobDTO

_jobs: dict[str, TrimJobDTO] = {}
_lock: Lock = Lock()


def get_job(job_id: str) -> Optional[TrimJobDTO]:
    """Return a snapshot of the job, or None."""
    with _lock:
        job = _jobs.get(job_id)
        return replace(job) if job is not None else None


def set_job(job: TrimJobDTO) -> None:
    """Create or overwrite a job entry."""
    with _lock:
        _jobs[job.job_id] = job


def update_job(job_id: str, **changes) -> None:
    """Apply *changes* to an existing job (no-op if missing)."""
    with _lock:
        job = _jobs.get(job_id)
        if job is not None:
            _jobs[job_id] = replace(job, **changes)


def delete_job(job_id: str) -> None:
    """Remove a job entry (no-op if missing)."""
    with _lock:
        _jobs.pop(job_id, None)
