"""Scraping pipeline concurrency lock.

Prevents overlapping scheduled runs.  Uses a non-blocking acquire: if
the lock is already held the caller gets False and skips the run.
"""

from __future__ import annotations

import threading

_pipeline_lock = threading.Lock()
_current_run_id: str | None = None


def acquire_pipeline_lock(run_id: str) -> bool:
    """Try to acquire the pipeline lock for the given run.

    Returns True if the lock was acquired, False if already held.
    """
    global _current_run_id
    if _pipeline_lock.acquire(blocking=False):
        _current_run_id = run_id
        return True
    return False


def release_pipeline_lock() -> None:
    """Release the pipeline lock.  Safe to call when it is not held."""
    global _current_run_id
    _current_run_id = None
    if _pipeline_lock.locked():
        _pipeline_lock.release()


def get_current_run_id() -> str | None:
    """Return the run_id of the currently executing pipeline, or None."""
    return _current_run_id


def is_pipeline_running() -> bool:
    return _current_run_id is not None
