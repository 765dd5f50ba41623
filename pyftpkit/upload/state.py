"""Shared state of one upload run."""

import threading
from dataclasses import dataclass, field
from enum import Enum


class RunStatus(str, Enum):
    """Lifecycle of an upload run."""

    IDLE = "idle"
    ENUMERATING = "enumerating"
    UPLOADING_REGULAR = "uploading_regular"
    """Uploading every file that is not an entry file"""

    UPLOADING_ENTRIES = "uploading_entries"
    """Uploading entry files after the regular queue drained"""

    COMPLETED = "completed"
    COMPLETED_WITH_FAILURES = "completed_with_failures"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (
            RunStatus.COMPLETED,
            RunStatus.COMPLETED_WITH_FAILURES,
            RunStatus.CANCELLED,
        )


class RunState:
    """Counters shared by all workers of a run.

    ``uploaded_bytes`` only grows, ``failed_files`` is append-only and the
    cancellation flag is never cleared. All updates take the same lock.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._cancelled = threading.Event()
        self.uploaded_bytes = 0
        self.uploaded_files = 0
        self.skipped_files = 0
        self.failed_files: list[str] = []

    def add_completed(self, size: int, skipped: bool = False) -> int:
        """Count a finished file and return the new uploaded byte total."""
        with self._lock:
            self.uploaded_bytes += size
            if skipped:
                self.skipped_files += 1
            else:
                self.uploaded_files += 1
            return self.uploaded_bytes

    def add_failed(self, local_path: str) -> None:
        with self._lock:
            self.failed_files.append(local_path)

    def snapshot_failed(self) -> list[str]:
        with self._lock:
            return list(self.failed_files)

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()


@dataclass
class UploadResult:
    """Outcome of a finished or cancelled run."""

    status: RunStatus
    total_files: int = 0
    uploaded_files: int = 0
    skipped_files: int = 0
    """Files left alone because the remote copy was already up to date"""

    uploaded_bytes: int = 0
    total_bytes: int = 0
    failed_files: list[str] = field(default_factory=list)
