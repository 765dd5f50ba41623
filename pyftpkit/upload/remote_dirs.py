"""Per-run memo of remote directories already created."""

import logging
import threading

from ..exceptions import RemoteDirectoryExistsError
from ..transports.base import Transport

logger = logging.getLogger(__name__)


class RemoteDirectoryCache:
    """Remembers which remote directories exist during one run.

    Shared by all workers. The check-then-create sequence is serialized per
    directory path, so two workers needing the same directory issue a single
    create call. Directories are only marked once the create call succeeded
    or reported that the directory already exists; any other failure leaves
    the path unmarked so a retry creates it again.
    """

    def __init__(self) -> None:
        self._present: set[str] = set()
        self._path_locks: dict[str, threading.Lock] = {}
        self._lock = threading.Lock()
        self.create_calls = 0

    def __contains__(self, remote_dir: str) -> bool:
        with self._lock:
            return remote_dir in self._present

    def __len__(self) -> int:
        with self._lock:
            return len(self._present)

    def _lock_for(self, remote_dir: str) -> threading.Lock:
        with self._lock:
            lock = self._path_locks.get(remote_dir)
            if lock is None:
                lock = self._path_locks[remote_dir] = threading.Lock()
            return lock

    def ensure_dir(self, transport: Transport, remote_dir: str) -> None:
        """Create ``remote_dir`` through ``transport`` unless already done.

        Args:
            transport: Connected transport of the calling worker
            remote_dir: Remote directory path (used verbatim as cache key)

        Raises:
            TransferError: If the directory cannot be created
        """
        if remote_dir in self:
            return

        with self._lock_for(remote_dir):
            if remote_dir in self:
                return
            with self._lock:
                self.create_calls += 1
            try:
                transport.ensure_dir(remote_dir)
            except RemoteDirectoryExistsError:
                logger.debug(f"Remote directory already exists: {remote_dir}")
            with self._lock:
                self._present.add(remote_dir)
