"""Single-file upload with retries."""

import logging
import posixpath
import time
from typing import Optional

from ..exceptions import UploadExhaustedError
from ..transports.base import Transport
from ..utils import DEFAULT_MAX_ATTEMPTS, DEFAULT_RETRY_DELAY
from .comparator import is_same_file
from .remote_dirs import RemoteDirectoryCache
from .scanner import AnalyzedFile

logger = logging.getLogger(__name__)


class TransferExecutor:
    """Uploads one file, reconnecting and retrying on failure."""

    def __init__(
        self,
        directory_cache: RemoteDirectoryCache,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        retry_delay: float = DEFAULT_RETRY_DELAY,
    ):
        """Initialize transfer executor.

        Args:
            directory_cache: Remote directories created during this run
            max_attempts: Attempts per file before giving up
            retry_delay: Seconds to wait between attempts
        """
        self.directory_cache = directory_cache
        self.max_attempts = max_attempts
        self.retry_delay = retry_delay

    def upload_one(
        self,
        transport: Transport,
        analyzed: AnalyzedFile,
        local_path: str,
    ) -> bool:
        """Upload ``local_path`` unless the remote copy is up to date.

        Every failed attempt is followed by a reconnect of ``transport``, so
        the worker continues with a fresh session whatever the outcome.

        Args:
            transport: Connected transport owned by the calling worker
            analyzed: Size, mtime and remote path of the file
            local_path: Local file to upload

        Returns:
            True if the file was transferred, False if it was skipped

        Raises:
            UploadExhaustedError: If every attempt failed
        """
        remote_path = analyzed.remote_path
        last_error: Optional[Exception] = None

        for attempt in range(self.max_attempts):
            try:
                if is_same_file(
                    transport, analyzed.local_size, analyzed.local_mtime, remote_path
                ):
                    logger.debug(f"Skipping unchanged file {remote_path}")
                    return False
                self.directory_cache.ensure_dir(
                    transport, posixpath.dirname(remote_path) or "."
                )
                start = time.time()
                transport.upload_from(local_path, remote_path)
                logger.debug(
                    f"Upload of {remote_path} took {time.time() - start:.2f}s"
                )
                return True
            except Exception as e:
                last_error = e
                logger.warning(
                    "File upload error, attempt=%d, %s: %s", attempt, remote_path, e
                )
                self._reconnect(transport)
                if self.retry_delay > 0 and attempt < self.max_attempts - 1:
                    time.sleep(self.retry_delay)

        raise UploadExhaustedError(local_path, self.max_attempts, last_error)

    def _reconnect(self, transport: Transport) -> None:
        try:
            transport.connect()
        except Exception as e:
            # The next attempt fails fast and reconnects again
            logger.warning(f"Reconnect failed: {e}")
