"""Core upload engine: two-phase concurrent queue scheduling."""

import logging
import threading
import time
from collections import deque
from concurrent.futures import ThreadPoolExecutor, wait
from functools import partial
from pathlib import Path
from typing import Optional, Union

from ..config import ConnectionParams
from ..exceptions import EnumerationError, FtpkitError, RunFailedError
from ..output import OutputFormatter
from ..transports import create_transport
from ..transports.base import Transport, TransportFactory
from ..utils import (
    DEFAULT_ENTRY_NAMES,
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_MAX_CONCURRENCY,
    DEFAULT_RETRY_DELAY,
    format_size,
)
from .job import UploadJob
from .progress import ProgressCallback, ProgressReporter
from .remote_dirs import RemoteDirectoryCache
from .scanner import DirectoryScanner, analyze_file, partition_entry_files, total_size
from .state import RunState, RunStatus, UploadResult
from .transfer import TransferExecutor

logger = logging.getLogger(__name__)


class UploadEngine:
    """Uploads a local directory tree to a remote directory.

    Files are uploaded in two phases. Regular files go first; entry files
    (such as ``index.html``) only start once the regular queue is drained,
    so a site never points at assets that are not uploaded yet. Each phase
    runs up to ``job.max_concurrency`` workers, every worker owning one
    connection and popping paths from the shared phase queue.

    Examples:
        >>> job = UploadJob(
        ...     local_root=Path("dist"),
        ...     remote_root="/site/wwwroot",
        ...     connection=ConnectionParams(host="ftp.example.com", username="u",
        ...                                 password="p"),
        ... )
        >>> result = UploadEngine(job).run()
        >>> print(f"Uploaded {result.uploaded_files} files")
    """

    def __init__(
        self,
        job: UploadJob,
        transport_factory: Optional[TransportFactory] = None,
        output: Optional[OutputFormatter] = None,
        reporter: Optional[ProgressReporter] = None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        retry_delay: float = DEFAULT_RETRY_DELAY,
    ):
        """Initialize upload engine.

        Args:
            job: What to upload and where
            transport_factory: Creates one unconnected transport per worker
                (defaults to the transport for ``job.connection``)
            output: Output formatter for status messages
            reporter: Progress reporter (defaults to no displays)
            max_attempts: Attempts per file before it counts as failed
            retry_delay: Seconds to wait between attempts of one file
        """
        self.job = job
        self.transport_factory = transport_factory or partial(
            create_transport, job.connection
        )
        self.output = output or OutputFormatter()
        self.reporter = reporter or ProgressReporter()
        self.state = RunState()
        self.directory_cache = RemoteDirectoryCache()
        self.executor = TransferExecutor(
            self.directory_cache, max_attempts=max_attempts, retry_delay=retry_delay
        )
        self.status = RunStatus.IDLE
        self._progress_lock = threading.Lock()
        self._cancel_lock = threading.Lock()

    @property
    def cancelled(self) -> bool:
        return self.state.cancelled

    def cancel(self) -> None:
        """Stop taking files from the queues.

        Transfers already in progress finish; the progress displays stop
        immediately. Calling this more than once has no further effect.
        """
        with self._cancel_lock:
            if self.state.cancelled:
                return
            self.state.cancel()
        self.reporter.stop()
        self.output.warning("Upload cancelled by user.")

    def run(self) -> UploadResult:
        """Run the upload.

        Returns:
            UploadResult of the run (status COMPLETED or CANCELLED)

        Raises:
            EnumerationError: If the local directory cannot be read; nothing
                is uploaded in that case
            RemoteConnectionError: If a worker cannot connect
            RunFailedError: If at least one file failed to upload
        """
        if self.status.is_terminal:
            raise FtpkitError("An UploadEngine can only run once")
        if self.status != RunStatus.IDLE:
            raise FtpkitError("Upload is already running")

        job = self.job
        start_time = time.time()
        self.status = RunStatus.ENUMERATING

        if not job.local_root.is_dir():
            raise EnumerationError(f"Local directory does not exist: {job.local_root}")

        scanner = DirectoryScanner()
        files = scanner.scan_local(job.local_root)
        regular_files, entry_files = partition_entry_files(files, job.entry_names)
        total_bytes = total_size(files)
        logger.debug(
            f"Found {len(regular_files)} regular and {len(entry_files)} entry "
            f"file(s), {format_size(total_bytes)}"
        )

        self.output.info(f"Syncing directory {job.local_root} -> {job.remote_root}")
        self.reporter.start(total_bytes)

        try:
            if regular_files and not self.cancelled:
                self.status = RunStatus.UPLOADING_REGULAR
                self.run_phase([str(f.path) for f in regular_files], total_bytes)

            if entry_files and not self.cancelled:
                self.status = RunStatus.UPLOADING_ENTRIES
                self.run_phase([str(f.path) for f in entry_files], total_bytes)
        except BaseException:
            self.status = RunStatus.COMPLETED_WITH_FAILURES
            raise
        finally:
            self.reporter.stop()

        failed_files = self.state.snapshot_failed()
        if self.cancelled:
            self.status = RunStatus.CANCELLED
        elif failed_files:
            self.status = RunStatus.COMPLETED_WITH_FAILURES
        else:
            self.status = RunStatus.COMPLETED

        logger.debug(f"Upload run took {time.time() - start_time:.2f}s")

        if failed_files:
            self.output.error(f"Failed to upload {len(failed_files)} files:")
            for failed in failed_files:
                self.output.error(failed)
            raise RunFailedError(failed_files)

        if not self.cancelled:
            self.output.success("Upload finished.")

        return UploadResult(
            status=self.status,
            total_files=len(files),
            uploaded_files=self.state.uploaded_files,
            skipped_files=self.state.skipped_files,
            uploaded_bytes=self.state.uploaded_bytes,
            total_bytes=total_bytes,
            failed_files=failed_files,
        )

    def run_phase(self, local_paths: list[str], total_bytes: int) -> None:
        """Drain one queue of local paths with parallel workers.

        Returns when every worker has finished. If a worker failed (for
        example it could not connect), its exception is re-raised after the
        other workers are done.

        Args:
            local_paths: Queue of local file paths, in upload order
            total_bytes: Bytes of all files in the run (for progress)
        """
        queue = deque(local_paths)
        queue_lock = threading.Lock()
        worker_count = min(self.job.max_concurrency, len(queue))
        if worker_count == 0:
            return

        logger.debug(f"Uploading {len(queue)} file(s) with {worker_count} workers")

        with ThreadPoolExecutor(
            max_workers=worker_count, thread_name_prefix="ftpkit-worker"
        ) as pool:
            futures = [
                pool.submit(self._drain_queue, queue, queue_lock, total_bytes)
                for _ in range(worker_count)
            ]
            try:
                wait(futures)
            except KeyboardInterrupt:
                # Let the workers stop after their current file
                self.cancel()
                raise

        for future in futures:
            future.result()

    def _drain_queue(
        self, queue: deque, queue_lock: threading.Lock, total_bytes: int
    ) -> None:
        """Worker loop: one connection, files popped until the queue is empty."""
        transport = self.transport_factory()
        try:
            transport.connect()
            while not self.cancelled:
                with queue_lock:
                    if not queue:
                        break
                    local_path = queue.popleft()
                self._process_file(transport, local_path, total_bytes)
        finally:
            transport.close()

    def _process_file(
        self, transport: Transport, local_path: str, total_bytes: int
    ) -> None:
        """Upload one file; failures are recorded, never raised."""
        try:
            analyzed = analyze_file(
                local_path, self.job.local_root, self.job.remote_root
            )
            transferred = self.executor.upload_one(transport, analyzed, local_path)
        except Exception as e:
            self.state.add_failed(local_path)
            self.output.error(f"Failed to upload {local_path}: {e}")
            return

        with self._progress_lock:
            uploaded_bytes = self.state.add_completed(
                analyzed.local_size, skipped=not transferred
            )
            self.reporter.report(local_path, uploaded_bytes, total_bytes)


def upload_directory(
    local_dir: Union[str, Path],
    remote_dir: str,
    connection: ConnectionParams,
    entries: Optional[list[str]] = None,
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
    display: str = "text",
    progress: Optional[ProgressCallback] = None,
    output: Optional[OutputFormatter] = None,
) -> UploadResult:
    """Upload ``local_dir`` to ``remote_dir`` in one call.

    Args:
        local_dir: Local directory (relative paths resolve against the
            current working directory)
        remote_dir: Remote destination directory
        connection: Connection parameters
        entries: Entry file names uploaded last (default: ``index.html``)
        max_concurrency: Connections per phase
        display: ``bar``, ``text`` or ``none``
        progress: Optional progress callback
        output: Output formatter for status messages

    Returns:
        UploadResult of the run

    Raises:
        RunFailedError: If at least one file failed to upload
    """
    from ..cli_progress import create_reporter

    output = output or OutputFormatter()
    job = UploadJob(
        local_root=Path(local_dir),
        remote_root=remote_dir,
        connection=connection,
        entry_names=tuple(entries) if entries else DEFAULT_ENTRY_NAMES,
        max_concurrency=max_concurrency,
    )
    reporter = create_reporter(display, callback=progress, output=output)
    engine = UploadEngine(job, output=output, reporter=reporter)
    return engine.run()
