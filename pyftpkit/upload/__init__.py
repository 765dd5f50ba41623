"""Upload engine for pyftpkit - two-phase concurrent directory uploads."""

from .comparator import is_same_file
from .engine import UploadEngine, upload_directory
from .job import UploadJob, load_job_file, load_job_from_json
from .progress import (
    ProgressCallback,
    ProgressObserver,
    ProgressReporter,
    TextProgressObserver,
    UploadProgress,
)
from .remote_dirs import RemoteDirectoryCache
from .scanner import (
    AnalyzedFile,
    DirectoryScanner,
    LocalFile,
    analyze_file,
    map_remote_path,
    partition_entry_files,
    total_size,
)
from .state import RunState, RunStatus, UploadResult
from .transfer import TransferExecutor

__all__ = [
    "UploadEngine",
    "upload_directory",
    "UploadJob",
    "UploadResult",
    "load_job_file",
    "load_job_from_json",
    "RunState",
    "RunStatus",
    "DirectoryScanner",
    "LocalFile",
    "AnalyzedFile",
    "analyze_file",
    "map_remote_path",
    "partition_entry_files",
    "total_size",
    "is_same_file",
    "RemoteDirectoryCache",
    "TransferExecutor",
    "ProgressCallback",
    "ProgressObserver",
    "ProgressReporter",
    "TextProgressObserver",
    "UploadProgress",
]
