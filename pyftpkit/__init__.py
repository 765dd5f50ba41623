"""pyftpkit - upload a local directory to an FTP or SFTP server."""

from .config import ConnectionParams
from .exceptions import (
    EnumerationError,
    FtpkitError,
    RemoteConnectionError,
    RemoteDirectoryExistsError,
    RunFailedError,
    TransferError,
    UploadConfigError,
    UploadExhaustedError,
)
from .upload import (
    RunStatus,
    UploadEngine,
    UploadJob,
    UploadProgress,
    UploadResult,
    upload_directory,
)

__version__ = "1.0.0"

__all__ = [
    "ConnectionParams",
    "UploadEngine",
    "UploadJob",
    "UploadProgress",
    "UploadResult",
    "RunStatus",
    "upload_directory",
    "FtpkitError",
    "EnumerationError",
    "RemoteConnectionError",
    "RemoteDirectoryExistsError",
    "RunFailedError",
    "TransferError",
    "UploadConfigError",
    "UploadExhaustedError",
]
