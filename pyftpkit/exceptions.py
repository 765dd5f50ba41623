"""Exceptions raised by pyftpkit."""

from typing import Optional


class FtpkitError(Exception):
    """Base exception for all pyftpkit errors."""


class UploadConfigError(FtpkitError):
    """Raised when an upload job or connection configuration is invalid."""


class EnumerationError(FtpkitError):
    """Raised when the local directory tree cannot be read."""


class RemoteConnectionError(FtpkitError, ConnectionError):
    """Raised when connecting or authenticating to the remote server fails."""


class TransferError(FtpkitError):
    """Raised when a single remote operation fails."""


class RemoteDirectoryExistsError(TransferError):
    """Raised by a transport when a remote directory already exists."""


class UploadExhaustedError(FtpkitError):
    """Raised when a file could not be uploaded within the attempt limit."""

    def __init__(
        self,
        local_path: str,
        attempts: int,
        last_error: Optional[BaseException] = None,
    ):
        self.local_path = local_path
        self.attempts = attempts
        self.last_error = last_error
        message = f"Failed to upload {local_path} after {attempts} attempts"
        if last_error is not None:
            message = f"{message}: {last_error}"
        super().__init__(message)


class RunFailedError(FtpkitError):
    """Raised at the end of a run when one or more files failed to upload."""

    def __init__(self, failed_files: list[str]):
        self.failed_files = list(failed_files)
        super().__init__(f"Upload failed for {len(self.failed_files)} files.")
