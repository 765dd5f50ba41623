"""SFTP transport built on paramiko."""

import logging
import stat
from typing import Optional

import paramiko

from ..config import ConnectionParams
from ..exceptions import RemoteConnectionError, TransferError
from .base import iter_dir_prefixes

logger = logging.getLogger(__name__)

_SFTP_ERRORS = (OSError, paramiko.SSHException)


class SftpTransport:
    """Transport over SFTP (SSH File Transfer Protocol)."""

    def __init__(self, params: ConnectionParams):
        """Initialize SFTP transport.

        Args:
            params: Connection parameters (protocol must be ``sftp``)
        """
        self.params = params
        self._ssh: Optional[paramiko.SSHClient] = None
        self._sftp: Optional[paramiko.SFTPClient] = None

    def connect(self) -> None:
        self.close()
        params = self.params
        ssh = paramiko.SSHClient()
        ssh.load_system_host_keys()
        ssh.set_missing_host_key_policy(paramiko.AutoAddPolicy())
        # Only fall back to agent/default keys when no credential was given
        use_default_keys = params.password is None and params.private_key is None
        try:
            ssh.connect(
                hostname=params.host,
                port=params.port,
                username=params.username,
                password=params.password,
                key_filename=params.private_key,
                passphrase=params.passphrase,
                timeout=params.timeout,
                allow_agent=use_default_keys,
                look_for_keys=use_default_keys,
            )
            sftp = ssh.open_sftp()
        except _SFTP_ERRORS as e:
            ssh.close()
            raise RemoteConnectionError(
                f"Cannot connect to sftp://{params.host}:{params.port}: {e}"
            ) from e
        logger.debug(f"Connected to sftp://{params.host}:{params.port}")
        self._ssh = ssh
        self._sftp = sftp

    def _client(self) -> paramiko.SFTPClient:
        if self._sftp is None:
            raise TransferError("SFTP transport is not connected")
        return self._sftp

    def _stat(self, remote_path: str) -> paramiko.SFTPAttributes:
        try:
            return self._client().stat(remote_path)
        except _SFTP_ERRORS as e:
            raise TransferError(f"stat {remote_path} failed: {e}") from e

    def size(self, remote_path: str) -> int:
        attrs = self._stat(remote_path)
        if attrs.st_size is None:
            raise TransferError(f"stat {remote_path} returned no size")
        return attrs.st_size

    def last_modified(self, remote_path: str) -> float:
        attrs = self._stat(remote_path)
        if attrs.st_mtime is None:
            raise TransferError(f"stat {remote_path} returned no mtime")
        return float(attrs.st_mtime)

    def upload_from(self, local_path: str, remote_path: str) -> None:
        try:
            self._client().put(local_path, remote_path)
        except _SFTP_ERRORS as e:
            raise TransferError(f"put {remote_path} failed: {e}") from e

    def _is_dir(self, remote_path: str) -> bool:
        try:
            attrs = self._client().stat(remote_path)
        except OSError:
            return False
        return attrs.st_mode is not None and stat.S_ISDIR(attrs.st_mode)

    def ensure_dir(self, remote_path: str) -> None:
        sftp = self._client()
        for directory in iter_dir_prefixes(remote_path):
            if self._is_dir(directory):
                continue
            try:
                sftp.mkdir(directory)
                logger.debug(f"Created remote directory {directory}")
            except _SFTP_ERRORS as e:
                # SFTPv3 servers report "File exists" as a generic failure,
                # so a concurrent mkdir is confirmed by probing again
                if "File exists" in str(e) or self._is_dir(directory):
                    continue
                raise TransferError(f"mkdir {directory} failed: {e}") from e

    def close(self) -> None:
        sftp, self._sftp = self._sftp, None
        ssh, self._ssh = self._ssh, None
        if sftp is not None:
            try:
                sftp.close()
            except _SFTP_ERRORS as e:
                logger.debug(f"Closing SFTP session failed: {e}")
        if ssh is not None:
            ssh.close()
