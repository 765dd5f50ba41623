"""FTP and FTPS transport built on ftplib."""

import ftplib
import logging
from datetime import datetime, timezone
from typing import Optional

from ..config import ConnectionParams
from ..exceptions import RemoteConnectionError, TransferError
from .base import iter_dir_prefixes

logger = logging.getLogger(__name__)


def parse_mdtm_response(response: str) -> float:
    """Parse an ``MDTM`` reply into a Unix timestamp.

    Servers answer ``213 YYYYMMDDHHMMSS[.sss]`` in UTC.

    Args:
        response: Raw server reply

    Returns:
        Unix timestamp

    Raises:
        ValueError: If the reply does not contain a timestamp

    Examples:
        >>> parse_mdtm_response("213 20240115103000")
        1705314600.0
        >>> parse_mdtm_response("213 20240115103000.250")
        1705314600.25
    """
    parts = response.strip().split()
    if len(parts) < 2 or not parts[0].startswith("213"):
        raise ValueError(f"Unexpected MDTM reply: {response!r}")
    value = parts[-1]
    whole, _, fraction = value.partition(".")
    dt = datetime.strptime(whole, "%Y%m%d%H%M%S").replace(tzinfo=timezone.utc)
    timestamp = dt.timestamp()
    if fraction:
        timestamp += float(f"0.{fraction}")
    return timestamp


class FtpTransport:
    """Transport over plain FTP or explicit FTP over TLS."""

    def __init__(self, params: ConnectionParams):
        """Initialize FTP transport.

        Args:
            params: Connection parameters (protocol must be ``ftp``)
        """
        self.params = params
        self._ftp: Optional[ftplib.FTP] = None

    def connect(self) -> None:
        self.close()
        params = self.params
        ftp: ftplib.FTP
        if params.secure:
            ftp = ftplib.FTP_TLS(timeout=params.timeout)
        else:
            ftp = ftplib.FTP(timeout=params.timeout)
        try:
            ftp.connect(params.host, params.port)
            ftp.login(params.username or "anonymous", params.password or "")
            if params.secure:
                ftp.prot_p()
            # SIZE is only reliable in binary mode
            ftp.voidcmd("TYPE I")
        except ftplib.all_errors as e:
            ftp.close()
            raise RemoteConnectionError(
                f"Cannot connect to ftp://{params.host}:{params.port}: {e}"
            ) from e
        logger.debug(f"Connected to ftp://{params.host}:{params.port}")
        self._ftp = ftp

    def _client(self) -> ftplib.FTP:
        if self._ftp is None:
            raise TransferError("FTP transport is not connected")
        return self._ftp

    def size(self, remote_path: str) -> int:
        try:
            size = self._client().size(remote_path)
        except ftplib.all_errors as e:
            raise TransferError(f"SIZE {remote_path} failed: {e}") from e
        if size is None:
            raise TransferError(f"SIZE {remote_path} returned no value")
        return size

    def last_modified(self, remote_path: str) -> float:
        try:
            response = self._client().voidcmd(f"MDTM {remote_path}")
            return parse_mdtm_response(response)
        except ftplib.all_errors as e:
            raise TransferError(f"MDTM {remote_path} failed: {e}") from e
        except ValueError as e:
            raise TransferError(str(e)) from e

    def upload_from(self, local_path: str, remote_path: str) -> None:
        ftp = self._client()
        try:
            with open(local_path, "rb") as f:
                ftp.storbinary(f"STOR {remote_path}", f)
        except ftplib.all_errors as e:
            raise TransferError(f"STOR {remote_path} failed: {e}") from e

    def _is_dir(self, remote_path: str) -> bool:
        """Probe a directory by changing into it and back."""
        ftp = self._client()
        cwd = ftp.pwd()
        try:
            ftp.cwd(remote_path)
        except ftplib.error_perm:
            return False
        finally:
            ftp.cwd(cwd)
        return True

    def ensure_dir(self, remote_path: str) -> None:
        ftp = self._client()
        for directory in iter_dir_prefixes(remote_path):
            try:
                ftp.mkd(directory)
                logger.debug(f"Created remote directory {directory}")
            except ftplib.error_perm as e:
                # 550 covers both "exists" and "denied"; only a successful
                # probe counts as existing
                try:
                    exists = self._is_dir(directory)
                except ftplib.all_errors as probe_error:
                    raise TransferError(
                        f"MKD {directory} failed: {e}"
                    ) from probe_error
                if not exists:
                    raise TransferError(f"MKD {directory} failed: {e}") from e
            except ftplib.all_errors as e:
                raise TransferError(f"MKD {directory} failed: {e}") from e

    def close(self) -> None:
        if self._ftp is None:
            return
        ftp, self._ftp = self._ftp, None
        try:
            ftp.quit()
        except ftplib.all_errors as e:
            logger.debug(f"FTP QUIT failed, closing socket: {e}")
            ftp.close()
