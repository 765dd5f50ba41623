"""Protocol transports used by the upload engine."""

from ..config import PROTOCOL_FTP, PROTOCOL_SFTP, ConnectionParams
from ..exceptions import UploadConfigError
from .base import Transport, TransportFactory, iter_dir_prefixes
from .ftp import FtpTransport


def create_transport(params: ConnectionParams) -> Transport:
    """Create an unconnected transport for ``params.protocol``.

    Args:
        params: Connection parameters

    Returns:
        FtpTransport or SftpTransport instance
    """
    if params.protocol == PROTOCOL_FTP:
        return FtpTransport(params)
    if params.protocol == PROTOCOL_SFTP:
        # paramiko is only imported when SFTP is used
        from .sftp import SftpTransport

        return SftpTransport(params)
    raise UploadConfigError(f"Unsupported protocol: {params.protocol}")


__all__ = [
    "Transport",
    "TransportFactory",
    "FtpTransport",
    "create_transport",
    "iter_dir_prefixes",
]
