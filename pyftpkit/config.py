"""Connection configuration for pyftpkit."""

from dataclasses import dataclass, field
from typing import Any, Optional

from .exceptions import UploadConfigError
from .utils import DEFAULT_FTP_PORT, DEFAULT_SFTP_PORT, DEFAULT_TIMEOUT

PROTOCOL_FTP = "ftp"
PROTOCOL_SFTP = "sftp"

# Accepted spellings for each transport
_PROTOCOL_ALIASES = {
    "ftp": PROTOCOL_FTP,
    "ftps": PROTOCOL_FTP,
    "sftp": PROTOCOL_SFTP,
    "ssh": PROTOCOL_SFTP,
}

_DEFAULT_PORTS = {
    PROTOCOL_FTP: DEFAULT_FTP_PORT,
    PROTOCOL_SFTP: DEFAULT_SFTP_PORT,
}


def normalize_protocol(protocol: str) -> str:
    """Return the canonical transport name for ``protocol``.

    Raises:
        UploadConfigError: If the protocol is not supported
    """
    try:
        return _PROTOCOL_ALIASES[protocol.strip().lower()]
    except KeyError:
        raise UploadConfigError(
            f"Unsupported protocol: {protocol!r} (expected 'ftp' or 'sftp')"
        ) from None


def parse_int(value: Any, name: str) -> int:
    """Convert a job file or option value to an integer.

    Integral floats such as ``3.0`` are accepted; booleans, fractions and
    non-numeric strings are not.

    Raises:
        UploadConfigError: If ``value`` is not an integer
    """
    if isinstance(value, bool):
        raise UploadConfigError(f"{name} must be an integer, got {value!r}")
    if isinstance(value, float):
        if not value.is_integer():
            raise UploadConfigError(f"{name} must be an integer, got {value!r}")
        return int(value)
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise UploadConfigError(f"{name} must be an integer, got {value!r}") from e


@dataclass(frozen=True)
class ConnectionParams:
    """How to reach and authenticate against the remote server.

    Each worker connects with the same parameters, and reconnects with them
    after a failed transfer attempt.
    """

    host: str
    """Server host name or address"""

    protocol: str = PROTOCOL_FTP
    """Transport: ``ftp`` or ``sftp`` (``ssh`` is accepted as an alias)"""

    port: Optional[int] = None
    """Server port; defaults to 21 for FTP and 22 for SFTP"""

    username: Optional[str] = None

    password: Optional[str] = field(default=None, repr=False)

    private_key: Optional[str] = None
    """Path to a private key file (SFTP only)"""

    passphrase: Optional[str] = field(default=None, repr=False)
    """Passphrase for an encrypted private key (SFTP only)"""

    secure: bool = False
    """Use explicit FTP over TLS (FTP only)"""

    timeout: float = DEFAULT_TIMEOUT

    def __post_init__(self) -> None:
        if not self.host:
            raise UploadConfigError("A remote host is required")
        protocol = normalize_protocol(self.protocol)
        # "ftps" implies TLS
        if self.protocol.strip().lower() == "ftps":
            object.__setattr__(self, "secure", True)
        object.__setattr__(self, "protocol", protocol)
        if self.port is None:
            object.__setattr__(self, "port", _DEFAULT_PORTS[protocol])
        else:
            port = parse_int(self.port, "port")
            if not 0 < port < 65536:
                raise UploadConfigError(f"Invalid port: {self.port}")
            object.__setattr__(self, "port", port)
