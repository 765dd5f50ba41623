"""Capability interface every transport implements."""

from typing import Callable, Protocol


class Transport(Protocol):
    """One connection to a remote server.

    The upload engine only talks to transports through these methods, so it
    has no FTP or SFTP specific branches. ``connect`` may be called again on
    an already connected transport to re-establish the session after a
    failure; implementations close the old session first.
    """

    def connect(self) -> None:
        """Open and authenticate the connection.

        Raises:
            RemoteConnectionError: If the server is unreachable or rejects
                the credentials
        """
        ...

    def size(self, remote_path: str) -> int:
        """Return the size in bytes of ``remote_path``."""
        ...

    def last_modified(self, remote_path: str) -> float:
        """Return the modification time of ``remote_path`` (Unix timestamp)."""
        ...

    def upload_from(self, local_path: str, remote_path: str) -> None:
        """Upload ``local_path`` to ``remote_path``, replacing it."""
        ...

    def ensure_dir(self, remote_path: str) -> None:
        """Create ``remote_path`` and any missing parents.

        Succeeds when the directory already exists. The built-in transports
        detect existing directories themselves; other transports may raise
        RemoteDirectoryExistsError instead, which callers treat as success.
        """
        ...

    def close(self) -> None:
        """Close the connection. Safe to call on a closed transport."""
        ...


TransportFactory = Callable[[], Transport]


def iter_dir_prefixes(remote_path: str) -> list[str]:
    """List every directory from the top of ``remote_path`` down to itself.

    Examples:
        >>> iter_dir_prefixes("/site/css/img")
        ['/site', '/site/css', '/site/css/img']
        >>> iter_dir_prefixes("site/css/")
        ['site', 'site/css']
        >>> iter_dir_prefixes("/")
        []
    """
    is_absolute = remote_path.startswith("/")
    parts = [p for p in remote_path.split("/") if p and p != "."]
    prefixes: list[str] = []
    current = "/" if is_absolute else ""
    for part in parts:
        current = f"{current}{part}" if current in ("", "/") else f"{current}/{part}"
        prefixes.append(current)
    return prefixes
