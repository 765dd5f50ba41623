"""Local directory scanning and remote path mapping."""

import logging
import posixpath
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from ..exceptions import EnumerationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LocalFile:
    """A file found while scanning the local directory."""

    path: Path
    """Absolute path to the file"""

    name: str
    """Base name of the file"""

    @classmethod
    def from_path(cls, file_path: Path) -> "LocalFile":
        """Create LocalFile from a path.

        Args:
            file_path: Absolute path to the file

        Returns:
            LocalFile instance
        """
        return cls(path=file_path, name=file_path.name)


@dataclass(frozen=True)
class AnalyzedFile:
    """Local metadata and remote destination of one file."""

    local_size: int
    """File size in bytes"""

    local_mtime: float
    """Last modification time (Unix timestamp)"""

    remote_path: str
    """Destination path on the server (forward slashes only)"""


class DirectoryScanner:
    """Recursively lists the files below a local directory.

    Directories are descended into; everything else is reported as a file.
    Files are returned in directory listing order, depth first.

    Examples:
        >>> scanner = DirectoryScanner()
        >>> files = scanner.scan_local(Path("/var/www/dist"))
        >>> [f.name for f in files]
        ['app.js', 'style.css', 'index.html']
    """

    def scan_local(self, directory: Path) -> list[LocalFile]:
        """Recursively scan a local directory.

        Args:
            directory: Directory to scan

        Returns:
            List of LocalFile objects

        Raises:
            EnumerationError: If the directory or one of its subdirectories
                cannot be listed
        """
        files: list[LocalFile] = []

        try:
            items = list(directory.iterdir())
        except OSError as e:
            raise EnumerationError(f"Cannot read directory {directory}: {e}") from e

        for item in items:
            if item.is_dir():
                files.extend(self.scan_local(item))
            else:
                files.append(LocalFile.from_path(item.absolute()))

        return files


def partition_entry_files(
    files: Sequence[LocalFile], entry_names: Sequence[str]
) -> tuple[list[LocalFile], list[LocalFile]]:
    """Split files into regular files and entry files.

    A file is an entry file when its base name is listed in ``entry_names``.
    Entry files are ordered by the position of their name in
    ``entry_names``; files sharing a name keep their scan order. Regular
    files keep their scan order.

    Args:
        files: Scanned files
        entry_names: Ordered entry file names

    Returns:
        Tuple of (regular_files, entry_files)

    Examples:
        >>> files = [LocalFile(Path("/d/index.html"), "index.html"),
        ...          LocalFile(Path("/d/a.css"), "a.css"),
        ...          LocalFile(Path("/d/404.html"), "404.html")]
        >>> regular, entries = partition_entry_files(
        ...     files, ["404.html", "index.html"])
        >>> [f.name for f in regular], [f.name for f in entries]
        (['a.css'], ['404.html', 'index.html'])
    """
    rank: dict[str, int] = {}
    for position, name in enumerate(entry_names):
        rank.setdefault(name, position)

    regular_files: list[LocalFile] = []
    entry_files: list[LocalFile] = []
    for local_file in files:
        if local_file.name in rank:
            entry_files.append(local_file)
        else:
            regular_files.append(local_file)

    # sorted() is stable, so equal ranks keep scan order
    entry_files = sorted(entry_files, key=lambda f: rank[f.name])
    return regular_files, entry_files


def map_remote_path(
    local_path: Union[str, Path],
    local_root: Union[str, Path],
    remote_root: str,
) -> str:
    """Derive the remote path of a local file.

    The ``local_root`` prefix is stripped from ``local_path``, separators
    are turned into forward slashes and the rest is joined onto
    ``remote_root``.

    Raises:
        ValueError: If ``local_path`` is not below ``local_root``

    Examples:
        >>> map_remote_path("/srv/dist/css/a.css", "/srv/dist", "/www")
        '/www/css/a.css'
        >>> map_remote_path("C:\\\\dist\\\\js\\\\b.js", "C:\\\\dist", "www/")
        'www/js/b.js'
    """
    local_path = str(local_path)
    local_root = str(local_root)
    if not local_path.startswith(local_root):
        raise ValueError(f"{local_path} is not inside {local_root}")

    suffix = local_path[len(local_root) :].replace("\\", "/").lstrip("/")
    root = remote_root.replace("\\", "/")
    if not suffix:
        return posixpath.normpath(root)
    return posixpath.normpath(posixpath.join(root, suffix))


def analyze_file(
    local_path: Union[str, Path],
    local_root: Union[str, Path],
    remote_root: str,
) -> AnalyzedFile:
    """Stat a local file and compute its remote destination.

    Raises:
        OSError: If the local file cannot be stat'd
    """
    file_stat = Path(local_path).stat()
    return AnalyzedFile(
        local_size=file_stat.st_size,
        local_mtime=file_stat.st_mtime,
        remote_path=map_remote_path(local_path, local_root, remote_root),
    )


def total_size(files: Sequence[LocalFile]) -> int:
    """Sum the sizes of ``files``.

    Raises:
        EnumerationError: If a file cannot be stat'd
    """
    total = 0
    for local_file in files:
        try:
            total += local_file.path.stat().st_size
        except OSError as e:
            raise EnumerationError(f"Cannot stat {local_file.path}: {e}") from e
    logger.debug(f"Total size of {len(files)} file(s): {total} bytes")
    return total
