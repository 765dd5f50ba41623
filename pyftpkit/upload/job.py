"""Upload job definition and JSON job files."""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Union

from ..config import ConnectionParams, parse_int
from ..exceptions import UploadConfigError
from ..utils import DEFAULT_ENTRY_NAMES, DEFAULT_MAX_CONCURRENCY


@dataclass(frozen=True)
class UploadJob:
    """Everything one upload run needs. Immutable once a run starts.

    Examples:
        >>> job = UploadJob(
        ...     local_root="dist",
        ...     remote_root="/site/wwwroot",
        ...     connection=ConnectionParams(host="ftp.example.com"),
        ... )
        >>> job.entry_names
        ('index.html',)
    """

    local_root: Path
    """Local directory to upload (made absolute)"""

    remote_root: str
    """Remote destination directory"""

    connection: ConnectionParams

    entry_names: tuple[str, ...] = DEFAULT_ENTRY_NAMES
    """Base names uploaded last, in this order"""

    max_concurrency: int = DEFAULT_MAX_CONCURRENCY
    """Upper bound on connections per phase"""

    def __post_init__(self) -> None:
        object.__setattr__(self, "local_root", Path(self.local_root).resolve())
        remote_root = str(self.remote_root).replace("\\", "/")
        if not remote_root:
            raise UploadConfigError("A remote directory is required")
        object.__setattr__(self, "remote_root", remote_root)
        if isinstance(self.entry_names, str):
            entry_names: tuple[str, ...] = (self.entry_names,)
        else:
            entry_names = tuple(self.entry_names)
        object.__setattr__(self, "entry_names", entry_names)
        max_concurrency = parse_int(self.max_concurrency, "max_concurrency")
        if max_concurrency < 1:
            raise UploadConfigError(
                f"max_concurrency must be a positive integer, "
                f"got {self.max_concurrency}"
            )
        object.__setattr__(self, "max_concurrency", max_concurrency)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "UploadJob":
        """Create an UploadJob from a job file dictionary.

        Keys follow the command line option names: ``localDir``,
        ``remoteDir``, ``host``, ``port``, ``user``, ``password``,
        ``privateKey``, ``passphrase``, ``mode``, ``secure``, ``entries``,
        ``maxConcurrency``.

        Raises:
            UploadConfigError: If required fields are missing
        """
        missing = [k for k in ("localDir", "remoteDir", "host") if not data.get(k)]
        if missing:
            raise UploadConfigError(f"Missing required fields: {', '.join(missing)}")

        connection = ConnectionParams(
            host=data["host"],
            protocol=data.get("mode", "ftp"),
            port=data.get("port"),
            username=data.get("user"),
            password=data.get("password"),
            private_key=data.get("privateKey"),
            passphrase=data.get("passphrase"),
            secure=bool(data.get("secure", False)),
        )
        return cls(
            local_root=Path(data["localDir"]),
            remote_root=data["remoteDir"],
            connection=connection,
            entry_names=tuple(data.get("entries") or DEFAULT_ENTRY_NAMES),
            max_concurrency=data.get("maxConcurrency", DEFAULT_MAX_CONCURRENCY),
        )


def load_job_file(path: Union[str, Path]) -> dict[str, Any]:
    """Read a JSON job file into a dictionary.

    A relative ``localDir`` is resolved against the job file's directory.

    Raises:
        UploadConfigError: If the file cannot be read or is not a JSON object
    """
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise UploadConfigError(f"Cannot read job file {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise UploadConfigError(f"Invalid JSON in job file {path}: {e}") from e

    if not isinstance(data, dict):
        raise UploadConfigError(f"Job file {path} must contain a JSON object")

    local_dir = data.get("localDir")
    if local_dir and not Path(local_dir).is_absolute():
        data["localDir"] = str(path.parent / local_dir)
    return data


def load_job_from_json(path: Union[str, Path]) -> UploadJob:
    """Load an UploadJob from a JSON job file."""
    return UploadJob.from_dict(load_job_file(path))

