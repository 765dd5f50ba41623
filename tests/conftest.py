"""Shared fixtures for pyftpkit tests."""

import os
import threading
import time
from pathlib import Path
from unittest.mock import Mock

import pytest

from pyftpkit.config import ConnectionParams
from pyftpkit.exceptions import RemoteConnectionError, TransferError
from pyftpkit.output import OutputFormatter
from pyftpkit.upload import UploadJob


class FakeServer:
    """In-memory remote server shared by every FakeTransport of a test.

    Records each call as an ``(operation, path)`` event so tests can assert
    ordering, retry counts and connection concurrency.
    """

    def __init__(self, upload_delay: float = 0.0):
        self.lock = threading.Lock()
        self.events: list[tuple[str, str]] = []
        self.files: dict[str, tuple[int, float]] = {}
        self.dirs: set[str] = set()
        self.upload_delay = upload_delay
        self.failing_paths: set[str] = set()
        self.fail_connect = False
        self.open_connections = 0
        self.max_open_connections = 0
        self.connect_calls = 0

    def record(self, operation: str, path: str = "") -> None:
        with self.lock:
            self.events.append((operation, path))

    def uploads(self) -> list[str]:
        """Remote paths of every upload attempt, in order."""
        with self.lock:
            return [path for op, path in self.events if op == "upload"]

    def factory(self) -> "FakeTransport":
        return FakeTransport(self)


class FakeTransport:
    """Transport writing to a FakeServer."""

    def __init__(self, server: FakeServer):
        self.server = server
        self.connected = False

    def connect(self) -> None:
        server = self.server
        with server.lock:
            server.connect_calls += 1
            if self.connected:
                server.open_connections -= 1
                self.connected = False
            if server.fail_connect:
                raise RemoteConnectionError("Connection refused")
            server.open_connections += 1
            server.max_open_connections = max(
                server.max_open_connections, server.open_connections
            )
            self.connected = True
        server.record("connect")

    def size(self, remote_path: str) -> int:
        with self.server.lock:
            if remote_path not in self.server.files:
                raise TransferError(f"No such file: {remote_path}")
            return self.server.files[remote_path][0]

    def last_modified(self, remote_path: str) -> float:
        with self.server.lock:
            if remote_path not in self.server.files:
                raise TransferError(f"No such file: {remote_path}")
            return self.server.files[remote_path][1]

    def upload_from(self, local_path: str, remote_path: str) -> None:
        self.server.record("upload", remote_path)
        if self.server.upload_delay:
            time.sleep(self.server.upload_delay)
        if remote_path in self.server.failing_paths:
            raise TransferError(f"Upload of {remote_path} rejected")
        with self.server.lock:
            self.server.files[remote_path] = (os.path.getsize(local_path), time.time())

    def ensure_dir(self, remote_path: str) -> None:
        self.server.record("mkdir", remote_path)
        with self.server.lock:
            self.server.dirs.add(remote_path)

    def close(self) -> None:
        with self.server.lock:
            if self.connected:
                self.server.open_connections -= 1
                self.connected = False
        self.server.record("close")


@pytest.fixture
def fake_server():
    """Provide an empty fake remote server."""
    return FakeServer()


@pytest.fixture
def mock_output():
    """Create a mock output formatter."""
    output = Mock(spec=OutputFormatter)
    output.quiet = True
    output.json_output = False
    output.console = Mock()
    output.err_console = Mock()
    return output


@pytest.fixture
def site_dir(tmp_path):
    """Create a small static site to upload."""
    site = tmp_path / "site"
    (site / "css").mkdir(parents=True)
    (site / "js").mkdir()
    (site / "css" / "a.css").write_text("body { color: red; }")
    (site / "js" / "b.js").write_text("console.log('b');")
    (site / "index.html").write_text("<html></html>")
    return site


@pytest.fixture
def connection():
    return ConnectionParams(host="ftp.example.com", username="user", password="pw")


@pytest.fixture
def make_server():
    """Factory for fake servers with custom settings."""
    return FakeServer


@pytest.fixture
def make_job(connection):
    """Factory building an UploadJob that targets ``/www``."""

    def _make_job(local_root: Path, **kwargs) -> UploadJob:
        return UploadJob(
            local_root=local_root,
            remote_root=kwargs.pop("remote_root", "/www"),
            connection=connection,
            **kwargs,
        )

    return _make_job
