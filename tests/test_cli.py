"""Unit tests for the ftpkit CLI commands."""

import json
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from pyftpkit.cli import _merge_options, main
from pyftpkit.exceptions import RemoteConnectionError, RunFailedError
from pyftpkit.upload import RunStatus, UploadResult


@pytest.fixture
def runner():
    """Provide a Click CLI test runner with no FTPKIT_* variables set."""
    return CliRunner(
        env={
            "FTPKIT_HOST": None,
            "FTPKIT_PORT": None,
            "FTPKIT_USER": None,
            "FTPKIT_PASSWORD": None,
        }
    )


@pytest.fixture
def mock_engine():
    """Mock the upload engine used by the CLI."""
    with patch("pyftpkit.cli.UploadEngine") as mock_class:
        mock_class.return_value.run.return_value = UploadResult(
            status=RunStatus.COMPLETED,
            total_files=3,
            uploaded_files=2,
            skipped_files=1,
            uploaded_bytes=2048,
            total_bytes=2048,
        )
        yield mock_class


def _upload_args(local_dir, *extra):
    return [
        "upload",
        "--local-dir",
        str(local_dir),
        "--remote-dir",
        "/www",
        "--host",
        "ftp.example.com",
        "--display",
        "none",
        *extra,
    ]


class TestMainGroup:
    """Tests for the main CLI group."""

    def test_main_help(self, runner):
        """Test main help shows the upload command."""
        result = runner.invoke(main, ["--help"])
        assert result.exit_code == 0
        assert "ftpkit" in result.output
        assert "upload" in result.output

    def test_upload_help(self, runner):
        result = runner.invoke(main, ["upload", "--help"])
        assert result.exit_code == 0
        assert "--local-dir" in result.output
        assert "--entry" in result.output
        assert "--max-concurrency" in result.output


class TestUploadCommand:
    """Tests for the upload command."""

    def test_upload_success(self, runner, mock_engine, tmp_path):
        """Test a successful upload prints the summary."""
        result = runner.invoke(main, _upload_args(tmp_path))

        assert result.exit_code == 0
        assert "Upload Complete" in result.output
        mock_engine.return_value.run.assert_called_once()

    def test_upload_builds_job(self, runner, mock_engine, tmp_path):
        """Test that command line options end up in the UploadJob."""
        result = runner.invoke(
            main,
            _upload_args(
                tmp_path,
                "--user",
                "deploy",
                "--password",
                "secret",
                "--mode",
                "ssh",
                "--entry",
                "404.html",
                "--entry",
                "index.html",
                "-j",
                "5",
            ),
        )

        assert result.exit_code == 0
        job = mock_engine.call_args[0][0]
        assert job.local_root == tmp_path.resolve()
        assert job.remote_root == "/www"
        assert job.entry_names == ("404.html", "index.html")
        assert job.max_concurrency == 5
        assert job.connection.host == "ftp.example.com"
        assert job.connection.protocol == "sftp"
        assert job.connection.port == 22
        assert job.connection.username == "deploy"
        assert job.connection.password == "secret"

    def test_upload_defaults(self, runner, mock_engine, tmp_path):
        result = runner.invoke(main, _upload_args(tmp_path))

        assert result.exit_code == 0
        job = mock_engine.call_args[0][0]
        assert job.entry_names == ("index.html",)
        assert job.max_concurrency == 3
        assert job.connection.protocol == "ftp"
        assert job.connection.port == 21
        assert job.connection.secure is False

    def test_host_from_environment(self, mock_engine, tmp_path):
        runner = CliRunner(env={"FTPKIT_HOST": "env.example.com"})

        result = runner.invoke(
            main,
            ["upload", "-l", str(tmp_path), "-r", "/www", "--display", "none"],
        )

        assert result.exit_code == 0
        assert mock_engine.call_args[0][0].connection.host == "env.example.com"

    def test_missing_host(self, runner, mock_engine, tmp_path):
        """Test that a missing host is a usage error."""
        result = runner.invoke(
            main, ["upload", "--local-dir", str(tmp_path), "--remote-dir", "/www"]
        )

        assert result.exit_code == 2
        assert "--host" in result.output
        mock_engine.assert_not_called()

    def test_invalid_port(self, runner, mock_engine, tmp_path):
        result = runner.invoke(main, _upload_args(tmp_path, "--port", "70000"))

        assert result.exit_code == 2
        mock_engine.assert_not_called()

    def test_zero_concurrency_rejected(self, runner, mock_engine, tmp_path):
        result = runner.invoke(main, _upload_args(tmp_path, "-j", "0"))

        assert result.exit_code == 2
        mock_engine.assert_not_called()

    def test_failed_files(self, runner, mock_engine, tmp_path):
        """Test that failed files give exit code 1."""
        mock_engine.return_value.run.side_effect = RunFailedError(["/site/a.css"])

        result = runner.invoke(main, _upload_args(tmp_path))

        assert result.exit_code == 1
        assert "Upload failed for 1 files." in result.output

    def test_connection_error(self, runner, mock_engine, tmp_path):
        mock_engine.return_value.run.side_effect = RemoteConnectionError(
            "Cannot connect to ftp://ftp.example.com:21"
        )

        result = runner.invoke(main, _upload_args(tmp_path))

        assert result.exit_code == 1
        assert "Upload failed: Cannot connect" in result.output

    def test_keyboard_interrupt(self, runner, mock_engine, tmp_path):
        """Test that Ctrl+C cancels the engine and exits with 130."""
        mock_engine.return_value.run.side_effect = KeyboardInterrupt

        result = runner.invoke(main, _upload_args(tmp_path))

        assert result.exit_code == 130
        mock_engine.return_value.cancel.assert_called_once()

    def test_cancelled_run(self, runner, mock_engine, tmp_path):
        mock_engine.return_value.run.return_value = UploadResult(
            status=RunStatus.CANCELLED
        )

        result = runner.invoke(main, _upload_args(tmp_path))

        assert result.exit_code == 130

    def test_json_output(self, runner, mock_engine, tmp_path):
        result = runner.invoke(main, ["--json", *_upload_args(tmp_path)])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["success"] is True
        assert data["uploaded"] == 2
        assert data["skipped"] == 1

    def test_quiet_output(self, runner, mock_engine, tmp_path):
        result = runner.invoke(main, ["--quiet", *_upload_args(tmp_path)])

        assert result.exit_code == 0
        assert "Upload Complete" not in result.output


class TestJobFile:
    """Tests for loading the upload job from a JSON file."""

    def _write_job(self, tmp_path, **data):
        job_file = tmp_path / "deploy.json"
        job_file.write_text(json.dumps(data))
        return job_file

    def test_job_file(self, runner, mock_engine, tmp_path):
        """Test that a relative localDir resolves against the job file."""
        (tmp_path / "dist").mkdir()
        job_file = self._write_job(
            tmp_path,
            localDir="dist",
            remoteDir="/site/wwwroot",
            host="sftp.example.com",
            mode="sftp",
            entries=["index.html", "200.html"],
            maxConcurrency=2,
        )

        result = runner.invoke(
            main, ["upload", "--config", str(job_file), "--display", "none"]
        )

        assert result.exit_code == 0
        job = mock_engine.call_args[0][0]
        assert job.local_root == (tmp_path / "dist").resolve()
        assert job.remote_root == "/site/wwwroot"
        assert job.connection.protocol == "sftp"
        assert job.entry_names == ("index.html", "200.html")
        assert job.max_concurrency == 2

    def test_options_override_job_file(self, runner, mock_engine, tmp_path):
        job_file = self._write_job(
            tmp_path,
            localDir=str(tmp_path),
            remoteDir="/old",
            host="ftp.example.com",
        )

        result = runner.invoke(
            main,
            [
                "upload",
                "-c",
                str(job_file),
                "--remote-dir",
                "/new",
                "--secure",
                "--display",
                "none",
            ],
        )

        assert result.exit_code == 0
        job = mock_engine.call_args[0][0]
        assert job.remote_root == "/new"
        assert job.connection.secure is True

    def test_invalid_job_file(self, runner, mock_engine, tmp_path):
        job_file = tmp_path / "deploy.json"
        job_file.write_text("{not json")

        result = runner.invoke(main, ["upload", "-c", str(job_file)])

        assert result.exit_code == 2
        assert "Invalid JSON" in result.output

    @pytest.mark.parametrize(
        "field,value",
        [("maxConcurrency", "abc"), ("maxConcurrency", 2.5), ("port", "ftp")],
    )
    def test_non_integer_job_values(
        self, runner, mock_engine, tmp_path, field, value
    ):
        """Test that malformed numbers in a job file are usage errors."""
        job_file = self._write_job(
            tmp_path,
            localDir=str(tmp_path),
            remoteDir="/www",
            host="ftp.example.com",
            **{field: value},
        )

        result = runner.invoke(main, ["upload", "-c", str(job_file)])

        assert result.exit_code == 2
        assert "must be an integer" in result.output
        mock_engine.assert_not_called()


class TestMergeOptions:
    """Tests for _merge_options."""

    def test_unset_options_keep_base(self):
        merged = _merge_options({"host": "a", "entries": ["x"]}, host=None, entries=())

        assert merged == {"host": "a", "entries": ["x"]}

    def test_given_options_override(self):
        merged = _merge_options({"host": "a"}, host="b", entries=("x", "y"))

        assert merged == {"host": "b", "entries": ["x", "y"]}

    def test_false_flag_overrides(self):
        merged = _merge_options({"secure": True}, secure=False)

        assert merged == {"secure": False}
