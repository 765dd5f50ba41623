"""CLI interface for pyftpkit."""

import logging
from typing import Any, Optional

import click

from .cli_progress import DISPLAY_MODES, DISPLAY_TEXT, create_reporter
from .exceptions import FtpkitError, RunFailedError
from .output import OutputFormatter
from .upload import RunStatus, UploadEngine, UploadJob, load_job_file
from .utils import format_size

logger = logging.getLogger(__name__)


def _merge_options(base: dict[str, Any], **overrides: Any) -> dict[str, Any]:
    """Overlay command line values on job file values.

    Options that were not given on the command line (``None`` or an empty
    tuple) keep the job file value.
    """
    merged = dict(base)
    for key, value in overrides.items():
        if value is None or value == ():
            continue
        merged[key] = list(value) if isinstance(value, tuple) else value
    return merged


@click.group()
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.option("--json", is_flag=True, help="Output the result summary as JSON")
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose/debug logging output",
)
@click.version_option(package_name="pyftpkit")
@click.pass_context
def main(ctx: Any, quiet: bool, json: bool, verbose: bool) -> None:
    """ftpkit - Upload a local directory to an FTP or SFTP server."""
    ctx.ensure_object(dict)
    ctx.obj["out"] = OutputFormatter(json_output=json, quiet=quiet)
    ctx.obj["verbose"] = verbose

    # Configure logging based on verbose flag
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%H:%M:%S",
        )
        logging.getLogger("pyftpkit").setLevel(logging.DEBUG)
        # paramiko logs every packet at DEBUG
        logging.getLogger("paramiko").setLevel(logging.INFO)
    else:
        logging.basicConfig(level=logging.WARNING)


@main.command()
@click.option(
    "--config",
    "-c",
    "config_file",
    type=click.Path(exists=True, dir_okay=False),
    help="JSON job file; command line options override its values",
)
@click.option("--local-dir", "-l", help="Local directory path")
@click.option("--remote-dir", "-r", help="Remote directory path")
@click.option("--host", envvar="FTPKIT_HOST", help="Server host")
@click.option(
    "--port",
    type=int,
    envvar="FTPKIT_PORT",
    help="Server port (default: 21 for ftp, 22 for sftp)",
)
@click.option("--user", "-u", envvar="FTPKIT_USER", help="Server user")
@click.option("--password", "-p", envvar="FTPKIT_PASSWORD", help="Server password")
@click.option(
    "--key",
    "-k",
    "private_key",
    type=click.Path(exists=True, dir_okay=False),
    help="Private key file (sftp only)",
)
@click.option(
    "--mode",
    "-m",
    type=click.Choice(["ftp", "sftp", "ssh"], case_sensitive=False),
    default=None,
    help="Transfer protocol (default: ftp)",
)
@click.option(
    "--secure/--no-secure",
    default=None,
    help="Use FTP over TLS (ftp only)",
)
@click.option(
    "--entry",
    "-e",
    "entries",
    multiple=True,
    help="Entry file name uploaded after all other files "
    "(repeatable, default: index.html)",
)
@click.option(
    "--max-concurrency",
    "-j",
    type=click.IntRange(min=1),
    default=None,
    help="Parallel connections per phase (default: 3)",
)
@click.option(
    "--display",
    type=click.Choice(DISPLAY_MODES),
    default=DISPLAY_TEXT,
    help="Progress display (default: text)",
)
@click.pass_context
def upload(
    ctx: Any,
    config_file: Optional[str],
    local_dir: Optional[str],
    remote_dir: Optional[str],
    host: Optional[str],
    port: Optional[int],
    user: Optional[str],
    password: Optional[str],
    private_key: Optional[str],
    mode: Optional[str],
    secure: Optional[bool],
    entries: tuple[str, ...],
    max_concurrency: Optional[int],
    display: str,
) -> None:
    """Upload a local directory, skipping files that are unchanged remotely.

    Entry files (index.html by default) are uploaded only after every other
    file, so the new version goes live in one step.
    """
    out: OutputFormatter = ctx.obj["out"]

    try:
        base = load_job_file(config_file) if config_file else {}
        data = _merge_options(
            base,
            localDir=local_dir,
            remoteDir=remote_dir,
            host=host,
            port=port,
            user=user,
            password=password,
            privateKey=private_key,
            mode=mode,
            secure=secure,
            entries=entries,
            maxConcurrency=max_concurrency,
        )
        missing = [
            option
            for key, option in (
                ("localDir", "--local-dir"),
                ("remoteDir", "--remote-dir"),
                ("host", "--host"),
            )
            if not data.get(key)
        ]
        if missing:
            raise click.UsageError(f"Missing option(s): {', '.join(missing)}")

        job = UploadJob.from_dict(data)
    except FtpkitError as e:
        raise click.UsageError(str(e)) from e

    logger.debug(f"Upload job: {job}")

    # Progress displays would garble JSON output
    if out.json_output or out.quiet:
        display = "none"
    reporter = create_reporter(display, output=out)
    engine = UploadEngine(job, output=out, reporter=reporter)

    try:
        result = engine.run()
    except KeyboardInterrupt:
        engine.cancel()
        ctx.exit(130)  # Standard exit code for SIGINT
    except RunFailedError as e:
        if out.json_output:
            out.output_json({"success": False, "failed": e.failed_files})
        out.error(str(e))
        ctx.exit(1)
    except FtpkitError as e:
        out.error(f"Upload failed: {e}")
        ctx.exit(1)

    if out.json_output:
        out.output_json(
            {
                "success": result.status == RunStatus.COMPLETED,
                "status": result.status.value,
                "uploaded": result.uploaded_files,
                "skipped": result.skipped_files,
                "bytes": result.uploaded_bytes,
            }
        )
    else:
        out.print_summary(
            "Upload Complete",
            [
                ("Uploaded", f"{result.uploaded_files} files"),
                ("Unchanged", f"{result.skipped_files} files"),
                ("Size", format_size(result.total_bytes)),
            ],
        )

    if result.status == RunStatus.CANCELLED:
        ctx.exit(130)


if __name__ == "__main__":
    main()
