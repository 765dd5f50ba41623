"""Same-file check used to skip unchanged uploads."""

import logging

from ..transports.base import Transport

logger = logging.getLogger(__name__)


def is_same_file(
    transport: Transport,
    local_size: int,
    local_mtime: float,
    remote_path: str,
) -> bool:
    """Decide whether the remote copy of a file can be left alone.

    The remote file counts as the same when its size equals the local size
    and its modification time is not older than the local one. A missing
    remote file, or any failure querying it, counts as different.

    The mtime rule is approximate: a remote file whose clock runs ahead can
    be treated as up to date although its content differs.

    Args:
        transport: Connected transport
        local_size: Local file size in bytes
        local_mtime: Local modification time (Unix timestamp)
        remote_path: Remote file path

    Returns:
        True if the upload can be skipped
    """
    try:
        remote_size = transport.size(remote_path)
        remote_mtime = transport.last_modified(remote_path)
    except Exception as e:
        # Missing file or failed query: upload again
        logger.debug(f"Remote file {remote_path} not comparable: {e}")
        return False

    same = remote_size == local_size and remote_mtime >= local_mtime
    logger.debug(
        "Compare %s: local %d bytes @ %.3f, remote %d bytes @ %.3f -> %s",
        remote_path,
        local_size,
        local_mtime,
        remote_size,
        remote_mtime,
        "same" if same else "different",
    )
    return same
