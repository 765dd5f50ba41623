"""Utility functions and constants for pyftpkit."""

# =============================================================================
# Constants for upload runs
# =============================================================================

# Entry files uploaded after every other file
DEFAULT_ENTRY_NAMES: tuple[str, ...] = ("index.html",)

# Number of parallel connections per phase
DEFAULT_MAX_CONCURRENCY: int = 3

# Attempts per file before giving up (each failure triggers a reconnect)
DEFAULT_MAX_ATTEMPTS: int = 5

# Delay between attempts of the same file
DEFAULT_RETRY_DELAY: float = 0.0  # seconds

DEFAULT_FTP_PORT: int = 21
DEFAULT_SFTP_PORT: int = 22

# Socket timeout for transports
DEFAULT_TIMEOUT: float = 30.0  # seconds


# =============================================================================
# Size formatting utilities
# =============================================================================


def format_size(size_bytes: int) -> str:
    """Format file size in human-readable format.

    Args:
        size_bytes: Size in bytes

    Returns:
        Formatted size string (e.g., "1.5 MB", "256 B")
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    elif size_bytes < 1024 * 1024 * 1024:
        return f"{size_bytes / 1024 / 1024:.1f} MB"
    else:
        return f"{size_bytes / 1024 / 1024 / 1024:.1f} GB"


def calculate_percent(uploaded_bytes: int, total_bytes: int) -> int:
    """Calculate the rounded upload percentage.

    Halves round up. An empty run (``total_bytes == 0``) counts as fully
    uploaded.

    Examples:
        >>> calculate_percent(512, 1024)
        50
        >>> calculate_percent(1, 8)
        13
        >>> calculate_percent(0, 0)
        100
    """
    if total_bytes <= 0:
        return 100
    return int(uploaded_bytes * 100 / total_bytes + 0.5)
