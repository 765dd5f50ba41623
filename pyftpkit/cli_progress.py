"""CLI progress displays for upload runs.

This module provides the Rich progress bar that follows an upload run and
builds the ProgressReporter matching a display mode.
"""

from typing import Optional

from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    TaskID,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
    TransferSpeedColumn,
)

from .exceptions import UploadConfigError
from .output import OutputFormatter
from .upload.progress import (
    ProgressCallback,
    ProgressObserver,
    ProgressReporter,
    TextProgressObserver,
    UploadProgress,
)

DISPLAY_BAR = "bar"
DISPLAY_TEXT = "text"
DISPLAY_NONE = "none"
DISPLAY_MODES = (DISPLAY_BAR, DISPLAY_TEXT, DISPLAY_NONE)


class UploadProgressDisplay:
    """Rich-based progress bar for upload runs.

    Shows uploaded bytes against the run total, the transfer speed and the
    file that finished last.
    """

    def __init__(self, output: Optional[OutputFormatter] = None) -> None:
        """Initialize the progress display.

        Args:
            output: Output formatter whose console the bar is drawn on
        """
        self.output = output
        self._progress: Optional[Progress] = None
        self._task: Optional[TaskID] = None

    def start(self, total_bytes: int) -> None:
        """Create the progress bar and start rendering it."""
        console = self.output.console if self.output is not None else None
        self._progress = Progress(
            TextColumn("[bold blue]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            DownloadColumn(),
            TransferSpeedColumn(),
            TimeElapsedColumn(),
            TextColumn("[cyan]{task.fields[current_file]}"),
            console=console,
            refresh_per_second=4,
        )
        self._progress.start()
        self._task = self._progress.add_task(
            "Uploading", total=total_bytes, current_file=""
        )

    def update(self, progress: UploadProgress) -> None:
        if self._progress is None or self._task is None:
            return
        self._progress.update(
            self._task,
            completed=progress.uploaded_bytes,
            current_file=progress.current_file,
        )

    def stop(self) -> None:
        """Stop rendering. Safe to call more than once."""
        if self._progress is None:
            return
        self._progress.stop()
        self._progress = None
        self._task = None


def create_reporter(
    display: str = DISPLAY_TEXT,
    callback: Optional[ProgressCallback] = None,
    output: Optional[OutputFormatter] = None,
) -> ProgressReporter:
    """Build the ProgressReporter for a display mode.

    Args:
        display: ``bar``, ``text`` or ``none``
        callback: Optional progress callback
        output: Output formatter used by the displays

    Returns:
        Configured ProgressReporter
    """
    if display not in DISPLAY_MODES:
        raise UploadConfigError(
            f"Unknown display mode: {display!r} (expected one of "
            f"{', '.join(DISPLAY_MODES)})"
        )
    output = output or OutputFormatter()
    observers: list[ProgressObserver] = []
    if display == DISPLAY_BAR:
        observers.append(UploadProgressDisplay(output))
    elif display == DISPLAY_TEXT:
        observers.append(TextProgressObserver(output))
    return ProgressReporter(callback=callback, observers=observers)
