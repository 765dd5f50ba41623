"""Progress reporting for upload runs."""

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Protocol

from ..output import OutputFormatter
from ..utils import calculate_percent

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UploadProgress:
    """Progress after one file finished."""

    uploaded_bytes: int
    total_bytes: int
    current_file: str
    """Local path of the file that just finished"""

    percent: int
    """Rounded percentage of bytes done"""


ProgressCallback = Callable[[UploadProgress], None]


class ProgressObserver(Protocol):
    """Display that follows the progress of a run."""

    def start(self, total_bytes: int) -> None: ...

    def update(self, progress: UploadProgress) -> None: ...

    def stop(self) -> None: ...


class TextProgressObserver:
    """Prints one ``"<percent>% Uploaded <path>"`` line per file."""

    def __init__(self, output: OutputFormatter):
        self.output = output

    def start(self, total_bytes: int) -> None:
        pass

    def update(self, progress: UploadProgress) -> None:
        self.output.progress(f"{progress.percent}% Uploaded {progress.current_file}")

    def stop(self) -> None:
        pass


class ProgressReporter:
    """Fans progress events out to a callback and display observers.

    After :meth:`stop` the displays receive no further updates; the
    callback keeps receiving events for transfers still finishing.
    """

    def __init__(
        self,
        callback: Optional[ProgressCallback] = None,
        observers: Optional[list[ProgressObserver]] = None,
    ):
        """Initialize progress reporter.

        Args:
            callback: Called with an UploadProgress after every file
            observers: Displays to update (e.g. text lines, progress bar)
        """
        self.callback = callback
        self.observers = list(observers or [])
        self._stopped = False

    @property
    def stopped(self) -> bool:
        return self._stopped

    def start(self, total_bytes: int) -> None:
        # A stopped reporter never restarts its displays
        if self._stopped:
            return
        for observer in self.observers:
            observer.start(total_bytes)

    def report(self, current_file: str, uploaded_bytes: int, total_bytes: int) -> None:
        """Emit progress for a finished file.

        Args:
            current_file: Local path of the finished file
            uploaded_bytes: Bytes done so far in this run
            total_bytes: Bytes of all files in this run
        """
        progress = UploadProgress(
            uploaded_bytes=uploaded_bytes,
            total_bytes=total_bytes,
            current_file=current_file,
            percent=calculate_percent(uploaded_bytes, total_bytes),
        )
        if self.callback is not None:
            self.callback(progress)
        if self._stopped:
            return
        for observer in self.observers:
            observer.update(progress)

    def stop(self) -> None:
        """Stop updating the displays. Idempotent."""
        if self._stopped:
            return
        self._stopped = True
        for observer in self.observers:
            observer.stop()
