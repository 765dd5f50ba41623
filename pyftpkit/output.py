"""Console output formatting for pyftpkit."""

import json
from typing import Any, Optional

from rich.console import Console
from rich.table import Table


class OutputFormatter:
    """Formats user-facing messages with Rich.

    Informational output goes to stdout, warnings and errors to stderr.
    ``quiet`` suppresses informational messages but never errors.
    """

    def __init__(
        self,
        json_output: bool = False,
        quiet: bool = False,
        console: Optional[Console] = None,
        err_console: Optional[Console] = None,
    ):
        """Initialize output formatter.

        Args:
            json_output: Emit machine readable JSON instead of text summaries
            quiet: Suppress non-essential output
            console: Console for regular output (created if not given)
            err_console: Console for warnings and errors (created if not given)
        """
        self.json_output = json_output
        self.quiet = quiet
        self.console = console or Console(highlight=False)
        self.err_console = err_console or Console(stderr=True, highlight=False)

    def print(self, message: str = "") -> None:
        if self.quiet or self.json_output:
            return
        self.console.print(message, markup=False)

    def info(self, message: str) -> None:
        if self.quiet or self.json_output:
            return
        self.console.print(message, style="cyan", markup=False)

    def progress(self, message: str) -> None:
        """Print a dimmed per-file progress line."""
        if self.quiet or self.json_output:
            return
        self.console.print(message, style="bright_black", markup=False)

    def success(self, message: str) -> None:
        if self.quiet or self.json_output:
            return
        self.console.print(message, style="green", markup=False)

    def warning(self, message: str) -> None:
        if self.quiet:
            return
        self.err_console.print(message, style="yellow", markup=False)

    def error(self, message: str) -> None:
        self.err_console.print(message, style="red", markup=False)

    def print_summary(self, title: str, items: list[tuple[str, str]]) -> None:
        """Print a two-column summary table.

        Args:
            title: Table title
            items: List of (label, value) rows
        """
        if self.quiet or self.json_output:
            return
        table = Table(title=title, show_header=False, title_style="bold")
        table.add_column("Key", style="bold")
        table.add_column("Value")
        for label, value in items:
            table.add_row(label, value)
        self.console.print(table)

    def output_json(self, data: Any) -> None:
        self.console.print_json(json.dumps(data))
