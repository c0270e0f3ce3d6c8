"""Console reporter using Rich library for formatted CLI output.

Provides formatted output during command execution including:
- Per-file byte progress bars for uploads and downloads
- Per-item result lines
- Object listings and a final summary
"""

import threading
from typing import Optional

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    TaskID,
    TextColumn,
    TransferSpeedColumn,
)
from rich.table import Table
from rich.text import Text

from garage_cli.models import (
    CommandResult,
    DeleteItem,
    DownloadItem,
    ListingResult,
    ObjectSummary,
    TransferOutcome,
    UploadItem,
    WorkItem,
)
from garage_cli.reporters.base import Reporter

BYTE_UNITS = ["B", "KB", "MB", "GB", "TB"]

# Past-tense labels for completed items
ITEM_VERBS = {
    UploadItem: "Uploaded",
    DownloadItem: "Downloaded",
    DeleteItem: "Deleted",
}

# Commands that move bytes and get progress bars
BYTE_COMMANDS = {"upload", "download"}


def format_bytes(size: int) -> str:
    """Format a byte count with a binary unit, e.g. ``1.50 KB``."""
    if not size:
        return "0 B"
    value = float(size)
    index = 0
    while value >= 1024 and index < len(BYTE_UNITS) - 1:
        value /= 1024
        index += 1
    return f"{value:.2f} {BYTE_UNITS[index]}"


class ConsoleReporter(Reporter):
    """Rich-based console reporter for CLI output.

    Args:
        quiet: If True, suppress progress bars and per-item output
               (only show summaries)
    """

    def __init__(self, quiet: bool = False):
        """Initialize the console reporter.

        Args:
            quiet: Suppress per-item output if True
        """
        # Use legacy_windows=True for ASCII-safe output on Windows consoles
        self.console = Console(legacy_windows=True)
        self.quiet = quiet
        self._progress: Optional[Progress] = None
        self._tasks: dict[WorkItem, TaskID] = {}
        self._lock = threading.Lock()

    def on_command_start(self, command: str, item_count: int) -> None:
        """Start progress bars for commands that transfer bytes."""
        if self.quiet or command not in BYTE_COMMANDS or item_count == 0:
            return

        self._progress = Progress(
            TextColumn("{task.description}", style="cyan", markup=False),
            BarColumn(),
            DownloadColumn(),
            TransferSpeedColumn(),
            console=self.console,
            transient=True,
        )
        self._progress.start()

    def on_item_start(self, item: WorkItem) -> None:
        """Add a progress bar for the item."""
        with self._lock:
            if self._progress is None:
                return
            size = item.size if isinstance(item, DownloadItem) else None
            self._tasks[item] = self._progress.add_task(item.key, total=size)

    def on_item_progress(
        self, item: WorkItem, advance: int, total: Optional[int]
    ) -> None:
        """Advance the item's progress bar."""
        with self._lock:
            if self._progress is None or item not in self._tasks:
                return
            self._progress.update(self._tasks[item], advance=advance, total=total)

    def on_item_complete(self, outcome: TransferOutcome) -> None:
        """Remove the item's bar and print its result line."""
        with self._lock:
            task_id = self._tasks.pop(outcome.item, None)
            if self._progress is not None and task_id is not None:
                self._progress.remove_task(task_id)

        if self.quiet:
            return

        key = outcome.item.key
        if outcome.succeeded:
            verb = ITEM_VERBS.get(type(outcome.item), "Done")
            self.console.print(f"[green][OK][/green] {verb} {escape(key)}", highlight=False)
        else:
            self.console.print(f"[red][FAIL][/red] {escape(key)}", highlight=False)
            if outcome.error_message:
                self.console.print(
                    f"     [dim]{escape(outcome.error_message)}[/dim]", highlight=False
                )

    def on_dry_run(self, objects: list[ObjectSummary]) -> None:
        """Print every key a recursive delete would remove."""
        if self.quiet:
            return
        for obj in objects:
            self.console.print(f"[dry-run] {obj.key}", markup=False, highlight=False)

    def on_listing(self, listing: ListingResult) -> None:
        """Print objects as a table followed by count and total size."""
        if listing.objects:
            table = Table(
                show_header=True,
                header_style="bold magenta",
                border_style="dim",
                box=box.ASCII,
            )
            table.add_column("Key", style="cyan", overflow="fold")
            table.add_column("Size", justify="right", no_wrap=True)
            for obj in listing.objects:
                table.add_row(Text(obj.key), format_bytes(obj.size))
            self.console.print(table)

        self.console.print(
            f"{listing.count} objects - {format_bytes(listing.total_size)}",
            highlight=False,
        )

    def on_presigned(self, url: str) -> None:
        """Print the URL unwrapped so it can be copied."""
        self.console.print(url, markup=False, highlight=False, soft_wrap=True)

    def on_command_complete(self, result: CommandResult) -> None:
        """Stop progress bars and print the summary."""
        with self._lock:
            if self._progress is not None:
                self._progress.stop()
                self._progress = None
            self._tasks.clear()

        if result.dry_run:
            style = "yellow"
        elif result.all_succeeded:
            style = "bold green"
        else:
            style = "bold red"

        duration_str = ""
        if result.total_duration > 0:
            duration_str = f" in {result.total_duration:.1f}s"

        self.console.print()
        self.console.print(
            f"[{style}]{result.command}: {result.summary()}[/{style}]{duration_str}",
            highlight=False,
        )
