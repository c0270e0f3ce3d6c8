"""JSON reporter for structured output.

Writes the result of a command to a file so scripts can consume it
without scraping console output.
"""

import json
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from garage_cli.models import (
    CommandResult,
    ListingResult,
    ObjectSummary,
    TransferOutcome,
    WorkItem,
)
from garage_cli.reporters.base import Reporter


class JsonReporter(Reporter):
    """JSON reporter writing one document per command.

    Args:
        output_path: File path to write JSON output to
    """

    def __init__(self, output_path: str):
        """Initialize the JSON reporter.

        Args:
            output_path: File path for JSON output
        """
        self.output_path = output_path
        self._dry_run_keys: list[str] = []
        self._lock = threading.Lock()

    def on_command_start(self, command: str, item_count: int) -> None:
        """No-op for JSON reporter."""
        pass

    def on_item_start(self, item: WorkItem) -> None:
        """No-op for JSON reporter."""
        pass

    def on_item_progress(
        self, item: WorkItem, advance: int, total: Optional[int]
    ) -> None:
        """No-op for JSON reporter."""
        pass

    def on_item_complete(self, outcome: TransferOutcome) -> None:
        """No-op - outcomes come from the command result."""
        pass

    def on_dry_run(self, objects: list[ObjectSummary]) -> None:
        """Remember the keys so they appear in the written document."""
        with self._lock:
            self._dry_run_keys = [o.key for o in objects]

    def on_listing(self, listing: ListingResult) -> None:
        """Write the listing."""
        self._write(listing.to_dict())

    def on_presigned(self, url: str) -> None:
        """Write the presigned URL."""
        self._write({"command": "presign", "url": url})

    def on_command_complete(self, result: CommandResult) -> dict:
        """Write the command result.

        Returns:
            The written data as a dictionary
        """
        output = result.to_dict()
        if result.dry_run:
            with self._lock:
                output["dry_run_keys"] = list(self._dry_run_keys)
        return self._write(output)

    def _write(self, output: dict[str, Any]) -> dict[str, Any]:
        """Stamp and write output to the configured path.

        Args:
            output: The data to write
        """
        output = {"timestamp": datetime.now(timezone.utc).isoformat(), **output}
        path = Path(self.output_path)

        # Create parent directories if needed
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w", encoding="utf-8") as f:
            json.dump(output, f, indent=2)

        return output
