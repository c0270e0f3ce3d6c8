"""Base reporter interface."""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from garage_cli.models import (
        CommandResult,
        ListingResult,
        ObjectSummary,
        TransferOutcome,
        WorkItem,
    )


class Reporter(ABC):
    """Abstract base class for progress and result reporters.

    Item and progress events may arrive from several worker threads at
    once; implementations must be safe to call concurrently.
    """

    @abstractmethod
    def on_command_start(self, command: str, item_count: int) -> None:
        """Called once the work items for a command are known."""
        pass

    @abstractmethod
    def on_item_start(self, item: "WorkItem") -> None:
        """Called when a worker begins an item."""
        pass

    @abstractmethod
    def on_item_progress(
        self, item: "WorkItem", advance: int, total: Optional[int]
    ) -> None:
        """Called as bytes of an item are transferred."""
        pass

    @abstractmethod
    def on_item_complete(self, outcome: "TransferOutcome") -> None:
        """Called when an item succeeds or fails."""
        pass

    @abstractmethod
    def on_dry_run(self, objects: list["ObjectSummary"]) -> None:
        """Called with the objects a dry-run delete would remove."""
        pass

    @abstractmethod
    def on_listing(self, listing: "ListingResult") -> None:
        """Called with the result of a list command."""
        pass

    @abstractmethod
    def on_presigned(self, url: str) -> None:
        """Called with a generated presigned URL."""
        pass

    @abstractmethod
    def on_command_complete(self, result: "CommandResult") -> None:
        """Called when a transfer command has finished."""
        pass
