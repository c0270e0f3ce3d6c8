"""Data models for garage-cli."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union


class OutcomeStatus(Enum):
    """Status of a single work item after it has run."""

    SUCCESS = "success"
    FAILURE = "failure"


@dataclass
class StorageSettings:
    """Connection settings for an S3-compatible endpoint."""

    endpoint_url: str
    access_key: str
    secret_key: str
    region_name: str = "garage"
    addressing_style: str = "path"


@dataclass(frozen=True)
class UploadItem:
    """A local file to be stored under a key."""

    local_path: str
    key: str


@dataclass(frozen=True)
class DownloadItem:
    """An object to be written to a local path."""

    key: str
    local_path: str
    size: Optional[int] = None


@dataclass(frozen=True)
class DeleteItem:
    """An object to be removed."""

    key: str


WorkItem = Union[UploadItem, DownloadItem, DeleteItem]


@dataclass(frozen=True)
class ObjectSummary:
    """One object as reported by a bucket listing."""

    key: str
    size: int = 0


@dataclass
class ListPage:
    """A single page of a paged bucket listing."""

    objects: list[ObjectSummary]
    next_token: Optional[str] = None


@dataclass
class TransferOutcome:
    """Result of running one work item."""

    item: WorkItem
    status: OutcomeStatus
    error_message: Optional[str] = None
    duration_seconds: float = 0.0

    @property
    def succeeded(self) -> bool:
        return self.status == OutcomeStatus.SUCCESS


@dataclass(frozen=True)
class RunConfig:
    """Per-invocation settings consumed by the orchestrator."""

    bucket: str
    parallelism: int = 5
    recursive: bool = False
    dry_run: bool = False
    confirmed: bool = False

    def __post_init__(self) -> None:
        if not self.bucket:
            raise ValueError("bucket must not be empty")
        if self.parallelism < 1:
            raise ValueError(f"parallelism must be at least 1, got {self.parallelism}")


@dataclass
class CommandResult:
    """Aggregated outcome of one transfer command."""

    command: str
    outcomes: list[TransferOutcome] = field(default_factory=list)
    total_duration: float = 0.0
    dry_run: bool = False
    affected: int = 0

    @property
    def succeeded(self) -> int:
        return sum(1 for o in self.outcomes if o.succeeded)

    @property
    def failed(self) -> int:
        return sum(1 for o in self.outcomes if not o.succeeded)

    @property
    def all_succeeded(self) -> bool:
        """True when no item failed. A dry run always succeeds."""
        return self.failed == 0

    def summary(self) -> str:
        """Human-readable one-line summary, e.g. "9 of 10 succeeded"."""
        if self.dry_run:
            return f"{self.affected} objects would be deleted"
        return f"{self.succeeded} of {len(self.outcomes)} succeeded"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        items = []
        for outcome in self.outcomes:
            entry: dict[str, Any] = {
                "type": type(outcome.item).__name__,
                "key": outcome.item.key,
                "status": outcome.status.value,
                "duration_seconds": outcome.duration_seconds,
            }
            local_path = getattr(outcome.item, "local_path", None)
            if local_path is not None:
                entry["local_path"] = local_path
            if outcome.error_message:
                entry["error"] = outcome.error_message
            items.append(entry)

        return {
            "command": self.command,
            "dry_run": self.dry_run,
            "items": items,
            "summary": {
                "total": len(self.outcomes),
                "succeeded": self.succeeded,
                "failed": self.failed,
                "affected": self.affected,
                "all_succeeded": self.all_succeeded,
                "duration_seconds": self.total_duration,
            },
        }


@dataclass
class ListingResult:
    """Objects found under a prefix."""

    bucket: str
    prefix: str
    objects: list[ObjectSummary] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.objects)

    @property
    def total_size(self) -> int:
        return sum(o.size for o in self.objects)

    def to_dict(self) -> dict[str, Any]:
        return {
            "command": "list",
            "bucket": self.bucket,
            "prefix": self.prefix,
            "objects": [{"key": o.key, "size": o.size} for o in self.objects],
            "summary": {"count": self.count, "total_size": self.total_size},
        }
