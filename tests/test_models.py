"""Tests for data models."""

import dataclasses

import pytest

from garage_cli.models import (
    CommandResult,
    DeleteItem,
    DownloadItem,
    ListingResult,
    ObjectSummary,
    OutcomeStatus,
    RunConfig,
    StorageSettings,
    TransferOutcome,
    UploadItem,
)


class TestWorkItems:
    """Tests for the work item variants."""

    def test_items_are_immutable(self):
        """Work items cannot be modified after creation."""
        item = UploadItem(local_path="/tmp/a.txt", key="p/a.txt")
        with pytest.raises(dataclasses.FrozenInstanceError):
            item.key = "other"

    def test_items_are_hashable(self):
        """Work items can be used as dictionary keys."""
        items = {DeleteItem("a"), DeleteItem("a"), DeleteItem("b")}
        assert len(items) == 2

    def test_download_item_size_optional(self):
        """Download size defaults to unknown."""
        assert DownloadItem(key="k", local_path="/tmp/k").size is None


class TestRunConfig:
    """Tests for RunConfig validation."""

    def test_defaults(self):
        config = RunConfig(bucket="media")

        assert config.parallelism == 5
        assert config.recursive is False
        assert config.dry_run is False
        assert config.confirmed is False

    @pytest.mark.parametrize("parallelism", [0, -3])
    def test_rejects_parallelism_below_one(self, parallelism):
        """Parallelism must be at least 1."""
        with pytest.raises(ValueError, match="parallelism"):
            RunConfig(bucket="media", parallelism=parallelism)

    def test_rejects_empty_bucket(self):
        with pytest.raises(ValueError, match="bucket"):
            RunConfig(bucket="")


class TestStorageSettings:
    def test_defaults(self):
        settings = StorageSettings(
            endpoint_url="http://localhost:3900",
            access_key="key",
            secret_key="secret",
        )
        assert settings.region_name == "garage"
        assert settings.addressing_style == "path"


class TestCommandResult:
    """Tests for CommandResult aggregation."""

    def _outcomes(self, successes: int, failures: int) -> list[TransferOutcome]:
        outcomes = [
            TransferOutcome(DeleteItem(f"ok-{i}"), OutcomeStatus.SUCCESS)
            for i in range(successes)
        ]
        outcomes += [
            TransferOutcome(DeleteItem(f"bad-{i}"), OutcomeStatus.FAILURE, "AccessDenied")
            for i in range(failures)
        ]
        return outcomes

    def test_counts(self):
        result = CommandResult(command="delete", outcomes=self._outcomes(9, 1))

        assert result.succeeded == 9
        assert result.failed == 1
        assert result.all_succeeded is False

    def test_summary_reports_partial_success(self):
        """Summary should read like "9 of 10 succeeded"."""
        result = CommandResult(command="delete", outcomes=self._outcomes(9, 1))
        assert result.summary() == "9 of 10 succeeded"

    def test_empty_result_succeeds(self):
        result = CommandResult(command="upload")

        assert result.all_succeeded is True
        assert result.summary() == "0 of 0 succeeded"

    def test_dry_run_summary(self):
        result = CommandResult(command="delete", dry_run=True, affected=5)

        assert result.all_succeeded is True
        assert result.summary() == "5 objects would be deleted"

    def test_to_dict(self):
        outcomes = [
            TransferOutcome(UploadItem("/tmp/a.txt", "p/a.txt"), OutcomeStatus.SUCCESS),
            TransferOutcome(DeleteItem("p/b.txt"), OutcomeStatus.FAILURE, "AccessDenied"),
        ]
        data = CommandResult(command="upload", outcomes=outcomes, affected=2).to_dict()

        assert data["command"] == "upload"
        assert data["summary"]["total"] == 2
        assert data["summary"]["failed"] == 1
        assert data["summary"]["all_succeeded"] is False
        assert data["items"][0] == {
            "type": "UploadItem",
            "key": "p/a.txt",
            "status": "success",
            "duration_seconds": 0.0,
            "local_path": "/tmp/a.txt",
        }
        assert data["items"][1]["error"] == "AccessDenied"
        assert "local_path" not in data["items"][1]


class TestListingResult:
    def test_totals(self):
        listing = ListingResult(
            bucket="media",
            prefix="p/",
            objects=[ObjectSummary("p/a", 10), ObjectSummary("p/b", 32)],
        )

        assert listing.count == 2
        assert listing.total_size == 42
        assert listing.to_dict()["summary"] == {"count": 2, "total_size": 42}

    def test_empty_listing(self):
        listing = ListingResult(bucket="media", prefix="")
        assert listing.count == 0
        assert listing.total_size == 0
