"""Command orchestration.

Turns each user command into work items, runs them through the bounded
worker pool against the object store gateway, and reports progress:
- upload: single file or recursive directory upload
- download: single object or recursive prefix download
- delete: guarded single or recursive delete, with dry-run
- list / presign: direct gateway passthroughs
"""

import logging
import os
import posixpath
import tempfile
import time
from typing import Any, Callable, Optional

from botocore.exceptions import BotoCoreError

from garage_cli.enumerator import EnumerationError, enumerate_local, enumerate_remote
from garage_cli.keys import is_within, normalize_key, to_key, to_local_path
from garage_cli.models import (
    CommandResult,
    DeleteItem,
    DownloadItem,
    ListingResult,
    RunConfig,
    UploadItem,
    WorkItem,
)
from garage_cli.pool import run_bounded
from garage_cli.s3_client import ItemTransferError

logger = logging.getLogger(__name__)

# Read size when streaming an object body to disk (1 MiB)
DOWNLOAD_CHUNK_SIZE = 1024 * 1024


class ConfirmationRequired(Exception):
    """Raised when a delete is attempted without explicit confirmation.

    Attributes:
        count: Number of objects that would have been deleted
    """

    def __init__(self, message: str, count: int):
        super().__init__(message)
        self.count = count


class TransferOrchestrator:
    """Runs upload, download, delete, list and presign commands.

    A single gateway is shared by every worker; the reporter, if given,
    receives command, item and byte-progress callbacks.
    """

    def __init__(self, gateway: Any, reporter: Optional[Any] = None):
        """Initialize the orchestrator.

        Args:
            gateway: Object store gateway (see ``S3Gateway``)
            reporter: Optional reporter for progress callbacks
        """
        self.gateway = gateway
        self.reporter = reporter

    def upload(self, config: RunConfig, src: str, dest: Optional[str] = None) -> CommandResult:
        """Upload a file or a directory tree.

        Args:
            config: Run configuration (bucket, parallelism)
            src: Local file or directory
            dest: Destination key or prefix; defaults to the basename of src

        Returns:
            CommandResult with one outcome per uploaded file.

        Raises:
            EnumerationError: If src does not exist or cannot be walked.
        """
        name = os.path.basename(os.path.normpath(src))
        dest = normalize_key(name if dest is None else dest)

        if os.path.isdir(src):
            items: list[WorkItem] = [
                UploadItem(local_path=path, key=to_key(dest, suffix))
                for path, suffix in enumerate_local(src)
            ]
        elif os.path.isfile(src):
            if not dest or dest.endswith("/"):
                dest = to_key(dest, name)
            else:
                dest = to_key(dest, "") or name
            items = [UploadItem(local_path=os.path.abspath(src), key=dest)]
        else:
            raise EnumerationError(f"No such file or directory: {src}")

        return self._run(
            "upload", items, config,
            lambda item: self._upload_item(config.bucket, item),
        )

    def download(self, config: RunConfig, key: str, dest: str) -> CommandResult:
        """Download one object, or every object under a prefix.

        Args:
            config: Run configuration (bucket, parallelism, recursive)
            key: Object key, or prefix when recursive
            dest: Local file path, or destination directory when recursive

        Returns:
            CommandResult with one outcome per object.

        Raises:
            EnumerationError: If the recursive listing fails.
        """
        if not config.recursive:
            if os.path.isdir(dest):
                dest = os.path.join(dest, posixpath.basename(key.rstrip("/")))
            items: list[WorkItem] = [DownloadItem(key=key, local_path=dest)]
            root = None
        else:
            objects = enumerate_remote(self.gateway, config.bucket, key)
            items = [
                DownloadItem(
                    key=obj.key,
                    local_path=to_local_path(dest, obj.key, key),
                    size=obj.size,
                )
                for obj in objects
            ]
            root = dest

        return self._run(
            "download", items, config,
            lambda item: self._download_item(config.bucket, item, root),
        )

    def delete(self, config: RunConfig, key: str) -> CommandResult:
        """Delete one object, or every object under a prefix.

        Dry-run is checked before confirmation: a recursive dry-run never
        deletes anything, whatever ``confirmed`` says.

        Args:
            config: Run configuration (recursive, dry_run, confirmed)
            key: Object key, or prefix when recursive

        Returns:
            CommandResult; for a dry run it has no outcomes and
            ``affected`` holds the number of matching objects.

        Raises:
            ConfirmationRequired: If the delete was not confirmed.
            EnumerationError: If the recursive listing fails.
        """
        if not config.recursive:
            if not config.confirmed:
                raise ConfirmationRequired(
                    f"Refusing to delete {key} without confirmation", count=1
                )
            return self._run(
                "delete", [DeleteItem(key=key)], config,
                lambda item: self._delete_existing(config.bucket, item),
            )

        objects = enumerate_remote(self.gateway, config.bucket, key)

        if config.dry_run:
            if self.reporter:
                self.reporter.on_dry_run(objects)
            result = CommandResult(command="delete", dry_run=True, affected=len(objects))
            if self.reporter:
                self.reporter.on_command_complete(result)
            return result

        if not config.confirmed:
            raise ConfirmationRequired(
                f"Refusing to delete {len(objects)} objects without confirmation",
                count=len(objects),
            )

        items: list[WorkItem] = [DeleteItem(key=obj.key) for obj in objects]
        return self._run(
            "delete", items, config,
            lambda item: self.gateway.delete_object(config.bucket, item.key),
        )

    def list_objects(self, bucket: str, prefix: str = "") -> ListingResult:
        """List every object under a prefix.

        Raises:
            EnumerationError: If the listing fails.
        """
        objects = enumerate_remote(self.gateway, bucket, prefix)
        listing = ListingResult(bucket=bucket, prefix=prefix, objects=objects)
        if self.reporter:
            self.reporter.on_listing(listing)
        return listing

    def presign(self, bucket: str, key: str, expires: int, method: str = "get") -> str:
        """Generate a presigned GET or PUT URL for one object."""
        url = self.gateway.presign(bucket, key, method=method, expires=expires)
        if self.reporter:
            self.reporter.on_presigned(url)
        return url

    def _run(
        self,
        command: str,
        items: list[WorkItem],
        config: RunConfig,
        op: Callable[[WorkItem], Any],
    ) -> CommandResult:
        """Run items through the worker pool and aggregate the outcomes."""
        start_time = time.time()

        if self.reporter:
            self.reporter.on_command_start(command, len(items))

        outcomes = run_bounded(items, config.parallelism, op, self.reporter)

        result = CommandResult(
            command=command,
            outcomes=outcomes,
            total_duration=time.time() - start_time,
            affected=len(items),
        )
        logger.info("%s: %s", command, result.summary())

        if self.reporter:
            self.reporter.on_command_complete(result)

        return result

    def _progress_callback(
        self, item: WorkItem, total: Optional[int]
    ) -> Optional[Callable[[int], None]]:
        if not self.reporter:
            return None

        def callback(advance: int) -> None:
            self.reporter.on_item_progress(item, advance, total)

        return callback

    def _upload_item(self, bucket: str, item: UploadItem) -> None:
        try:
            total = os.path.getsize(item.local_path)
            with open(item.local_path, "rb") as f:
                self.gateway.put_object(
                    bucket, item.key, f,
                    callback=self._progress_callback(item, total),
                )
        except OSError as e:
            raise ItemTransferError(
                f"Cannot read {item.local_path}: {e}", key=item.key
            ) from e

    def _download_item(
        self, bucket: str, item: DownloadItem, root: Optional[str]
    ) -> None:
        if root is not None and not is_within(root, item.local_path):
            raise ItemTransferError(
                f"Refusing to write {item.key} outside {root}", key=item.key
            )

        try:
            # Folder marker objects only create the directory
            if item.key.endswith("/"):
                os.makedirs(item.local_path, exist_ok=True)
                return

            directory = os.path.dirname(os.path.abspath(item.local_path))
            os.makedirs(directory, exist_ok=True)
        except OSError as e:
            raise ItemTransferError(
                f"Cannot create {item.local_path}: {e}", key=item.key
            ) from e

        body, length = self.gateway.get_object(bucket, item.key)
        total = length if length is not None else item.size
        callback = self._progress_callback(item, total)

        # Stream into a temp file beside the target, then rename into place
        try:
            fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".garage-", suffix=".part")
        except OSError as e:
            body.close()
            raise ItemTransferError(
                f"Cannot write {item.local_path}: {e}", key=item.key
            ) from e

        try:
            with os.fdopen(fd, "wb") as f:
                while True:
                    chunk = body.read(DOWNLOAD_CHUNK_SIZE)
                    if not chunk:
                        break
                    f.write(chunk)
                    if callback:
                        callback(len(chunk))
            os.replace(tmp_path, item.local_path)
        except Exception as e:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            if isinstance(e, (OSError, BotoCoreError)):
                raise ItemTransferError(
                    f"Failed to download {item.key}: {e}", key=item.key
                ) from e
            raise
        finally:
            body.close()

    def _delete_existing(self, bucket: str, item: DeleteItem) -> None:
        if not self.gateway.object_exists(bucket, item.key):
            raise ItemTransferError(f"No such key: {item.key}", key=item.key)
        self.gateway.delete_object(bucket, item.key)
