"""Recursive enumeration of local directory trees and bucket prefixes.

Both walkers are all-or-nothing: any read or listing failure raises
``EnumerationError`` and no partial result is returned.
"""

import logging
import os
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from garage_cli.models import ObjectSummary

logger = logging.getLogger(__name__)


class EnumerationError(Exception):
    """Raised when a local walk or a remote listing fails."""

    pass


def enumerate_local(root: str) -> list[tuple[str, str]]:
    """Walk a local directory tree depth-first.

    Entries inside each directory are visited in sorted order so the
    result is stable between runs. Only regular files (or symlinks to
    them) are emitted; directory symlinks are not followed.

    Args:
        root: Directory to walk.

    Returns:
        List of (absolute_path, relative_key_suffix) tuples, where the
        suffix is always forward-slash joined.

    Raises:
        EnumerationError: If root is not a directory or any
                         subdirectory cannot be read.
    """
    if not os.path.isdir(root):
        raise EnumerationError(f"Not a directory: {root}")

    files: list[tuple[str, str]] = []

    def walk(directory: str, suffix: str) -> None:
        try:
            with os.scandir(directory) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as e:
            raise EnumerationError(f"Cannot read directory {directory}: {e}") from e

        for entry in entries:
            rel = f"{suffix}/{entry.name}" if suffix else entry.name
            try:
                if entry.is_dir(follow_symlinks=False):
                    walk(entry.path, rel)
                elif entry.is_file():
                    files.append((os.path.abspath(entry.path), rel))
            except OSError as e:
                raise EnumerationError(f"Cannot stat {entry.path}: {e}") from e

    walk(root, "")
    logger.debug("Found %d files under %s", len(files), root)
    return files


def enumerate_remote(gateway: Any, bucket: str, prefix: str = "") -> list[ObjectSummary]:
    """List every object under a prefix, following continuation tokens.

    Pages are requested until the backend stops returning a token and
    are concatenated in the order they arrived.

    Args:
        gateway: Object store gateway exposing ``list_page``
        bucket: Bucket name
        prefix: Key prefix; a prefix matching nothing yields []

    Returns:
        List of ObjectSummary in listing order.

    Raises:
        EnumerationError: If any page request fails.
    """
    objects: list[ObjectSummary] = []
    token = None
    pages = 0

    while True:
        try:
            page = gateway.list_page(bucket, prefix, token)
        except (ClientError, BotoCoreError) as e:
            raise EnumerationError(
                f"Failed to list s3://{bucket}/{prefix}: {e}"
            ) from e

        pages += 1
        objects.extend(page.objects)
        token = page.next_token
        if not token:
            break

    logger.debug(
        "Listed %d objects under s3://%s/%s in %d pages",
        len(objects), bucket, prefix, pages,
    )
    return objects
