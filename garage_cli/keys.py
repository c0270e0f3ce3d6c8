"""Conversion between local filesystem paths and object keys.

Keys are always forward-slash delimited and never start with a slash,
whatever the host path separator is.
"""

import os
import posixpath


def normalize_key(key: str) -> str:
    """Convert backslashes to slashes and strip leading slashes."""
    return key.replace("\\", "/").lstrip("/")


def to_key(base_prefix: str, relative_path: str) -> str:
    """Join a key prefix and a relative path into an object key.

    The result is normalized like a POSIX path join, with empty and ``.``
    segments dropped: ``to_key("p/", "/a.txt")`` and ``to_key("p//q", "a.txt")``
    give ``"p/a.txt"`` and ``"p/q/a.txt"``, and ``to_key(".", "a.txt")``
    gives ``"a.txt"``.

    Args:
        base_prefix: Destination prefix (may be empty)
        relative_path: Path relative to the upload root, using either
                      separator convention

    Returns:
        The normalized object key.
    """
    parts = []
    for piece in (base_prefix, relative_path):
        piece = normalize_key(piece).strip("/")
        if piece:
            parts.append(piece)
    if not parts:
        return ""
    key = posixpath.normpath("/".join(parts))
    return "" if key == "." else key


def to_local_path(dest_root: str, key: str, prefix: str = "") -> str:
    """Map an object key to a path under a local destination root.

    The queried prefix is removed from the key, along with any leading
    slashes left behind, and the remaining segments are joined onto
    ``dest_root`` with the host separator.

    Args:
        dest_root: Local destination directory
        key: Object key as listed by the backend
        prefix: Prefix that was used to enumerate the key

    Returns:
        Local filesystem path. An empty remainder maps to dest_root.
    """
    relative = key[len(prefix):] if prefix and key.startswith(prefix) else key
    relative = relative.lstrip("/")
    segments = [s for s in relative.split("/") if s]
    if not segments:
        return dest_root
    return os.path.join(dest_root, *segments)


def is_within(root: str, path: str) -> bool:
    """Check that path resolves to root or somewhere below it."""
    root_real = os.path.realpath(root)
    path_real = os.path.realpath(path)
    return os.path.commonpath([root_real, path_real]) == root_real
