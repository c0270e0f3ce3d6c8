"""
garage-cli: S3 command-line client for Garage / MinIO compatible storage.

Uploads, downloads, deletes and lists objects with a bounded pool of
parallel workers, and generates presigned URLs.
"""

__version__ = "1.2.0"

from garage_cli.cli import main

__all__ = ["main", "__version__"]
