"""S3 client factory and object store gateway.

Creates a boto3 S3 client configured for the endpoint, credentials,
region, and addressing style, and wraps it in ``S3Gateway``: the narrow
list/get/put/delete surface the rest of the tool consumes.

The signature version is set to 's3v4', which S3-compatible stores such
as Garage and MinIO require for both requests and presigned URLs.
"""

import logging
from typing import Any, BinaryIO, Callable, Optional

import boto3
from boto3.exceptions import S3UploadFailedError
from botocore.client import Config
from botocore.exceptions import BotoCoreError, ClientError

from garage_cli.models import ListPage, ObjectSummary, StorageSettings

logger = logging.getLogger(__name__)

# Error codes S3-compatible stores return for a missing object
NOT_FOUND_CODES = {"404", "NoSuchKey", "NotFound"}

PRESIGN_METHODS = {
    "get": "get_object",
    "put": "put_object",
}


class ItemTransferError(Exception):
    """Raised when a single object get, put or delete fails."""

    def __init__(self, message: str, key: Optional[str] = None):
        super().__init__(message)
        self.key = key


def build_s3_client(settings: StorageSettings):
    """Build a boto3 S3 client for the given settings.

    Args:
        settings: Storage settings containing endpoint, credentials,
                 region, and addressing style.

    Returns:
        A boto3 S3 client configured for the endpoint.
    """
    boto_config = Config(
        signature_version="s3v4",
        s3={"addressing_style": settings.addressing_style},
    )

    return boto3.client(
        "s3",
        endpoint_url=settings.endpoint_url,
        aws_access_key_id=settings.access_key,
        aws_secret_access_key=settings.secret_key,
        region_name=settings.region_name,
        config=boto_config,
    )


def _is_not_found(error: ClientError) -> bool:
    code = str(error.response.get("Error", {}).get("Code", ""))
    return code in NOT_FOUND_CODES


class S3Gateway:
    """Object store operations over a single shared boto3 client.

    boto3 clients are thread-safe, so one gateway is built per process
    and handed to every worker.
    """

    def __init__(self, client: Any):
        """Initialize the gateway.

        Args:
            client: boto3 S3 client
        """
        self.client = client

    @classmethod
    def from_settings(cls, settings: StorageSettings) -> "S3Gateway":
        """Build a gateway with a fresh client for the given settings."""
        return cls(build_s3_client(settings))

    def list_page(
        self,
        bucket: str,
        prefix: str = "",
        continuation_token: Optional[str] = None,
    ) -> ListPage:
        """Fetch one page of objects under a prefix.

        Args:
            bucket: Bucket name
            prefix: Key prefix to filter on
            continuation_token: Token from the previous page, if any

        Returns:
            ListPage with the objects and the next continuation token.

        Raises:
            ClientError, BotoCoreError: If the listing call fails.
        """
        params = {"Bucket": bucket, "Prefix": prefix}
        if continuation_token:
            params["ContinuationToken"] = continuation_token

        response = self.client.list_objects_v2(**params)
        objects = [
            ObjectSummary(key=obj["Key"], size=int(obj.get("Size", 0)))
            for obj in response.get("Contents", [])
        ]

        next_token = response.get("NextContinuationToken") or None

        logger.debug(
            "Listed %d objects under s3://%s/%s (more: %s)",
            len(objects), bucket, prefix, next_token is not None,
        )
        return ListPage(objects=objects, next_token=next_token)

    def get_object(self, bucket: str, key: str) -> tuple[Any, Optional[int]]:
        """Open an object for streaming.

        Returns:
            Tuple of (body stream, content length).

        Raises:
            ItemTransferError: If the object cannot be fetched.
        """
        try:
            response = self.client.get_object(Bucket=bucket, Key=key)
        except (ClientError, BotoCoreError) as e:
            raise ItemTransferError(f"Failed to get {key}: {e}", key=key) from e

        length = response.get("ContentLength")
        return response["Body"], int(length) if length is not None else None

    def put_object(
        self,
        bucket: str,
        key: str,
        fileobj: BinaryIO,
        callback: Optional[Callable[[int], None]] = None,
    ) -> None:
        """Upload a stream, switching to multipart for large bodies.

        Args:
            bucket: Bucket name
            key: Destination key
            fileobj: Readable binary stream
            callback: Called with the number of bytes sent since the
                     previous call

        Raises:
            ItemTransferError: If the upload fails.
        """
        try:
            self.client.upload_fileobj(
                Fileobj=fileobj,
                Bucket=bucket,
                Key=key,
                Callback=callback,
            )
        except (ClientError, BotoCoreError, S3UploadFailedError) as e:
            raise ItemTransferError(f"Failed to put {key}: {e}", key=key) from e

    def delete_object(self, bucket: str, key: str) -> None:
        """Delete a single object.

        Raises:
            ItemTransferError: If the delete call fails.
        """
        try:
            self.client.delete_object(Bucket=bucket, Key=key)
        except (ClientError, BotoCoreError) as e:
            raise ItemTransferError(f"Failed to delete {key}: {e}", key=key) from e

    def object_exists(self, bucket: str, key: str) -> bool:
        """Check whether an object exists.

        Raises:
            ItemTransferError: On any error other than "not found".
        """
        try:
            self.client.head_object(Bucket=bucket, Key=key)
        except ClientError as e:
            if _is_not_found(e):
                return False
            raise ItemTransferError(f"Failed to stat {key}: {e}", key=key) from e
        except BotoCoreError as e:
            raise ItemTransferError(f"Failed to stat {key}: {e}", key=key) from e
        return True

    def presign(
        self,
        bucket: str,
        key: str,
        method: str = "get",
        expires: int = 3600,
    ) -> str:
        """Generate a presigned URL for a single object.

        Args:
            bucket: Bucket name
            key: Object key
            method: "get" or "put"
            expires: Lifetime of the URL in seconds

        Returns:
            The presigned URL.
        """
        if method not in PRESIGN_METHODS:
            raise ValueError(f"Unsupported presign method: {method}")

        return self.client.generate_presigned_url(
            ClientMethod=PRESIGN_METHODS[method],
            Params={"Bucket": bucket, "Key": key},
            ExpiresIn=expires,
        )
