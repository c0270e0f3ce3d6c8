"""Shared fixtures: an in-memory object store standing in for S3Gateway."""

import io
import threading
from typing import Optional

import pytest

from garage_cli.models import ListPage, ObjectSummary
from garage_cli.s3_client import ItemTransferError


class InMemoryGateway:
    """Thread-safe dict-backed gateway with paged listings.

    Attributes:
        objects: Mapping of key to object body
        fail_keys: Keys whose get/put/delete raise ItemTransferError
        list_calls: Number of list_page calls made
        deleted: Keys deleted, in call order
    """

    def __init__(self, objects: Optional[dict[str, bytes]] = None, page_size: int = 1000):
        self.objects = dict(objects or {})
        self.page_size = page_size
        self.fail_keys: set[str] = set()
        self.list_calls = 0
        self.deleted: list[str] = []
        self._lock = threading.Lock()

    def list_page(self, bucket, prefix="", continuation_token=None):
        with self._lock:
            self.list_calls += 1
            keys = sorted(k for k in self.objects if k.startswith(prefix))
            start = int(continuation_token or 0)
            page = keys[start:start + self.page_size]
            next_token = None
            if start + self.page_size < len(keys):
                next_token = str(start + self.page_size)
            return ListPage(
                objects=[ObjectSummary(k, len(self.objects[k])) for k in page],
                next_token=next_token,
            )

    def get_object(self, bucket, key):
        with self._lock:
            if key in self.fail_keys or key not in self.objects:
                raise ItemTransferError(f"Failed to get {key}: NoSuchKey", key=key)
            data = self.objects[key]
        return io.BytesIO(data), len(data)

    def put_object(self, bucket, key, fileobj, callback=None):
        if key in self.fail_keys:
            raise ItemTransferError(f"Failed to put {key}: AccessDenied", key=key)
        data = fileobj.read()
        with self._lock:
            self.objects[key] = data
        if callback:
            callback(len(data))

    def delete_object(self, bucket, key):
        if key in self.fail_keys:
            raise ItemTransferError(f"Failed to delete {key}: AccessDenied", key=key)
        with self._lock:
            self.objects.pop(key, None)
            self.deleted.append(key)

    def object_exists(self, bucket, key):
        with self._lock:
            return key in self.objects

    def presign(self, bucket, key, method="get", expires=3600):
        return f"https://s3.example.com/{bucket}/{key}?method={method}&expires={expires}"


@pytest.fixture
def gateway() -> InMemoryGateway:
    """Empty in-memory gateway."""
    return InMemoryGateway()


@pytest.fixture
def make_gateway():
    """Factory for gateways pre-loaded with objects."""
    return InMemoryGateway
