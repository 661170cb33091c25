"""Test doubles shared by the API and service tests."""

from __future__ import annotations

from artoo.errors import StorageError
from artoo.storage.memory_store import InMemoryObjectStore

USERNAME = "alice"
PASSWORD = "wonderland"


class SpyStore(InMemoryObjectStore):
    """Records every store call; writes and deletes can be made to fail."""

    def __init__(self) -> None:
        super().__init__()
        self.calls = []
        self.refuse_put = False
        self.explode_put = False
        self.fail_delete = False

    def list(self, prefix=None):
        self.calls.append(("list", prefix))
        return super().list(prefix)

    def head(self, key):
        self.calls.append(("head", key))
        return super().head(key)

    def get(self, key):
        self.calls.append(("get", key))
        return super().get(key)

    def put(self, key, data, content_type):
        self.calls.append(("put", key))
        if self.explode_put:
            raise StorageError("disk on fire at /var/lib/secret")
        if self.refuse_put:
            return None
        return super().put(key, data, content_type)

    def delete(self, key):
        self.calls.append(("delete", key))
        if self.fail_delete:
            raise StorageError("delete failed")
        super().delete(key)

    def mutations(self):
        return [call for call in self.calls if call[0] in {"put", "delete"}]

    def seed(self, key: str, data: bytes, content_type: str = "application/octet-stream"):
        return super().put(key, data, content_type)
