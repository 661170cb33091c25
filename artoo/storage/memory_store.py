from __future__ import annotations

import threading
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

from ..models import ObjectBody, StoredObject
from .base import ObjectStore, compute_etag


class InMemoryObjectStore(ObjectStore):
    """Dictionary-backed store for local development and unit tests."""

    def __init__(self) -> None:
        self._objects: Dict[str, Tuple[StoredObject, bytes]] = {}
        self._lock = threading.Lock()

    def list(self, prefix: Optional[str] = None) -> List[StoredObject]:
        with self._lock:
            entries = [info for info, _ in self._objects.values()]
        if prefix:
            entries = [info for info in entries if info.key.startswith(prefix)]
        return sorted(entries, key=lambda info: info.key)

    def head(self, key: str) -> Optional[StoredObject]:
        with self._lock:
            entry = self._objects.get(key)
        return entry[0] if entry else None

    def get(self, key: str) -> Optional[ObjectBody]:
        with self._lock:
            entry = self._objects.get(key)
        if entry is None:
            return None
        info, data = entry
        return ObjectBody.from_bytes(info, data)

    def put(self, key: str, data: bytes, content_type: str) -> Optional[StoredObject]:
        data = bytes(data)
        info = StoredObject(
            key=key,
            size=len(data),
            etag=compute_etag(data),
            uploaded_at=datetime.now(timezone.utc),
            content_type=content_type,
        )
        with self._lock:
            self._objects[key] = (info, data)
        return info

    def delete(self, key: str) -> None:
        with self._lock:
            self._objects.pop(key, None)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._objects

    def __len__(self) -> int:
        with self._lock:
            return len(self._objects)
