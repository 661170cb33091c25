"""Object store contract consumed by the file service."""

from __future__ import annotations

import hashlib
from abc import ABC, abstractmethod
from typing import List, Optional

from ..models import ObjectBody, StoredObject


class ObjectStore(ABC):
    """Flat key space. ``/`` inside keys is ordinary prefix structure.

    ``put`` returns ``None`` when the store refused the write; I/O failures
    raise :class:`artoo.errors.StorageError`.
    """

    @abstractmethod
    def list(self, prefix: Optional[str] = None) -> List[StoredObject]:
        ...

    @abstractmethod
    def head(self, key: str) -> Optional[StoredObject]:
        ...

    @abstractmethod
    def get(self, key: str) -> Optional[ObjectBody]:
        ...

    @abstractmethod
    def put(self, key: str, data: bytes, content_type: str) -> Optional[StoredObject]:
        ...

    @abstractmethod
    def delete(self, key: str) -> None:
        ...


def compute_etag(data: bytes) -> str:
    return hashlib.md5(data).hexdigest()
