"""Data models shared across the storage, service and API layers."""

from __future__ import annotations

import io
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import BinaryIO, Callable, Iterator, Optional

DEFAULT_CONTENT_TYPE = "application/octet-stream"


@dataclass
class StoredObject:
    key: str
    size: int
    etag: str
    uploaded_at: datetime
    content_type: str = DEFAULT_CONTENT_TYPE

    @property
    def name(self) -> str:
        return self.key.rsplit("/", 1)[-1]


@dataclass
class ObjectBody:
    """A stored object together with a way to read its bytes."""

    info: StoredObject
    opener: Callable[[], BinaryIO]

    @classmethod
    def from_bytes(cls, info: StoredObject, data: bytes) -> "ObjectBody":
        return cls(info=info, opener=lambda: io.BytesIO(data))

    def iter_chunks(self, chunk_size: int = 1024 * 1024) -> Iterator[bytes]:
        with self.opener() as handle:
            while True:
                chunk = handle.read(chunk_size)
                if not chunk:
                    break
                yield chunk

    def read(self) -> bytes:
        with self.opener() as handle:
            return handle.read()


@dataclass
class ObservabilityEvent:
    event_type: str
    message: str
    attributes: Optional[dict] = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


def format_timestamp(value: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision and a ``Z`` suffix."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")
