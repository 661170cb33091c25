from __future__ import annotations

import json
import logging
import threading
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional

from ..errors import StorageError
from ..models import ObjectBody, StoredObject
from .base import ObjectStore, compute_etag

logger = logging.getLogger(__name__)


class DiskObjectStore(ObjectStore):
    """Disk-backed blob store keeping object metadata in ``index.json``.

    Blobs are written under random names so keys never touch the filesystem
    namespace; the index maps each key to its blob and metadata.
    """

    def __init__(self, base_path: str):
        self.base_path = Path(base_path).expanduser().resolve()
        self.base_path.mkdir(parents=True, exist_ok=True)
        self._index_path = self.base_path / "index.json"
        self._entries: Dict[str, Dict[str, object]] = {}
        self._lock = threading.RLock()
        self._load_index()

    def _load_index(self) -> None:
        if not self._index_path.exists():
            return
        try:
            data = json.loads(self._index_path.read_text(encoding="utf-8"))
            if isinstance(data, dict):
                self._entries = data
        except (json.JSONDecodeError, OSError):
            # Corrupt index; start fresh but keep existing blobs.
            logger.warning("Ignoring unreadable object index at %s", self._index_path)
            self._entries = {}

    def _persist_index(self) -> None:
        temp_path = self._index_path.with_suffix(".tmp")
        temp_path.write_text(json.dumps(self._entries, indent=2), encoding="utf-8")
        temp_path.replace(self._index_path)

    def _to_object(self, key: str, entry: Dict[str, object]) -> StoredObject:
        return StoredObject(
            key=key,
            size=int(entry["size"]),
            etag=str(entry["etag"]),
            uploaded_at=datetime.fromisoformat(str(entry["uploaded_at"])),
            content_type=str(entry["content_type"]),
        )

    def _blob_path(self, entry: Dict[str, object]) -> Path:
        return self.base_path / str(entry["blob"])

    def list(self, prefix: Optional[str] = None) -> List[StoredObject]:
        with self._lock:
            items = sorted(self._entries.items())
        return [self._to_object(key, entry) for key, entry in items if not prefix or key.startswith(prefix)]

    def head(self, key: str) -> Optional[StoredObject]:
        with self._lock:
            entry = self._entries.get(key)
            if not entry or not self._blob_path(entry).exists():
                return None
            return self._to_object(key, entry)

    def get(self, key: str) -> Optional[ObjectBody]:
        with self._lock:
            entry = self._entries.get(key)
            if not entry:
                return None
            path = self._blob_path(entry)
            if not path.exists():
                return None
            info = self._to_object(key, entry)
        return ObjectBody(info=info, opener=lambda: path.open("rb"))

    def put(self, key: str, data: bytes, content_type: str) -> Optional[StoredObject]:
        blob_name = f"{uuid.uuid4().hex}.bin"
        target_path = self.base_path / blob_name
        entry = {
            "blob": blob_name,
            "size": len(data),
            "etag": compute_etag(data),
            "content_type": content_type,
            "uploaded_at": datetime.now(timezone.utc).isoformat(),
        }
        try:
            target_path.write_bytes(data)
        except OSError as exc:
            target_path.unlink(missing_ok=True)
            raise StorageError(f"Unable to write object {key!r}") from exc
        with self._lock:
            previous = self._entries.get(key)
            self._entries[key] = entry
            try:
                self._persist_index()
            except OSError as exc:
                if previous is None:
                    self._entries.pop(key, None)
                else:
                    self._entries[key] = previous
                target_path.unlink(missing_ok=True)
                raise StorageError(f"Unable to write object {key!r}") from exc
        if previous:
            self._remove_blob(previous)
        return self._to_object(key, entry)

    def delete(self, key: str) -> None:
        with self._lock:
            entry = self._entries.pop(key, None)
            if entry is None:
                return
            try:
                self._persist_index()
            except OSError as exc:
                self._entries[key] = entry
                raise StorageError(f"Unable to delete object {key!r}") from exc
        self._remove_blob(entry)

    def _remove_blob(self, entry: Dict[str, object]) -> None:
        try:
            self._blob_path(entry).unlink(missing_ok=True)
        except OSError:
            logger.warning("Unable to remove blob %s", entry.get("blob"))

    def cleanup_orphans(self) -> int:
        """Deletes blob files no index entry points at; returns the count."""
        with self._lock:
            known = {str(entry.get("blob")) for entry in self._entries.values()}
        removed = 0
        for path in self.base_path.glob("*.bin"):
            if path.name in known or not path.is_file():
                continue
            try:
                path.unlink()
            except OSError:
                continue
            removed += 1
        return removed
