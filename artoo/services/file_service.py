"""File operations over the object store."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from ..errors import BadRequest, InternalError, NotFound
from ..models import ObjectBody, StoredObject
from ..storage.base import ObjectStore
from .base import BaseService

logger = logging.getLogger(__name__)


@dataclass
class FileService(BaseService):
    """Validates file requests and turns them into store calls.

    Every failure is raised as an :class:`artoo.errors.ApiError` at the point
    it is detected. Move is best-effort: the destination is written first and
    the source is deleted only afterwards, with no compensation if the
    process dies in between.
    """

    store: ObjectStore

    # Reads -----------------------------------------------------------------

    def list_files(self, prefix: Optional[str] = None) -> List[StoredObject]:
        return self.store.list(prefix or None)

    def describe(self, key: str) -> StoredObject:
        info = self.store.head(key)
        if info is None:
            raise NotFound("File not found")
        return info

    def open(self, key: str) -> ObjectBody:
        body = self.store.get(key)
        if body is None:
            raise NotFound("File not found")
        return body

    # Writes ----------------------------------------------------------------

    def upload(self, key: str, data: bytes, content_type: Optional[str]) -> StoredObject:
        _require_key(key)
        if not content_type:
            raise BadRequest("Missing content-type header")
        if not data:
            raise BadRequest("Empty file content")
        info = self.store.put(key, data, content_type)
        if info is None:
            raise InternalError("Failed to upload file")
        logger.info("Uploaded %s (%d bytes, %s)", key, info.size, content_type)
        self.emit_event("file_uploaded", key=key, etag=info.etag)
        self.emit_metric("bytes_uploaded", float(info.size))
        return info

    def delete(self, key: str) -> StoredObject:
        _require_key(key)
        info = self.store.head(key)
        if info is None:
            raise NotFound("File not found")
        self.store.delete(key)
        logger.info("Deleted %s", key)
        self.emit_event("file_deleted", key=key)
        return info

    def copy(self, source: str, destination: Optional[str]) -> StoredObject:
        target = self._prepare_transfer(source, destination)
        written = self._write_copy(source, target, failure_message="Failed to copy file")
        logger.info("Copied %s -> %s", source, target)
        self.emit_event("file_copied", source=source, destination=target)
        return written

    def move(self, source: str, destination: Optional[str]) -> StoredObject:
        target = self._prepare_transfer(source, destination)
        if target == source:
            raise BadRequest("Source and destination must differ")
        written = self._write_copy(source, target, failure_message="Failed to move file")
        try:
            self.store.delete(source)
        except Exception:
            logger.exception("Move %s -> %s wrote the destination but left the source behind", source, target)
            self.emit_event("file_move_incomplete", source=source, destination=target)
            raise InternalError("Failed to remove source after move")
        logger.info("Moved %s -> %s", source, target)
        self.emit_event("file_moved", source=source, destination=target)
        return written

    def _prepare_transfer(self, source: str, destination: Optional[str]) -> str:
        _require_key(source)
        target = normalize_key(destination or "")
        if not target:
            raise BadRequest("Destination is required")
        return target

    def _write_copy(self, source: str, target: str, *, failure_message: str) -> StoredObject:
        body = self.open(source)
        written = self.store.put(target, body.read(), body.info.content_type)
        if written is None:
            raise InternalError(failure_message)
        return written


def normalize_key(value: str) -> str:
    return value.lstrip("/")


def _require_key(key: str) -> None:
    if not key:
        raise BadRequest("File path is required")
