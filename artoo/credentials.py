"""Username to secret lookup backing the login endpoint."""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Dict, Mapping, Optional

logger = logging.getLogger(__name__)


class CredentialStore:
    """In-memory credential table, optionally mirrored to a JSON file.

    Secrets are stored exactly as provided; see DESIGN.md for the open
    question on hashing. Entries passed as ``initial`` override the file and
    are written back to it straight away.
    """

    def __init__(self, path: Optional[str] = None, initial: Optional[Mapping[str, str]] = None):
        self._path = Path(path).expanduser() if path else None
        self._entries: Dict[str, str] = {}
        self._lock = threading.Lock()
        if self._path is not None:
            self._load()
        if initial:
            self._entries.update(initial)
            self._persist()

    def _load(self) -> None:
        if not self._path.exists():
            return
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError):
            logger.warning("Ignoring unreadable credentials file at %s", self._path)
            return
        if isinstance(data, dict):
            self._entries = {str(user): str(secret) for user, secret in data.items()}

    def _persist(self) -> None:
        if self._path is None:
            return
        self._path.parent.mkdir(parents=True, exist_ok=True)
        temp_path = self._path.with_suffix(".tmp")
        temp_path.write_text(json.dumps(self._entries, indent=2), encoding="utf-8")
        temp_path.replace(self._path)

    def get(self, username: str) -> Optional[str]:
        with self._lock:
            return self._entries.get(username)

    def set(self, username: str, secret: str) -> None:
        if not username or not secret:
            raise ValueError("username and secret must be non-empty")
        with self._lock:
            self._entries[username] = secret
            self._persist()

    def remove(self, username: str) -> bool:
        with self._lock:
            if self._entries.pop(username, None) is None:
                return False
            self._persist()
            return True

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
