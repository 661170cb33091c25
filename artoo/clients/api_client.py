"""Client helpers for scripts talking to the Artoo file API."""

from __future__ import annotations

import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional
from urllib.parse import quote

import requests


class ArtooClientError(RuntimeError):
    def __init__(self, status_code: int, message: str):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message


@dataclass
class ArtooClient:
    base_url: str
    token: Optional[str] = None
    timeout: float = 30.0
    http_client: object = requests

    def _url(self, suffix: str) -> str:
        base = self.base_url.rstrip("/")
        return f"{base}{suffix}"

    def _headers(self, extra: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        headers: Dict[str, str] = {}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        if extra:
            headers.update(extra)
        return headers

    def _request(self, method: str, suffix: str, **kwargs):
        headers = self._headers(kwargs.pop("headers", None))
        response = self.http_client.request(
            method,
            self._url(suffix),
            headers=headers,
            timeout=self.timeout,
            **kwargs,
        )
        if response.status_code >= 400:
            raise ArtooClientError(response.status_code, _error_message(response))
        return response

    # Auth ------------------------------------------------------------------

    def login(self, username: str, password: str) -> str:
        response = self._request("POST", "/api/auth/login", json={"username": username, "password": password})
        self.token = response.json()["token"]
        return self.token

    def verify(self) -> Dict[str, object]:
        return self._request("POST", "/api/auth/verify", json={"token": self.token}).json()

    # Files -----------------------------------------------------------------

    def list_files(self, prefix: Optional[str] = None) -> List[Dict[str, object]]:
        params = {"path": prefix} if prefix else None
        return self._request("GET", "/api/files", params=params).json()["files"]

    def details(self, key: str) -> Dict[str, object]:
        return self._request("GET", f"/api/details/{_quote_key(key)}").json()["object"]

    def download(self, key: str) -> bytes:
        return self._request("GET", f"/api/download/{_quote_key(key)}").content

    def upload(self, key: str, data: bytes, content_type: str = "application/octet-stream") -> Dict[str, object]:
        return self._request(
            "POST",
            f"/api/files/{_quote_key(key)}",
            data=data,
            headers={"Content-Type": content_type},
        ).json()

    def upload_path(self, key: str, path: Path) -> Dict[str, object]:
        content_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        return self.upload(key, path.read_bytes(), content_type)

    def delete(self, key: str) -> Dict[str, object]:
        return self._request("DELETE", f"/api/files/{_quote_key(key)}").json()

    def copy(self, key: str, destination: str) -> Dict[str, object]:
        return self._request("POST", f"/api/copy/{_quote_key(key)}", json={"destination": destination}).json()

    def move(self, key: str, destination: str) -> Dict[str, object]:
        return self._request("POST", f"/api/move/{_quote_key(key)}", json={"destination": destination}).json()


def _quote_key(key: str) -> str:
    return quote(key.lstrip("/"), safe="/")


def _error_message(response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or "request failed"
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return "request failed"
