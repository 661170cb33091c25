"""Uniform response construction for every route.

All responses, success or failure, carry the same CORS header set. JSON is
the body format everywhere except for raw file bytes.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Mapping, Optional
from urllib.parse import quote

from fastapi.responses import JSONResponse, Response, StreamingResponse

from ..models import DEFAULT_CONTENT_TYPE, ObjectBody, format_timestamp


class ResponseEnvelope:
    def __init__(self, cors_headers: Mapping[str, str], chunk_size: int = 1024 * 1024):
        self.cors_headers = MappingProxyType(dict(cors_headers))
        self.chunk_size = chunk_size

    def _headers(self, extra: Optional[Mapping[str, str]] = None) -> dict[str, str]:
        headers = dict(self.cors_headers)
        if extra:
            headers.update(extra)
        return headers

    def json(self, content: Any, status_code: int = 200) -> JSONResponse:
        return JSONResponse(content=content, status_code=status_code, headers=self._headers())

    def error(self, status_code: int, message: str, headers: Optional[Mapping[str, str]] = None) -> JSONResponse:
        return JSONResponse(content={"error": message}, status_code=status_code, headers=self._headers(headers))

    def preflight(self) -> Response:
        return Response(status_code=200, headers=self._headers())

    def file(self, body: ObjectBody, *, attachment: bool = False) -> StreamingResponse:
        info = body.info
        extra = {
            "Content-Type": info.content_type or DEFAULT_CONTENT_TYPE,
            "Content-Length": str(info.size),
            "ETag": info.etag,
            "Last-Modified": format_timestamp(info.uploaded_at),
        }
        if attachment:
            extra["Content-Disposition"] = f'attachment; filename="{quote(info.name)}"'
        return StreamingResponse(
            body.iter_chunks(self.chunk_size),
            status_code=200,
            headers=self._headers(extra),
        )
