"""Object keys derived from wildcard routes."""

from __future__ import annotations

from typing import Any, Mapping

from ..services.file_service import normalize_key

# Every wildcard route has the shape /api/<operation>/*
API_PREFIX_SEGMENTS = 2


def resolve_key(url_path: str, prefix_segments: int = API_PREFIX_SEGMENTS) -> str:
    """Returns the part of ``url_path`` after its first ``prefix_segments`` segments.

    ``resolve_key("/api/files/docs/a.txt", 2) == "docs/a.txt"``. A path with
    nothing after the prefix resolves to ``""``, the root key.
    """
    segments = url_path.lstrip("/").split("/")
    return "/".join(segments[prefix_segments:])


def route_path(scope: Mapping[str, Any]) -> str:
    """The request path relative to the app, without any mount or root path."""
    path = scope["path"]
    root_path = scope.get("root_path", "")
    if not root_path or not path.startswith(root_path):
        return path
    if path == root_path:
        return ""
    if path[len(root_path)] == "/":
        return path[len(root_path):]
    return path


def request_key(scope: Mapping[str, Any]) -> str:
    """Resolves the object key addressed by a wildcard route request.

    Leading slashes are dropped so ``/api/files//a.txt`` and a transfer
    destination of ``/a.txt`` both address ``a.txt``.
    """
    return normalize_key(resolve_key(route_path(scope)))
