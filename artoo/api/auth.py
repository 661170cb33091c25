"""Bearer-token gate for mutating routes."""

from __future__ import annotations

import logging

from fastapi import Depends, Request
from pydantic import BaseModel, ValidationError

from ..errors import Unauthorized
from ..runtime import ArtooRuntime
from ..services.auth_service import AuthService
from .routing import get_runtime

logger = logging.getLogger(__name__)


class AuthPayload(BaseModel):
    sub: str
    username: str
    exp: int


def verify_auth(request: Request, auth_service: AuthService) -> AuthPayload:
    """Verifies the ``Authorization: Bearer <token>`` header of ``request``.

    Raises :class:`Unauthorized` when the header is missing or not a bearer
    credential, when the signature does not verify, or when the token has
    expired. Nothing is cached; each call re-verifies.
    """
    header = request.headers.get("authorization")
    scheme, _, token = (header or "").partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token:
        raise Unauthorized("Missing or invalid authorization header")
    payload = auth_service.verify_token(token)
    try:
        return AuthPayload(**payload)
    except ValidationError as exc:
        raise Unauthorized("Invalid token") from exc


async def require_auth(request: Request, runtime: ArtooRuntime = Depends(get_runtime)) -> AuthPayload:
    """Route dependency; the endpoint only runs when verification succeeds."""
    try:
        return verify_auth(request, runtime.auth_service)
    except Unauthorized as exc:
        logger.info("Rejected %s %s: %s", request.method, request.url.path, exc.message)
        raise
