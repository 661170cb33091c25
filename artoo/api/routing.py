"""Handler boundary: every route's outcome passes through the envelope here."""

from __future__ import annotations

import logging
from typing import Any, Callable, Coroutine

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import Response
from fastapi.routing import APIRoute
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..errors import ApiError
from ..runtime import ArtooRuntime
from .envelope import ResponseEnvelope

logger = logging.getLogger(__name__)


def get_runtime(request: Request) -> ArtooRuntime:
    return request.app.state.runtime


def get_envelope(request: Request) -> ResponseEnvelope:
    return request.app.state.envelope


class EnvelopeRoute(APIRoute):
    """APIRoute that renders errors raised by dependencies or the endpoint.

    Classified :class:`ApiError` instances keep their status and message;
    anything else is logged and flattened to a generic 500 so collaborator
    error text never reaches the client.
    """

    def get_route_handler(self) -> Callable[[Request], Coroutine[Any, Any, Response]]:
        original_handler = super().get_route_handler()

        async def envelope_handler(request: Request) -> Response:
            envelope = get_envelope(request)
            try:
                return await original_handler(request)
            except ApiError as exc:
                return envelope.error(exc.status_code, exc.message)
            except RequestValidationError:
                return envelope.error(400, "Invalid request body")
            except StarletteHTTPException as exc:
                return envelope.error(exc.status_code, str(exc.detail), exc.headers)
            except Exception:
                logger.exception("Unhandled error serving %s %s", request.method, request.url.path)
                return envelope.error(500, "Internal Server Error")

        return envelope_handler


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> Response:
    """Renders routing-level 404/405 through the envelope."""
    return get_envelope(request).error(exc.status_code, str(exc.detail), exc.headers)
