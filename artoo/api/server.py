"""FastAPI application exposing the Artoo file API."""

from __future__ import annotations

import argparse
import json
import logging
from typing import Any, Optional, Type, TypeVar

import uvicorn
from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.responses import Response
from pydantic import BaseModel, ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..config import ArtooConfig
from ..errors import BadRequest
from ..models import StoredObject, format_timestamp
from ..runtime import ArtooRuntime
from .auth import AuthPayload, require_auth
from .envelope import ResponseEnvelope
from .paths import request_key
from .routing import EnvelopeRoute, get_envelope, get_runtime, http_exception_handler

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

HEALTH_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]
PREFLIGHT_PATHS = [
    "/api/files",
    "/api/files/{wildcard:path}",
    "/api/details/{wildcard:path}",
    "/api/download/{wildcard:path}",
    "/api/copy/{wildcard:path}",
    "/api/move/{wildcard:path}",
    "/api/auth/{wildcard:path}",
]

router = APIRouter(route_class=EnvelopeRoute)


class LoginRequest(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None


class VerifyRequest(BaseModel):
    token: Optional[str] = None


class TransferRequest(BaseModel):
    destination: Optional[str] = None


@router.api_route("/health", methods=HEALTH_METHODS)
async def health(envelope: ResponseEnvelope = Depends(get_envelope)):
    return envelope.json({"status": "ok"})


async def preflight(envelope: ResponseEnvelope = Depends(get_envelope)):
    return envelope.preflight()


for _path in PREFLIGHT_PATHS:
    router.add_api_route(_path, preflight, methods=["OPTIONS"], include_in_schema=False)


# Files -------------------------------------------------------------------


@router.get("/api/files")
async def list_files(
    path: Optional[str] = None,
    runtime: ArtooRuntime = Depends(get_runtime),
    envelope: ResponseEnvelope = Depends(get_envelope),
):
    return _listing_response(runtime, envelope, path)


@router.get("/api/files/{wildcard:path}")
async def serve_file(
    request: Request,
    runtime: ArtooRuntime = Depends(get_runtime),
    envelope: ResponseEnvelope = Depends(get_envelope),
):
    key = request_key(request.scope)
    if not key:
        return _listing_response(runtime, envelope, None)
    return envelope.file(runtime.file_service.open(key))


@router.get("/api/details/{wildcard:path}")
async def file_details(
    request: Request,
    runtime: ArtooRuntime = Depends(get_runtime),
    envelope: ResponseEnvelope = Depends(get_envelope),
):
    key = request_key(request.scope)
    if not key:
        return _listing_response(runtime, envelope, None)
    info = runtime.file_service.describe(key)
    return envelope.json({"object": _serialize_object(info)})


@router.get("/api/download/{wildcard:path}")
async def download_file(
    request: Request,
    runtime: ArtooRuntime = Depends(get_runtime),
    envelope: ResponseEnvelope = Depends(get_envelope),
):
    key = request_key(request.scope)
    if not key:
        return _listing_response(runtime, envelope, None)
    return envelope.file(runtime.file_service.open(key), attachment=True)


@router.post("/api/files/{wildcard:path}", status_code=201)
async def upload_file(
    request: Request,
    auth: AuthPayload = Depends(require_auth),
    runtime: ArtooRuntime = Depends(get_runtime),
    envelope: ResponseEnvelope = Depends(get_envelope),
):
    key = request_key(request.scope)
    data = await request.body()
    info = runtime.file_service.upload(key, data, request.headers.get("content-type"))
    return envelope.json(
        {"message": "File uploaded successfully", "key": info.key, "etag": info.etag},
        status_code=201,
    )


@router.delete("/api/files/{wildcard:path}")
async def delete_file(
    request: Request,
    auth: AuthPayload = Depends(require_auth),
    runtime: ArtooRuntime = Depends(get_runtime),
    envelope: ResponseEnvelope = Depends(get_envelope),
):
    key = request_key(request.scope)
    runtime.file_service.delete(key)
    return envelope.json({"message": "File deleted successfully", "key": key})


@router.post("/api/copy/{wildcard:path}")
async def copy_file(
    request: Request,
    auth: AuthPayload = Depends(require_auth),
    runtime: ArtooRuntime = Depends(get_runtime),
    envelope: ResponseEnvelope = Depends(get_envelope),
):
    source = request_key(request.scope)
    payload = await _parse_body(request, TransferRequest)
    written = runtime.file_service.copy(source, payload.destination)
    return envelope.json(_serialize_transfer("File copied successfully", source, written))


@router.post("/api/move/{wildcard:path}")
async def move_file(
    request: Request,
    auth: AuthPayload = Depends(require_auth),
    runtime: ArtooRuntime = Depends(get_runtime),
    envelope: ResponseEnvelope = Depends(get_envelope),
):
    source = request_key(request.scope)
    payload = await _parse_body(request, TransferRequest)
    written = runtime.file_service.move(source, payload.destination)
    return envelope.json(_serialize_transfer("File moved successfully", source, written))


# Auth --------------------------------------------------------------------


@router.post("/api/auth/login")
async def login(
    request: Request,
    runtime: ArtooRuntime = Depends(get_runtime),
    envelope: ResponseEnvelope = Depends(get_envelope),
):
    payload = await _parse_body(request, LoginRequest)
    token = runtime.auth_service.login(payload.username, payload.password)
    return envelope.json({"token": token})


@router.post("/api/auth/verify")
async def verify(
    request: Request,
    runtime: ArtooRuntime = Depends(get_runtime),
    envelope: ResponseEnvelope = Depends(get_envelope),
):
    payload = await _parse_body(request, VerifyRequest)
    claims = runtime.auth_service.verify_token(payload.token)
    return envelope.json({"valid": True, "payload": claims})


def create_app(runtime: Optional[ArtooRuntime] = None) -> FastAPI:
    """Builds the application; without ``runtime`` it is bootstrapped from ``ARTOO_*`` env vars."""
    runtime = runtime or ArtooRuntime.bootstrap(ArtooConfig.from_env())
    app = FastAPI(title="Artoo API", version="0.1.0")
    app.state.runtime = runtime
    app.state.envelope = ResponseEnvelope(
        runtime.config.cors.headers(),
        chunk_size=runtime.config.storage.chunk_size,
    )
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.include_router(router)
    return app


def _listing_response(runtime: ArtooRuntime, envelope: ResponseEnvelope, prefix: Optional[str]) -> Response:
    objects = runtime.file_service.list_files(prefix)
    return envelope.json({"files": [_serialize_listing(info) for info in objects]})


def _serialize_listing(info: StoredObject) -> dict:
    return {
        "name": info.key,
        "size": info.size,
        "uploaded": format_timestamp(info.uploaded_at),
        "etag": info.etag,
    }


def _serialize_object(info: StoredObject) -> dict:
    return {
        "key": info.key,
        "size": info.size,
        "etag": info.etag,
        "uploaded": format_timestamp(info.uploaded_at),
        "contentType": info.content_type,
    }


async def _parse_body(request: Request, model: Type[ModelT]) -> ModelT:
    """Parses an optional JSON object body; an empty body yields the model defaults."""
    raw = await request.body()
    if not raw.strip():
        return model()
    try:
        data = json.loads(raw)
    except ValueError as exc:
        raise BadRequest("Invalid request body") from exc
    if not isinstance(data, dict):
        raise BadRequest("Invalid request body")
    try:
        return model(**data)
    except ValidationError as exc:
        raise BadRequest("Invalid request body") from exc


def _serialize_transfer(message: str, source: str, written: StoredObject) -> dict[str, Any]:
    return {"message": message, "from": source, "to": written.key, "etag": written.etag}


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Run the Artoo file API")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8787)
    args = parser.parse_args(argv)

    config = ArtooConfig.from_env()
    logging.basicConfig(level=config.observability.log_level, format=config.observability.log_format)
    app = create_app(ArtooRuntime.bootstrap(config))
    logger.info("Artoo API listening on %s:%s (storage=%s)", args.host, args.port, config.storage.backend)
    uvicorn.run(app, host=args.host, port=args.port, log_config=None)


if __name__ == "__main__":  # pragma: no cover - manual entrypoint
    main()
