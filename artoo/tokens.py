"""HS256 JWT signing and verification."""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
from typing import Any, Dict

_HEADER = {"alg": "HS256", "typ": "JWT"}


class TokenSigner:
    """Signs and checks compact JWS tokens with a shared HMAC secret.

    ``verify`` only checks structure and signature. Expiry is a policy
    decision left to the caller, which reads ``exp`` through ``decode``.
    """

    def __init__(self, secret: str):
        if not secret:
            raise ValueError("Token secret must be non-empty")
        self._secret = secret.encode()

    def sign(self, payload: Dict[str, Any]) -> str:
        header_b64 = _b64url_encode(json.dumps(_HEADER, separators=(",", ":")).encode())
        payload_b64 = _b64url_encode(json.dumps(payload, separators=(",", ":")).encode())
        signing_input = f"{header_b64}.{payload_b64}".encode()
        signature = hmac.new(self._secret, signing_input, hashlib.sha256).digest()
        return f"{header_b64}.{payload_b64}.{_b64url_encode(signature)}"

    def verify(self, token: str) -> bool:
        try:
            header_b64, payload_b64, signature_b64 = token.split(".")
            header = _b64url_to_json(header_b64)
            actual = _b64url_decode(signature_b64)
        except ValueError:
            return False
        if header.get("alg") != "HS256":
            return False
        signing_input = f"{header_b64}.{payload_b64}".encode()
        expected = hmac.new(self._secret, signing_input, hashlib.sha256).digest()
        return hmac.compare_digest(expected, actual)

    def decode(self, token: str) -> Dict[str, Any]:
        try:
            _, payload_b64, _ = token.split(".")
        except ValueError as exc:
            raise ValueError("Malformed JWT") from exc
        return _b64url_to_json(payload_b64)


def _b64url_encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode()


def _b64url_to_json(segment: str) -> Dict[str, Any]:
    data = _b64url_decode(segment)
    try:
        value = json.loads(data.decode())
    except UnicodeDecodeError as exc:
        raise ValueError("Malformed JWT segment") from exc
    if not isinstance(value, dict):
        raise ValueError("JWT segment is not an object")
    return value


def _b64url_decode(segment: str) -> bytes:
    padding = "=" * (-len(segment) % 4)
    try:
        return base64.urlsafe_b64decode(segment + padding)
    except (ValueError, TypeError) as exc:
        raise ValueError("Malformed base64url segment") from exc
