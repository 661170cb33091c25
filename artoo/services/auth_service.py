"""Login and token verification."""

from __future__ import annotations

import hmac
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

from ..credentials import CredentialStore
from ..errors import BadRequest, Unauthorized
from ..tokens import TokenSigner
from .base import BaseService

logger = logging.getLogger(__name__)


@dataclass
class AuthService(BaseService):
    credentials: CredentialStore
    signer: TokenSigner
    clock: Callable[[], float] = field(default=time.time)

    def login(self, username: Optional[str], password: Optional[str]) -> str:
        if not username or not password:
            raise BadRequest("Username and password are required")
        stored = self.credentials.get(username)
        if stored is None or not hmac.compare_digest(password.encode(), stored.encode()):
            logger.info("Rejected login for %s", username)
            self.emit_event("login_failed", username=username)
            raise Unauthorized("Invalid credentials")
        payload = {
            "sub": username,
            "username": username,
            "exp": int(self.clock()) + self.config.auth.token_ttl_seconds,
        }
        self.emit_event("login_succeeded", username=username)
        return self.signer.sign(payload)

    def verify_token(self, token: Optional[str]) -> Dict[str, Any]:
        """Returns the token payload or raises :class:`Unauthorized`.

        A token whose ``exp`` is at or before the current clock is expired.
        """
        if not token:
            raise BadRequest("Token is required")
        if not self.signer.verify(token):
            raise Unauthorized("Invalid token")
        try:
            payload = self.signer.decode(token)
            expires_at = float(payload["exp"])
        except (ValueError, KeyError, TypeError) as exc:
            raise Unauthorized("Invalid token") from exc
        if expires_at <= self.clock():
            raise Unauthorized("Token expired")
        return payload
