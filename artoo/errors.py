"""Error taxonomy shared by the services and the HTTP layer.

Each error carries the HTTP status it maps to; the message is what the client
sees in the ``{"error": ...}`` body, so it must never contain collaborator
details.
"""

from __future__ import annotations


class ApiError(Exception):
    status_code: int = 500

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.status_code}, {self.message!r})"


class BadRequest(ApiError):
    status_code = 400


class Unauthorized(ApiError):
    status_code = 401


class NotFound(ApiError):
    status_code = 404


class MethodNotAllowed(ApiError):
    status_code = 405


class InternalError(ApiError):
    status_code = 500

    def __init__(self, message: str = "Internal Server Error"):
        super().__init__(message)


class StorageError(RuntimeError):
    """Raised by object stores when the backing medium fails."""
