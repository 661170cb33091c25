"""Public HTTP API (FastAPI) for the Artoo runtime."""

from .server import create_app  # noqa: F401  (re-export for convenience)
