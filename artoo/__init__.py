"""Path-addressed file management API over an object store."""

from .config import ArtooConfig  # noqa: F401
from .runtime import ArtooRuntime  # noqa: F401
