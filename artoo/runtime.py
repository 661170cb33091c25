"""Runtime wiring for the Artoo file API."""

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from typing import Optional

from .config import ArtooConfig, StorageConfig
from .credentials import CredentialStore
from .services.auth_service import AuthService
from .services.file_service import FileService
from .storage.base import ObjectStore
from .storage.disk_store import DiskObjectStore
from .storage.memory_store import InMemoryObjectStore
from .telemetry import TelemetryCollector
from .tokens import TokenSigner

logger = logging.getLogger(__name__)


@dataclass
class ArtooRuntime:
    config: ArtooConfig
    telemetry: TelemetryCollector
    store: ObjectStore
    credentials: CredentialStore
    file_service: FileService
    auth_service: AuthService

    @classmethod
    def bootstrap(
        cls,
        config: Optional[ArtooConfig] = None,
        *,
        store: Optional[ObjectStore] = None,
        credentials: Optional[CredentialStore] = None,
    ) -> "ArtooRuntime":
        cfg = config or ArtooConfig.default()
        telemetry = TelemetryCollector(cfg.observability)
        store = store if store is not None else build_object_store(cfg.storage)
        if credentials is None:
            credentials = CredentialStore(cfg.auth.credentials_path, initial=cfg.auth.credentials)

        secret = cfg.auth.jwt_secret
        if not secret:
            logger.warning("ARTOO_JWT_SECRET is not set; issued tokens will not survive a restart")
            secret = secrets.token_hex(32)

        file_service = FileService(config=cfg, telemetry=telemetry, store=store)
        auth_service = AuthService(
            config=cfg,
            telemetry=telemetry,
            credentials=credentials,
            signer=TokenSigner(secret),
        )
        return cls(
            config=cfg,
            telemetry=telemetry,
            store=store,
            credentials=credentials,
            file_service=file_service,
            auth_service=auth_service,
        )


def build_object_store(config: StorageConfig) -> ObjectStore:
    if config.backend == "memory":
        return InMemoryObjectStore()
    if config.backend == "disk":
        return DiskObjectStore(config.base_path)
    raise ValueError(f"Unknown storage backend: {config.backend!r}")
