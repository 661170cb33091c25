"""Configuration primitives for the Artoo file API."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Mapping, Optional


@dataclass
class AuthConfig:
    jwt_secret: Optional[str] = None
    token_ttl_seconds: int = 60 * 60
    credentials_path: Optional[str] = None
    credentials: Dict[str, str] = field(default_factory=dict)


@dataclass
class StorageConfig:
    backend: str = "memory"
    base_path: str = field(default_factory=lambda: str(Path.cwd() / "data" / "objects"))
    chunk_size: int = 1024 * 1024


@dataclass
class CorsConfig:
    allow_origin: str = "*"
    allow_methods: str = "GET, POST, PUT, DELETE, OPTIONS"
    allow_headers: str = "Content-Type, Authorization"
    max_age_seconds: int = 86400

    def headers(self) -> Dict[str, str]:
        return {
            "Access-Control-Allow-Origin": self.allow_origin,
            "Access-Control-Allow-Methods": self.allow_methods,
            "Access-Control-Allow-Headers": self.allow_headers,
            "Access-Control-Max-Age": str(self.max_age_seconds),
        }


@dataclass
class ObservabilityConfig:
    log_level: str = "INFO"
    log_format: str = "[%(asctime)s] %(levelname)s %(message)s"


@dataclass
class ArtooConfig:
    auth: AuthConfig
    storage: StorageConfig
    cors: CorsConfig
    observability: ObservabilityConfig

    @staticmethod
    def default() -> "ArtooConfig":
        return ArtooConfig(
            auth=AuthConfig(),
            storage=StorageConfig(),
            cors=CorsConfig(),
            observability=ObservabilityConfig(),
        )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ArtooConfig":
        """Builds a configuration from ``ARTOO_*`` environment variables."""
        env = os.environ if environ is None else environ
        cfg = cls.default()
        cfg.auth.jwt_secret = env.get("ARTOO_JWT_SECRET") or None
        cfg.auth.credentials_path = env.get("ARTOO_CREDENTIALS_FILE") or None
        ttl = env.get("ARTOO_TOKEN_TTL_SECONDS")
        if ttl:
            cfg.auth.token_ttl_seconds = int(ttl)
        cfg.storage.backend = env.get("ARTOO_STORAGE_BACKEND", cfg.storage.backend).strip().lower()
        if env.get("ARTOO_STORAGE_DIR"):
            cfg.storage.base_path = env["ARTOO_STORAGE_DIR"]
        cfg.cors.allow_origin = env.get("ARTOO_CORS_ORIGIN", cfg.cors.allow_origin)
        cfg.observability.log_level = env.get("ARTOO_LOG_LEVEL", cfg.observability.log_level).upper()
        return cfg
