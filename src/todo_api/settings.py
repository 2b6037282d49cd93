from __future__ import annotations

import os
from dataclasses import dataclass
from typing import List


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    Env vars:
    - POSTGRES_HOST / POSTGRES_PORT / POSTGRES_DB: database location (port defaults to 5432)
    - POSTGRES_USER / POSTGRES_PASSWORD: database credentials
    - APP_ENV: deployment environment; 'production' requires TLS to the database
    - DB_POOL_MAX_SIZE: maximum simultaneous connections (default: 20)
    - DB_POOL_IDLE_TIMEOUT: seconds an idle connection is kept (default: 30)
    - DB_POOL_ACQUIRE_TIMEOUT: seconds to wait for a free connection (default: 2)
    - PERSISTENCE_BACKEND: 'postgres' (default) or 'memory'
    - CORS_ALLOW_ORIGINS: comma-separated list of allowed origins; '*' by default
    - LOG_LEVEL: root log level (default: INFO)
    """

    postgres_host: str
    postgres_port: int
    postgres_db: str
    postgres_user: str
    postgres_password: str
    app_env: str
    pool_max_size: int
    pool_idle_timeout: float
    pool_acquire_timeout: float
    persistence_backend: str
    cors_allow_origins: List[str]
    log_level: str

    @property
    def ssl_required(self) -> bool:
        return self.app_env == "production"


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value == "":
        return default
    return value


def _parse_int(value: str, default: int) -> int:
    try:
        return int(value.strip())
    except ValueError:
        return default


def _parse_float(value: str, default: float) -> float:
    try:
        return float(value.strip())
    except ValueError:
        return default


def _parse_origins(origins_value: str) -> List[str]:
    """
    Parse CORS origins from env. Supports:
    - '*' to allow all origins
    - Comma-separated list of origins
    """
    value = origins_value.strip()
    if value == "*":
        return ["*"]
    return [o.strip() for o in value.split(",") if o.strip()]


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Return application settings loaded from environment variables."""
    backend = _get_env("PERSISTENCE_BACKEND", "postgres").strip().lower()
    if backend not in {"postgres", "memory"}:
        backend = "postgres"

    return Settings(
        postgres_host=_get_env("POSTGRES_HOST", "localhost").strip(),
        postgres_port=_parse_int(_get_env("POSTGRES_PORT", "5432"), 5432),
        postgres_db=_get_env("POSTGRES_DB", "todos").strip(),
        postgres_user=_get_env("POSTGRES_USER", "postgres").strip(),
        postgres_password=os.getenv("POSTGRES_PASSWORD", ""),
        app_env=_get_env("APP_ENV", "development").strip().lower(),
        pool_max_size=_parse_int(_get_env("DB_POOL_MAX_SIZE", "20"), 20),
        pool_idle_timeout=_parse_float(_get_env("DB_POOL_IDLE_TIMEOUT", "30"), 30.0),
        pool_acquire_timeout=_parse_float(_get_env("DB_POOL_ACQUIRE_TIMEOUT", "2"), 2.0),
        persistence_backend=backend,
        cors_allow_origins=_parse_origins(_get_env("CORS_ALLOW_ORIGINS", "*")),
        log_level=_get_env("LOG_LEVEL", "INFO").strip().upper(),
    )
