from __future__ import annotations

import os
from dataclasses import dataclass
from typing import List


SUPPORTED_LOCALES = ("en", "ko")


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    Env vars:
    - PERSISTENCE_BACKEND: 'sqlite' (default) or 'memory'
    - SQLITE_DB_PATH: path to sqlite db file. Default './data/hydrominder.db'
    - CORS_ALLOW_ORIGINS: comma-separated list of allowed origins; '*' by default
    - NOTIFICATIONS_GRANTED: answer given to the notification permission prompt (default: true)
    - APP_LOCALE: 'en' (default) or 'ko'; used for screen and notification text
    - LOG_LEVEL: root log level (default: INFO)
    """

    persistence_backend: str
    sqlite_db_path: str
    cors_allow_origins: List[str]
    notifications_granted: bool
    locale: str
    log_level: str


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value == "":
        return default
    return value


def _parse_bool(value: str, default: bool = False) -> bool:
    v = value.strip().lower()
    if v in {"1", "true", "yes", "on"}:
        return True
    if v in {"0", "false", "no", "off"}:
        return False
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
    backend = _get_env("PERSISTENCE_BACKEND", "sqlite").strip().lower()
    if backend not in {"memory", "sqlite"}:
        # Reminders must survive restarts unless memory is asked for explicitly
        backend = "sqlite"

    sqlite_path = _get_env("SQLITE_DB_PATH", "./data/hydrominder.db").strip()
    origins = _parse_origins(_get_env("CORS_ALLOW_ORIGINS", "*"))

    granted = _parse_bool(_get_env("NOTIFICATIONS_GRANTED", "true"), True)

    locale = _get_env("APP_LOCALE", "en").strip().lower()
    if locale not in SUPPORTED_LOCALES:
        locale = "en"

    log_level = _get_env("LOG_LEVEL", "INFO").strip().upper()

    return Settings(
        persistence_backend=backend,
        sqlite_db_path=sqlite_path,
        cors_allow_origins=origins,
        notifications_granted=granted,
        locale=locale,
        log_level=log_level,
    )
