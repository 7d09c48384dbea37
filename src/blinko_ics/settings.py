from __future__ import annotations

import os
from dataclasses import dataclass
from typing import List, Optional


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    Env vars:
    - BLINKO_API_BASE: base URL of the Blinko API, e.g. 'https://blinko.example.com/api/v1'
    - BLINKO_TOKEN: bearer token for the Blinko API
    - BLINKO_PASSWORD: password required for manual sync; unset disables the check
    - SYNC_INTERVAL_MINUTES: scheduled sync period in minutes; 0 disables it (default: 60)
    - CALENDAR_NAME: calendar name used by scheduled sync (default: 'Todo')
    - SYNC_PAGE_SIZE: number of todos fetched per sync (default: 100)
    - ICS_FILENAME: storage key of the generated feed (default: 'todo.ics')
    - FEED_TTL_SECONDS: lifetime of a stored feed; 0 keeps it forever (default: 86400)
    - PERSISTENCE_BACKEND: 'memory' (default) or 'sqlite'
    - SQLITE_DB_PATH: path to sqlite db file. Default './data/feeds.db'
    - CORS_ALLOW_ORIGINS: comma-separated list of allowed origins; '*' by default
    - HTTP_TIMEOUT_SECONDS: timeout for Blinko API calls (default: 30)
    - LOG_LEVEL: root logging level (default: 'INFO')
    """

    blinko_api_base: Optional[str]
    blinko_token: Optional[str]
    blinko_password: Optional[str]
    sync_interval_minutes: int
    calendar_name: str
    sync_page_size: int
    ics_filename: str
    feed_ttl_seconds: int
    persistence_backend: str
    sqlite_db_path: str
    cors_allow_origins: List[str]
    http_timeout_seconds: float
    log_level: str


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value == "":
        return default
    return value


def _get_optional(name: str) -> Optional[str]:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return None
    return value.strip()


def _parse_int(value: str, default: int, minimum: int = 0) -> int:
    try:
        parsed = int(value.strip())
    except ValueError:
        return default
    return parsed if parsed >= minimum else default


def _parse_float(value: str, default: float) -> float:
    try:
        parsed = float(value.strip())
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _parse_origins(origins_value: str) -> List[str]:
    """
    Parse CORS origins from env. Supports:
    - '*' to allow all origins
    - Comma-separated list of origins
    """
    value = origins_value.strip()
    if value == "*":
        # Star will be handled in main via allow_origins=["*"]
        return ["*"]
    return [o.strip() for o in value.split(",") if o.strip()]


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Return application settings loaded from environment variables."""
    backend = _get_env("PERSISTENCE_BACKEND", "memory").strip().lower()
    if backend not in {"memory", "sqlite"}:
        # Fallback to memory if unsupported
        backend = "memory"

    api_base = _get_optional("BLINKO_API_BASE")
    if api_base:
        api_base = api_base.rstrip("/")

    return Settings(
        blinko_api_base=api_base,
        blinko_token=_get_optional("BLINKO_TOKEN"),
        blinko_password=_get_optional("BLINKO_PASSWORD"),
        sync_interval_minutes=_parse_int(_get_env("SYNC_INTERVAL_MINUTES", "60"), 60),
        calendar_name=_get_env("CALENDAR_NAME", "Todo").strip() or "Todo",
        sync_page_size=_parse_int(_get_env("SYNC_PAGE_SIZE", "100"), 100, minimum=1),
        ics_filename=_get_env("ICS_FILENAME", "todo.ics").strip(),
        feed_ttl_seconds=_parse_int(_get_env("FEED_TTL_SECONDS", "86400"), 86400),
        persistence_backend=backend,
        sqlite_db_path=_get_env("SQLITE_DB_PATH", "./data/feeds.db").strip(),
        cors_allow_origins=_parse_origins(_get_env("CORS_ALLOW_ORIGINS", "*")),
        http_timeout_seconds=_parse_float(_get_env("HTTP_TIMEOUT_SECONDS", "30"), 30.0),
        log_level=_get_env("LOG_LEVEL", "INFO").strip().upper(),
    )
