from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    Env vars:
    - DB_PATH: path to the sqlite db file. Default './.sqlite3/todo.db'
    - DB_TIMEOUT: seconds a connection waits on a locked database. Default 5
    - DB_OPERATION_TIMEOUT: seconds one store operation may run before it is
      interrupted; 0 disables it. Default 30
    - CORS_ALLOW_ORIGINS: comma-separated list of allowed origins; '*' by default
    - HOST / PORT: bind address for `python -m todo_api`. Default 0.0.0.0:8080
    - LOG_LEVEL: stdlib level name. Default INFO
    - LOG_FORMAT: 'json' or 'console' (default)
    """

    db_path: str = "./.sqlite3/todo.db"
    db_timeout: float = 5.0
    db_operation_timeout: float = 30.0
    cors_allow_origins: List[str] = field(default_factory=lambda: ["*"])
    host: str = "0.0.0.0"
    port: int = 8080
    log_level: str = "INFO"
    log_format: str = "console"


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
        parsed = float(value.strip())
    except ValueError:
        return default
    return parsed if parsed >= 0 else default


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
    log_format = _get_env("LOG_FORMAT", "console").strip().lower()
    if log_format not in {"json", "console"}:
        log_format = "console"

    return Settings(
        db_path=_get_env("DB_PATH", "./.sqlite3/todo.db").strip(),
        db_timeout=_parse_float(_get_env("DB_TIMEOUT", "5"), 5.0),
        db_operation_timeout=_parse_float(_get_env("DB_OPERATION_TIMEOUT", "30"), 30.0),
        cors_allow_origins=_parse_origins(_get_env("CORS_ALLOW_ORIGINS", "*")),
        host=_get_env("HOST", "0.0.0.0").strip(),
        port=_parse_int(_get_env("PORT", "8080"), 8080),
        log_level=_get_env("LOG_LEVEL", "INFO").strip().upper(),
        log_format=log_format,
    )
