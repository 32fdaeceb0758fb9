from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List

from .models import PERSIST_DEBOUNCE_MS, SUCCESS_MESSAGE_TTL_MS

DEFAULT_STORAGE_KEY = "todo-core-todos"


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    Env vars:
    - TODO_STORAGE_BACKEND: 'memory' (default) or 'sqlite'
    - SQLITE_DB_PATH: path to sqlite db file. Default './data/todos.db'
    - TODO_STORAGE_KEY: durable key holding the todo collection. Default 'todo-core-todos'
    - TODO_PERSIST_DEBOUNCE_MS: trailing debounce window for writes. Default 500
    - TODO_SUCCESS_MESSAGE_TTL_MS: lifetime of success messages. Default 3000
    - CORS_ALLOW_ORIGINS: comma-separated list of allowed origins; '*' by default
    - LOG_LEVEL: DEBUG/INFO/WARNING/ERROR (default: INFO)
    - LOG_FORMAT: 'console' (default) or 'json'
    """

    storage_backend: str = "memory"
    sqlite_db_path: str = "./data/todos.db"
    storage_key: str = DEFAULT_STORAGE_KEY
    persist_debounce_ms: int = PERSIST_DEBOUNCE_MS
    success_message_ttl_ms: int = SUCCESS_MESSAGE_TTL_MS
    cors_allow_origins: List[str] = field(default_factory=lambda: ["*"])
    log_level: str = "INFO"
    log_format: str = "console"


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value == "":
        return default
    return value


def _parse_int(value: str, default: int) -> int:
    try:
        parsed = int(value.strip())
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
    backend = _get_env("TODO_STORAGE_BACKEND", "memory").strip().lower()
    if backend not in {"memory", "sqlite"}:
        # Fallback to memory if unsupported
        backend = "memory"

    log_format = _get_env("LOG_FORMAT", "console").strip().lower()
    if log_format not in {"console", "json"}:
        log_format = "console"

    return Settings(
        storage_backend=backend,
        sqlite_db_path=_get_env("SQLITE_DB_PATH", "./data/todos.db").strip(),
        storage_key=_get_env("TODO_STORAGE_KEY", DEFAULT_STORAGE_KEY).strip(),
        persist_debounce_ms=_parse_int(
            _get_env("TODO_PERSIST_DEBOUNCE_MS", str(PERSIST_DEBOUNCE_MS)), PERSIST_DEBOUNCE_MS
        ),
        success_message_ttl_ms=_parse_int(
            _get_env("TODO_SUCCESS_MESSAGE_TTL_MS", str(SUCCESS_MESSAGE_TTL_MS)), SUCCESS_MESSAGE_TTL_MS
        ),
        cors_allow_origins=_parse_origins(_get_env("CORS_ALLOW_ORIGINS", "*")),
        log_level=_get_env("LOG_LEVEL", "INFO").strip().upper(),
        log_format=log_format,
    )
