"""
Environment configuration.

Every value is read on call so tests (and process managers) can change the
environment without re-importing modules.
"""

from __future__ import annotations

import os

STORE_POSTGRES = "postgres"
STORE_MEMORY = "memory"

_DEFAULT_CORS_ORIGINS = "http://localhost:5173,http://127.0.0.1:5173"


def _env_str(name: str, default: str) -> str:
    return os.environ.get(name, "").strip() or default


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def users_store() -> str:
    value = _env_str("USERS_STORE", STORE_POSTGRES).lower()
    if value not in (STORE_POSTGRES, STORE_MEMORY):
        raise RuntimeError(f"USERS_STORE must be '{STORE_POSTGRES}' or '{STORE_MEMORY}', got {value!r}.")
    return value


def db_pool_min_size() -> int:
    return max(1, _env_int("DB_POOL_MIN_SIZE", 1))


def db_pool_max_size() -> int:
    return max(db_pool_min_size(), _env_int("DB_POOL_MAX_SIZE", 5))


def db_command_timeout_s() -> int:
    return _env_int("DB_COMMAND_TIMEOUT_S", 30)


def cors_allow_origins() -> list[str]:
    raw = _env_str("CORS_ALLOW_ORIGINS", _DEFAULT_CORS_ORIGINS)
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def server_host() -> str:
    return _env_str("HOST", "0.0.0.0")


def server_port() -> int:
    return _env_int("PORT", 8000)


def log_level() -> str:
    return _env_str("LOG_LEVEL", "INFO").upper()
