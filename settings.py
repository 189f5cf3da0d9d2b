from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional


_STORE_BACKEND_ENV = "STORE_BACKEND"
_TREE_PATH_ENV = "MOCK_TREE_PERSISTENCE_PATH"
_DATABASE_URL_ENV = "FIREBASE_DATABASE_URL"
_DATABASE_SECRET_ENV = "FIREBASE_DATABASE_SECRET"
_IDENTITY_BACKEND_ENV = "IDENTITY_BACKEND"
_IDENTITY_PATH_ENV = "MOCK_IDENTITY_PERSISTENCE_PATH"
_API_KEY_ENV = "FIREBASE_API_KEY"
_SERVICE_TOKEN_ENV = "FIREBASE_SERVICE_TOKEN"
_HTTP_TIMEOUT_ENV = "HTTP_TIMEOUT_SECONDS"
_TIMEZONE_ENV = "DEVICE_TIMEZONE"
_LOG_LEVEL_ENV = "LOG_LEVEL"

_BACKENDS = ("memory", "firebase")


@dataclass(frozen=True)
class Settings:
    store_backend: str
    tree_persistence_path: Optional[str]
    database_url: Optional[str]
    database_secret: Optional[str]
    identity_backend: str
    identity_persistence_path: Optional[str]
    api_key: Optional[str]
    service_token: Optional[str]
    http_timeout: float
    timezone: str
    log_level: str


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_optional_env(name: str, default: Optional[str]) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or None


def _read_backend(name: str, default: str) -> str:
    candidate = _read_str_env(name, default).lower()
    return candidate if candidate in _BACKENDS else default


def _read_timeout(default: float) -> float:
    value = os.getenv(_HTTP_TIMEOUT_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = float(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings(
        store_backend=_read_backend(_STORE_BACKEND_ENV, "memory"),
        tree_persistence_path=_read_optional_env(_TREE_PATH_ENV, "./tmp/mock_tree.json"),
        database_url=_read_optional_env(_DATABASE_URL_ENV, None),
        database_secret=_read_optional_env(_DATABASE_SECRET_ENV, None),
        identity_backend=_read_backend(_IDENTITY_BACKEND_ENV, "memory"),
        identity_persistence_path=_read_optional_env(
            _IDENTITY_PATH_ENV, "./tmp/mock_identity.json"
        ),
        api_key=_read_optional_env(_API_KEY_ENV, None),
        service_token=_read_optional_env(_SERVICE_TOKEN_ENV, None),
        http_timeout=_read_timeout(10.0),
        timezone=_read_str_env(_TIMEZONE_ENV, "America/Sao_Paulo"),
        log_level=_read_log_level("INFO"),
    )
