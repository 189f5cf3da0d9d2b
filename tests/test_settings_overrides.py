from __future__ import annotations

from typing import Iterable

from datastore.firebase_rtdb import FirebaseRealtimeDatabase
from datastore.memory_tree import build_default_tree
from identity.firebase import FirebaseIdentityProvider
from identity.memory import build_default_identity
from services.wiring import build_default_services
from settings import get_settings


def _clear_caches(caches: Iterable) -> None:
    for cache in caches:
        cache.cache_clear()


CACHES = (get_settings, build_default_tree, build_default_identity, build_default_services)


def test_defaults_use_in_process_backends(monkeypatch, tmp_path) -> None:
    for name in ("STORE_BACKEND", "IDENTITY_BACKEND", "DEVICE_TIMEZONE", "HTTP_TIMEOUT_SECONDS"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("MOCK_TREE_PERSISTENCE_PATH", str(tmp_path / "tree.json"))
    monkeypatch.setenv("MOCK_IDENTITY_PERSISTENCE_PATH", "")
    _clear_caches(CACHES)

    try:
        settings = get_settings()
        services = build_default_services()

        assert settings.store_backend == "memory"
        assert settings.timezone == "America/Sao_Paulo"
        assert settings.http_timeout == 10.0
        assert services.store is build_default_tree()
        assert build_default_tree().persistence_path == tmp_path / "tree.json"
        assert build_default_identity().persistence_path is None
    finally:
        _clear_caches(CACHES)


def test_environment_selects_firebase_backends(monkeypatch) -> None:
    monkeypatch.setenv("STORE_BACKEND", "FIREBASE")
    monkeypatch.setenv("FIREBASE_DATABASE_URL", "https://demo.firebaseio.com/")
    monkeypatch.setenv("FIREBASE_DATABASE_SECRET", "secret")
    monkeypatch.setenv("IDENTITY_BACKEND", "firebase")
    monkeypatch.setenv("FIREBASE_API_KEY", "key")
    monkeypatch.setenv("HTTP_TIMEOUT_SECONDS", "2.5")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    _clear_caches(CACHES)

    try:
        settings = get_settings()
        services = build_default_services()

        assert settings.http_timeout == 2.5
        assert settings.log_level == "DEBUG"
        assert isinstance(services.store, FirebaseRealtimeDatabase)
        assert services.store.database_url == "https://demo.firebaseio.com"
        assert isinstance(services.identity, FirebaseIdentityProvider)
    finally:
        _clear_caches(CACHES)


def test_invalid_values_fall_back_to_defaults(monkeypatch) -> None:
    monkeypatch.setenv("STORE_BACKEND", "cassandra")
    monkeypatch.setenv("HTTP_TIMEOUT_SECONDS", "-1")
    monkeypatch.setenv("DEVICE_TIMEZONE", "  ")
    get_settings.cache_clear()

    try:
        settings = get_settings()

        assert settings.store_backend == "memory"
        assert settings.http_timeout == 10.0
        assert settings.timezone == "America/Sao_Paulo"
    finally:
        get_settings.cache_clear()
