"""Process-wide component wiring."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Callable, Optional

from datastore.base import StateWriter, TreeStore
from datastore.firebase_rtdb import FirebaseRealtimeDatabase
from datastore.memory_tree import build_default_tree
from identity.base import IdentityProvider
from identity.firebase import FirebaseIdentityProvider
from identity.memory import build_default_identity
from services.alerts import AlertLogWriter
from services.auth import AuthGateway
from services.devices import DeviceReadModel
from services.telemetry import TelemetryEngine
from services.timefmt import now_ms
from services.users import UserDirectory
from settings import Settings, get_settings


@dataclass(frozen=True)
class Services:
    """Immutable bundle of collaborators handed to the HTTP layer."""

    store: TreeStore
    identity: IdentityProvider
    users: UserDirectory
    telemetry: TelemetryEngine
    gateway: AuthGateway
    devices: DeviceReadModel

    async def aclose(self) -> None:
        await self.identity.aclose()
        await self.store.aclose()


def build_services(
    settings: Settings,
    store: TreeStore,
    identity: IdentityProvider,
    clock: Callable[[], int] = now_ms,
) -> Services:
    writer = StateWriter(store)
    users = UserDirectory(store)
    telemetry = TelemetryEngine(
        writer=writer,
        alerts=AlertLogWriter(writer),
        clock=clock,
        tz_name=settings.timezone,
    )
    return Services(
        store=store,
        identity=identity,
        users=users,
        telemetry=telemetry,
        gateway=AuthGateway(identity=identity, users=users, telemetry=telemetry),
        devices=DeviceReadModel(store, tz_name=settings.timezone),
    )


def _build_store(settings: Settings) -> TreeStore:
    if settings.store_backend == "firebase":
        if not settings.database_url:
            raise RuntimeError("FIREBASE_DATABASE_URL is required for the firebase store backend.")
        return FirebaseRealtimeDatabase(
            database_url=settings.database_url,
            secret=settings.database_secret,
            timeout=settings.http_timeout,
        )
    return build_default_tree()


def _build_identity(settings: Settings) -> IdentityProvider:
    if settings.identity_backend == "firebase":
        if not settings.api_key:
            raise RuntimeError("FIREBASE_API_KEY is required for the firebase identity backend.")
        return FirebaseIdentityProvider(
            api_key=settings.api_key,
            service_token=settings.service_token,
            timeout=settings.http_timeout,
        )
    return build_default_identity()


@lru_cache
def build_default_services(settings: Optional[Settings] = None) -> Services:
    """Factory that wires the services from environment configuration."""
    resolved = settings or get_settings()
    return build_services(
        resolved,
        store=_build_store(resolved),
        identity=_build_identity(resolved),
    )
