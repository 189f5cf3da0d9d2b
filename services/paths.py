"""Storage paths for users and their devices.

Layout::

    usuarios/{owner}
    usuarios/{owner}/dispositivos/{device}
    usuarios/{owner}/dispositivos/{device}/dados/tempoReal
    usuarios/{owner}/dispositivos/{device}/dados/alertas/{push id}

Identifiers are not sanitized; a ``/`` inside a device id nests deeper.
"""

from __future__ import annotations

from dataclasses import dataclass

from models.errors import ValidationError

USERS_ROOT = "usuarios"
DEVICES_NODE = "dispositivos"
DATA_NODE = "dados"
TELEMETRY_NODE = "tempoReal"
ALERTS_NODE = "alertas"


@dataclass(frozen=True, slots=True)
class DevicePaths:
    metadata: str
    telemetry: str
    alerts: str


def _require(value: str, name: str) -> str:
    if not value:
        raise ValidationError(f"{name} must not be empty.")
    return value


def user_path(owner_id: str) -> str:
    return f"{USERS_ROOT}/{_require(owner_id, 'owner_id')}"


def devices_path(owner_id: str) -> str:
    return f"{user_path(owner_id)}/{DEVICES_NODE}"


def resolve(owner_id: str, device_id: str) -> DevicePaths:
    metadata = f"{devices_path(owner_id)}/{_require(device_id, 'device_id')}"
    return DevicePaths(
        metadata=metadata,
        telemetry=f"{metadata}/{DATA_NODE}/{TELEMETRY_NODE}",
        alerts=f"{metadata}/{DATA_NODE}/{ALERTS_NODE}",
    )
