"""Read-side views over an owner's devices."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from datastore.base import TreeStore
from models.errors import NotFoundError
from models.records import TelemetryState
from services.paths import ALERTS_NODE, DATA_NODE, TELEMETRY_NODE, devices_path
from services.timefmt import DEFAULT_TIMEZONE, format_timestamp


@dataclass
class DeviceTelemetry:
    device: str
    telemetry: Optional[TelemetryState] = None


@dataclass
class AlertView:
    message: str
    day: str
    time: str


@dataclass
class DeviceAlerts:
    device: str
    alerts: List[AlertView] = field(default_factory=list)


class DeviceReadModel:
    """Full reads of an owner's device collection."""

    def __init__(self, store: TreeStore, tz_name: str = DEFAULT_TIMEZONE) -> None:
        self.store = store
        self.tz_name = tz_name

    async def list_devices_with_telemetry(self, owner_id: str) -> List[DeviceTelemetry]:
        devices = await self._devices(owner_id)
        results = []
        for device_id, node in devices.items():
            record = _data_node(node).get(TELEMETRY_NODE)
            telemetry = TelemetryState.from_record(record) if isinstance(record, dict) else None
            results.append(DeviceTelemetry(device=device_id, telemetry=telemetry))
        if not results:
            raise NotFoundError(f"Owner {owner_id!r} has no devices.")
        return results

    async def list_devices_with_alerts(self, owner_id: str) -> List[DeviceAlerts]:
        devices = await self._devices(owner_id)
        results = []
        for device_id, node in devices.items():
            alerts = _data_node(node).get(ALERTS_NODE)
            if not isinstance(alerts, dict) or not alerts:
                continue
            # Push ids sort in insertion order.
            views = [
                self._render(alerts[key]) for key in sorted(alerts) if isinstance(alerts[key], dict)
            ]
            results.append(DeviceAlerts(device=device_id, alerts=views))
        if not results:
            raise NotFoundError(f"Owner {owner_id!r} has no alerts.")
        return results

    async def _devices(self, owner_id: str) -> Dict[str, Any]:
        value = await self.store.get(devices_path(owner_id))
        if not isinstance(value, dict):
            return {}
        return {key: node for key, node in value.items() if isinstance(node, dict)}

    def _render(self, alert: Dict[str, Any]) -> AlertView:
        stamp = format_timestamp(int(alert.get("timestamp", 0)), self.tz_name)
        # "mensagem" is the field name of entries written by older deployments.
        message = alert.get("message", alert.get("mensagem", ""))
        return AlertView(message=str(message), day=stamp["day"], time=stamp["time"])


def _data_node(node: Dict[str, Any]) -> Dict[str, Any]:
    data = node.get(DATA_NODE)
    return data if isinstance(data, dict) else {}
