"""Read-side device views."""

from __future__ import annotations

import asyncio

import pytest

from datastore.memory_tree import MockRealtimeDatabase
from models.errors import NotFoundError
from services.devices import AlertView, DeviceReadModel
from services.paths import resolve

NEW_YEAR_UTC_MS = 1_704_067_200_000


@pytest.fixture()
def tree() -> MockRealtimeDatabase:
    return MockRealtimeDatabase()


def test_no_devices_is_not_found(tree) -> None:
    read_model = DeviceReadModel(tree)

    with pytest.raises(NotFoundError):
        asyncio.run(read_model.list_devices_with_telemetry("owner-1"))
    with pytest.raises(NotFoundError):
        asyncio.run(read_model.list_devices_with_alerts("owner-1"))


def test_lists_each_device_with_latest_state(tree) -> None:
    asyncio.run(tree.set(resolve("owner-1", "dev-1").telemetry, {"MS": 5, "RG": False, "TIME": 1}))
    asyncio.run(tree.set(resolve("owner-1", "dev-2").alerts + "/k1", {"timestamp": 1, "message": "m"}))

    devices = asyncio.run(DeviceReadModel(tree).list_devices_with_telemetry("owner-1"))

    by_id = {entry.device: entry for entry in devices}
    assert set(by_id) == {"dev-1", "dev-2"}
    assert by_id["dev-1"].telemetry is not None
    assert by_id["dev-1"].telemetry.MS == 5
    assert by_id["dev-2"].telemetry is None


def test_devices_without_alerts_are_skipped(tree) -> None:
    asyncio.run(tree.set(resolve("owner-1", "dev-1").telemetry, {"MS": 5}))

    with pytest.raises(NotFoundError):
        asyncio.run(DeviceReadModel(tree).list_devices_with_alerts("owner-1"))


def test_alerts_render_in_insertion_order(tree) -> None:
    prefix = resolve("owner-1", "dev-1").alerts
    first = asyncio.run(tree.append(prefix, {"timestamp": NEW_YEAR_UTC_MS + 60_000, "message": "second clock"}))
    second = asyncio.run(tree.append(prefix, {"timestamp": NEW_YEAR_UTC_MS, "mensagem": "legacy"}))
    assert first < second

    devices = asyncio.run(DeviceReadModel(tree).list_devices_with_alerts("owner-1"))

    assert len(devices) == 1
    assert devices[0].device == "dev-1"
    assert devices[0].alerts == [
        AlertView(message="second clock", day="31/12/2023", time="21:01:00"),
        AlertView(message="legacy", day="31/12/2023", time="21:00:00"),
    ]


def test_other_owners_are_invisible(tree) -> None:
    asyncio.run(tree.set(resolve("owner-2", "dev-9").telemetry, {"MS": 1}))

    with pytest.raises(NotFoundError):
        asyncio.run(DeviceReadModel(tree).list_devices_with_telemetry("owner-1"))
