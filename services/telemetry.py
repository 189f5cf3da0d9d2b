"""Telemetry ingestion and irrigation alert derivation."""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping, Union

from datastore.base import StateWriter
from models.records import (
    IRRIGATION_MESSAGE,
    AlertDecision,
    AlertRecord,
    TelemetryReport,
    TelemetryState,
)
from services.alerts import AlertLogWriter
from services.paths import resolve
from services.timefmt import DEFAULT_TIMEZONE, format_date, format_time, now_ms

logger = logging.getLogger(__name__)

EMPTY_REPORT = TelemetryReport(MS=0, UA=0, TP=0, RL=False, S1=0, S2=0, RG=False)


class TelemetryEngine:
    """Owns every write to a device's current state.

    Each ingestion replaces the stored snapshot as a whole. Reports are
    neither ordered nor deduplicated: the last write to complete wins, and
    every report with ``RG`` set appends its own alert.
    """

    def __init__(
        self,
        writer: StateWriter,
        alerts: AlertLogWriter,
        clock: Callable[[], int] = now_ms,
        tz_name: str = DEFAULT_TIMEZONE,
    ) -> None:
        self.writer = writer
        self.alerts = alerts
        self.clock = clock
        self.tz_name = tz_name

    async def ingest(
        self,
        owner_id: str,
        device_id: str,
        report: Union[TelemetryReport, Mapping[str, Any]],
    ) -> AlertDecision:
        if not isinstance(report, TelemetryReport):
            report = TelemetryReport.from_payload(report)
        paths = resolve(owner_id, device_id)

        state = self._stamp(report)
        await self.writer.set_full_state(paths.telemetry, state.to_record())
        logger.debug(
            "Telemetry stored",
            extra={"owner_id": owner_id, "device_id": device_id, "path": paths.telemetry},
        )

        if not report.RG:
            return AlertDecision(state=state, triggered=False)

        alert_id = await self.alerts.append(
            owner_id,
            device_id,
            AlertRecord(timestamp=state.TIME, message=IRRIGATION_MESSAGE),
        )
        return AlertDecision(state=state, triggered=True, alert_id=alert_id)

    async def provision(self, owner_id: str, device_id: str) -> TelemetryState:
        """Create a device with a zeroed snapshot and no alerts."""
        paths = resolve(owner_id, device_id)
        state = self._stamp(EMPTY_REPORT)
        await self.writer.set_full_state(paths.telemetry, state.to_record())
        logger.info("Device provisioned", extra={"owner_id": owner_id, "device_id": device_id})
        return state

    def _stamp(self, report: TelemetryReport) -> TelemetryState:
        timestamp = self.clock()
        return TelemetryState(
            MS=report.MS,
            UA=report.UA,
            TP=report.TP,
            RL=report.RL,
            S1=report.S1,
            S2=report.S2,
            RG=report.RG,
            TIME=timestamp,
            HR=format_time(timestamp, self.tz_name),
            DAY=format_date(timestamp, self.tz_name),
        )
