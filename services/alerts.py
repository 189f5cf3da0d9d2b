from __future__ import annotations

import logging

from datastore.base import StateWriter
from models.records import AlertRecord
from services.paths import resolve

logger = logging.getLogger(__name__)


class AlertLogWriter:
    """Appends alert records; existing entries are never rewritten."""

    def __init__(self, writer: StateWriter) -> None:
        self.writer = writer

    async def append(self, owner_id: str, device_id: str, record: AlertRecord) -> str:
        paths = resolve(owner_id, device_id)
        alert_id = await self.writer.append_log(paths.alerts, record.to_record())
        logger.info(
            "Alert recorded",
            extra={"owner_id": owner_id, "device_id": device_id, "alert_id": alert_id},
        )
        return alert_id
