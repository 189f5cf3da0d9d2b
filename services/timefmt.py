"""Wall-clock rendering of epoch millisecond timestamps for device owners."""

from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Dict
from zoneinfo import ZoneInfo

DEFAULT_TIMEZONE = "America/Sao_Paulo"


def now_ms() -> int:
    return time.time_ns() // 1_000_000


def _localize(epoch_ms: int, tz_name: str) -> datetime:
    instant = datetime.fromtimestamp(epoch_ms / 1000, tz=timezone.utc)
    return instant.astimezone(ZoneInfo(tz_name))


def format_time(epoch_ms: int, tz_name: str = DEFAULT_TIMEZONE) -> str:
    """Return ``HH:MM:SS`` in the given zone (24h clock)."""
    return _localize(epoch_ms, tz_name).strftime("%H:%M:%S")


def format_date(epoch_ms: int, tz_name: str = DEFAULT_TIMEZONE) -> str:
    """Return ``DD/MM/YYYY`` in the given zone."""
    return _localize(epoch_ms, tz_name).strftime("%d/%m/%Y")


def format_timestamp(epoch_ms: int, tz_name: str = DEFAULT_TIMEZONE) -> Dict[str, str]:
    return {
        "day": format_date(epoch_ms, tz_name),
        "time": format_time(epoch_ms, tz_name),
    }
