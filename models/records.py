"""Domain models shared across services."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Union

from models.errors import ValidationError

Number = Union[int, float]

TELEMETRY_FIELDS = ("MS", "UA", "TP", "RL", "S1", "S2", "RG")
NUMERIC_FIELDS = ("MS", "UA", "TP", "S1", "S2")
FLAG_FIELDS = ("RL", "RG")

_TRUE_LITERALS = (True, "true", "TRUE")
_FALSE_LITERALS = (False, "false", "FALSE")

IRRIGATION_MESSAGE = "Irrigação realizada"


def parse_flag(value: Any, field: str = "value") -> bool:
    """Normalize a device boolean.

    Accepted literals are ``true``/``"true"``/``"TRUE"`` and
    ``false``/``"false"``/``"FALSE"``; anything else is rejected.
    """
    # 1 == True, so compare types as well as values.
    if any(value == literal and type(value) is type(literal) for literal in _TRUE_LITERALS):
        return True
    if any(value == literal and type(value) is type(literal) for literal in _FALSE_LITERALS):
        return False
    raise ValidationError(f"Unsupported boolean literal for {field}: {value!r}")


def _stored_flag(value: Any) -> bool:
    # Snapshots written by older firmware keep the flags as strings.
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return bool(value)


def parse_number(value: Any, field: str = "value") -> Number:
    if isinstance(value, bool):
        raise ValidationError(f"Expected a number for {field}, got a boolean.")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if math.isfinite(value):
            return value
        raise ValidationError(f"Invalid numeric value for {field}: {value!r}")
    if isinstance(value, str):
        candidate = value.strip()
        # int()/float() accept digit separators; devices send plain decimals.
        if "_" in candidate:
            raise ValidationError(f"Invalid numeric value for {field}: {value!r}")
        try:
            return int(candidate)
        except ValueError:
            pass
        try:
            parsed = float(candidate)
        except ValueError as exc:
            raise ValidationError(f"Invalid numeric value for {field}: {value!r}") from exc
        if math.isfinite(parsed):
            return parsed
    raise ValidationError(f"Invalid numeric value for {field}: {value!r}")


@dataclass(frozen=True, slots=True)
class TelemetryReport:
    """Normalized sensor/actuator values sent by a device."""

    MS: Number
    UA: Number
    TP: Number
    RL: bool
    S1: Number
    S2: Number
    RG: bool

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "TelemetryReport":
        # Presence is a key test: a zero reading is a valid reading.
        missing = [field for field in TELEMETRY_FIELDS if field not in payload]
        if missing:
            raise ValidationError(f"Missing telemetry fields: {', '.join(missing)}")
        values: Dict[str, Any] = {}
        for field in NUMERIC_FIELDS:
            values[field] = parse_number(payload[field], field)
        for field in FLAG_FIELDS:
            values[field] = parse_flag(payload[field], field)
        return cls(**values)


@dataclass(frozen=True, slots=True)
class TelemetryState:
    """Latest snapshot stored for a device; always written as a whole."""

    MS: Number
    UA: Number
    TP: Number
    RL: bool
    S1: Number
    S2: Number
    RG: bool
    TIME: int
    HR: str
    DAY: str

    def to_record(self) -> Dict[str, Any]:
        return {
            "MS": self.MS,
            "UA": self.UA,
            "TP": self.TP,
            "RL": self.RL,
            "S1": self.S1,
            "S2": self.S2,
            "RG": self.RG,
            "TIME": self.TIME,
            "HR": self.HR,
            "DAY": self.DAY,
        }

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "TelemetryState":
        return cls(
            MS=record.get("MS", 0),
            UA=record.get("UA", 0),
            TP=record.get("TP", 0),
            RL=_stored_flag(record.get("RL", False)),
            S1=record.get("S1", 0),
            S2=record.get("S2", 0),
            RG=_stored_flag(record.get("RG", False)),
            TIME=int(record.get("TIME", 0)),
            HR=str(record.get("HR", "")),
            DAY=str(record.get("DAY", "")),
        )


@dataclass(frozen=True, slots=True)
class AlertRecord:
    timestamp: int
    message: str
    id: Optional[str] = None

    def to_record(self) -> Dict[str, Any]:
        return {"timestamp": self.timestamp, "message": self.message}


@dataclass(frozen=True, slots=True)
class AlertDecision:
    """Outcome of one ingestion."""

    state: TelemetryState
    triggered: bool
    alert_id: Optional[str] = None


@dataclass(frozen=True, slots=True)
class User:
    id: str
    name: str
    email: str
    created_at: str

    def to_record(self) -> Dict[str, Any]:
        return {"name": self.name, "email": self.email, "createdAt": self.created_at}
