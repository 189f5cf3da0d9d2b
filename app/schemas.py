"""Pydantic schemas for the HTTP API layer."""

from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, Field, ValidationInfo, field_validator

from models.errors import ValidationError
from models.records import (
    Number,
    TelemetryReport,
    TelemetryState,
    User,
    parse_flag,
    parse_number,
)


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class RegisterRequest(BaseModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    accessToken: str = Field(..., min_length=1, description="Identifier of the first device.")


class ResetPasswordRequest(BaseModel):
    email: str = Field(..., min_length=1)


class DataReceiveRequest(BaseModel):
    """One telemetry report; every field must be present, zero is a valid reading."""

    userId: str = Field(..., min_length=1, description="E-mail of the owning account.")
    accessToken: str = Field(..., min_length=1, description="Device identifier.")
    MS: Number
    UA: Number
    TP: Number
    RL: bool
    S1: Number
    S2: Number
    RG: bool

    @field_validator("MS", "UA", "TP", "S1", "S2", mode="before")
    @classmethod
    def _number(cls, value: Any, info: ValidationInfo) -> Number:
        try:
            return parse_number(value, info.field_name)
        except ValidationError as exc:
            raise ValueError(str(exc)) from exc

    @field_validator("RL", "RG", mode="before")
    @classmethod
    def _flag(cls, value: Any, info: ValidationInfo) -> bool:
        try:
            return parse_flag(value, info.field_name)
        except ValidationError as exc:
            raise ValueError(str(exc)) from exc

    def to_report(self) -> TelemetryReport:
        return TelemetryReport(
            MS=self.MS, UA=self.UA, TP=self.TP, RL=self.RL, S1=self.S1, S2=self.S2, RG=self.RG
        )


class UserOut(BaseModel):
    id: str
    name: str
    email: str
    created_at: str = Field(..., serialization_alias="createdAt")

    @classmethod
    def from_user(cls, user: User) -> "UserOut":
        return cls(id=user.id, name=user.name, email=user.email, created_at=user.created_at)


class TelemetryOut(BaseModel):
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

    @classmethod
    def from_state(cls, state: TelemetryState) -> "TelemetryOut":
        return cls(**state.to_record())


class DeviceTelemetryOut(BaseModel):
    device: str
    telemetry: Optional[TelemetryOut] = None


class AlertOut(BaseModel):
    message: str
    day: str
    time: str


class DeviceAlertsOut(BaseModel):
    device: str
    alerts: List[AlertOut] = Field(default_factory=list)


class MessageResponse(BaseModel):
    message: str


class RegisterResponse(BaseModel):
    message: str
    user: UserOut


class LoginResponse(BaseModel):
    message: str
    user: UserOut
    userData: List[DeviceTelemetryOut]


class AlertsResponse(BaseModel):
    message: str
    userData: List[DeviceAlertsOut]
