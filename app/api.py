"""HTTP route definitions for the service."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Response, status

from app.schemas import (
    AlertOut,
    AlertsResponse,
    DataReceiveRequest,
    DeviceAlertsOut,
    DeviceTelemetryOut,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    RegisterRequest,
    RegisterResponse,
    ResetPasswordRequest,
    TelemetryOut,
    UserOut,
)
from services.wiring import Services, build_default_services

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1")
health_router = APIRouter()


def get_services() -> Services:
    return build_default_services()


@router.post(
    "/auth/login",
    response_model=LoginResponse,
    summary="Authenticate an owner and return the current state of each device.",
)
async def login(
    payload: LoginRequest,
    services: Services = Depends(get_services),
) -> LoginResponse:
    owner_id = await services.gateway.login(payload.email, payload.password)
    user = await services.users.get(owner_id)
    devices = await services.devices.list_devices_with_telemetry(owner_id)
    return LoginResponse(
        message="Login bem-sucedido",
        user=UserOut.from_user(user),
        userData=[
            DeviceTelemetryOut(
                device=entry.device,
                telemetry=TelemetryOut.from_state(entry.telemetry) if entry.telemetry else None,
            )
            for entry in devices
        ],
    )


@router.post(
    "/auth/register",
    response_model=RegisterResponse,
    summary="Create an owner account and provision its first device.",
)
async def register(
    payload: RegisterRequest,
    services: Services = Depends(get_services),
) -> RegisterResponse:
    user = await services.gateway.register(
        payload.email, payload.password, payload.name, payload.accessToken
    )
    return RegisterResponse(message="Usuário registrado com sucesso", user=UserOut.from_user(user))


@router.post(
    "/auth/reset-password",
    response_model=MessageResponse,
    summary="Send a password reset e-mail.",
)
async def reset_password(
    payload: ResetPasswordRequest,
    services: Services = Depends(get_services),
) -> MessageResponse:
    await services.gateway.request_password_reset(payload.email)
    return MessageResponse(message="E-mail de redefinição de senha enviado com sucesso")


@router.post(
    "/realtime/data-receive",
    summary="Store a device telemetry report and record irrigation alerts.",
    status_code=status.HTTP_200_OK,
    response_class=Response,
)
async def data_receive(
    payload: DataReceiveRequest,
    services: Services = Depends(get_services),
) -> Response:
    owner_id = await services.gateway.resolve_owner(payload.userId)
    decision = await services.telemetry.ingest(owner_id, payload.accessToken, payload.to_report())
    if decision.triggered:
        logger.info(
            "Irrigation reported",
            extra={"owner_id": owner_id, "device_id": payload.accessToken, "alert_id": decision.alert_id},
        )
    return Response(status_code=status.HTTP_200_OK)


@router.post(
    "/realtime/alerts",
    response_model=AlertsResponse,
    summary="Authenticate an owner and return the alert log of each device.",
)
async def alerts(
    payload: LoginRequest,
    services: Services = Depends(get_services),
) -> AlertsResponse:
    owner_id = await services.gateway.login(payload.email, payload.password)
    # Owners without a profile record get 404 here too, as on login.
    await services.users.get(owner_id)
    devices = await services.devices.list_devices_with_alerts(owner_id)
    return AlertsResponse(
        message="Login bem-sucedido",
        userData=[
            DeviceAlertsOut(
                device=entry.device,
                alerts=[
                    AlertOut(message=alert.message, day=alert.day, time=alert.time)
                    for alert in entry.alerts
                ],
            )
            for entry in devices
        ],
    )


@health_router.get(
    "/health",
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@health_router.get(
    "/",
    summary="Root endpoint mirrors health information.",
    status_code=status.HTTP_200_OK,
)
async def root() -> dict[str, str]:
    return {"status": "ok", "detail": "See /health for service status."}
