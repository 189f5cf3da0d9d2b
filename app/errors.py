"""Translation of service errors into HTTP responses.

Only ``public_message`` texts reach the caller; provider details are logged.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from models.errors import (
    InvalidCredentials,
    IrrigationError,
    NotFoundError,
    UpstreamError,
    ValidationError,
)

logger = logging.getLogger(__name__)


def status_for(exc: IrrigationError) -> int:
    if isinstance(exc, ValidationError):
        return status.HTTP_400_BAD_REQUEST
    if isinstance(exc, InvalidCredentials):
        return status.HTTP_401_UNAUTHORIZED
    if isinstance(exc, NotFoundError):
        return status.HTTP_404_NOT_FOUND
    # Registration rejections keep the historical 500 with a specific message.
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def _missing_fields_response() -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": ValidationError.public_message},
    )


async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    # Locations only; the rejected input may carry a password.
    fields = [".".join(str(part) for part in error["loc"]) for error in exc.errors()]
    logger.info(
        "Rejected request body",
        extra={"path": request.url.path, "reason": ",".join(fields)},
    )
    return _missing_fields_response()


async def handle_service_error(request: Request, exc: IrrigationError) -> JSONResponse:
    if isinstance(exc, ValidationError):
        logger.info("Rejected request", extra={"path": request.url.path, "reason": str(exc)})
        return _missing_fields_response()

    status_code = status_for(exc)
    if isinstance(exc, UpstreamError):
        logger.error(
            "Upstream failure",
            exc_info=exc,
            extra={
                "path": request.url.path,
                "status": status_code,
                "provider_code": exc.provider_code,
            },
        )
    else:
        logger.info(
            "Request failed",
            extra={"path": request.url.path, "status": status_code, "reason": str(exc)},
        )
    return JSONResponse(status_code=status_code, content={"message": exc.public_message})


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, handle_request_validation)
    app.add_exception_handler(IrrigationError, handle_service_error)
