from __future__ import annotations
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api import health_router, router
from app.errors import install_error_handlers
from logging_config import configure_logging
from services.wiring import build_default_services


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    services = build_default_services()
    try:
        yield
    finally:
        await services.aclose()
        build_default_services.cache_clear()


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(
        title="Irrigation Telemetry API",
        description="Owner authentication, device telemetry ingestion and irrigation alerts.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    install_error_handlers(app)
    app.include_router(router)
    app.include_router(health_router)
    return app

app = create_app()
