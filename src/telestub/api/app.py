"""FastAPI application exposing the telegram stub as a service."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from telestub.api.routes import admin, health, telegrams
from telestub.core.config import AppSettings
from telestub.core.exceptions import DownstreamError, TelestubError
from telestub.logging_setup import configure_logging
from telestub.persistence import create_stub
from telestub.stub import TelegramStub


async def _downstream_error(request: Request, exc: DownstreamError) -> JSONResponse:
    return JSONResponse(status_code=502, content={"detail": str(exc)})


async def _configuration_error(request: Request, exc: TelestubError) -> JSONResponse:
    return JSONResponse(status_code=500, content={"detail": str(exc)})


def create_app(stub: TelegramStub | None = None, settings: AppSettings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    A prebuilt stub can be injected; otherwise one is created from settings
    at startup.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        app_settings = settings or AppSettings()
        configure_logging(app_settings.log_level)
        app.state.settings = app_settings
        app.state.stub = stub or create_stub(app_settings)
        yield

    app = FastAPI(
        title="Telegram Stub Service",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.add_exception_handler(DownstreamError, _downstream_error)
    app.add_exception_handler(TelestubError, _configuration_error)
    app.include_router(health.router)
    app.include_router(telegrams.router)
    app.include_router(admin.router, prefix="/admin")
    return app
