"""FastAPI application for the presence and chat session broker."""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from .core.config import Settings, get_settings
from .core.errors import ConfigurationMissingError, UpstreamRejectedError, UpstreamUnavailableError
from .routers import chats, presence, users
from .services.broker import PresenceSession, SessionBroker
from .services.provider import OpenTokProvider

logger = logging.getLogger(__name__)


async def build_broker(settings: Settings) -> SessionBroker:
    """Validate configuration and return a broker bound to the presence session.

    Raises ``ConfigurationMissingError`` if anything required is absent or the
    provider refuses the configured presence session id.
    """

    settings.require_provider_settings()

    broker = SessionBroker(
        OpenTokProvider.from_settings(settings),
        api_key=settings.api_key,
        presence=PresenceSession(session_id=settings.presence_session),
        max_name_length=settings.max_name_length,
    )
    try:
        await broker.check_presence_session()
    except (UpstreamRejectedError, UpstreamUnavailableError) as exc:
        raise ConfigurationMissingError(f"PRESENCE_SESSION is not usable: {exc}") from exc
    return broker


def create_app(broker: SessionBroker | None = None, settings: Settings | None = None) -> FastAPI:
    """Build the application. An injected ``broker`` skips startup provisioning."""

    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logging.getLogger().setLevel(settings.log_level.upper())
        if getattr(app.state, "broker", None) is None:
            app.state.broker = await build_broker(settings)
            logger.info("Presence session %s ready", app.state.broker.presence.session_id)
        yield

    app = FastAPI(title="Presence Broker API", version="0.1.0", lifespan=lifespan)
    app.state.broker = broker

    if settings.cors_allow_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_allow_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        """Report malformed user bodies with the same 400 as a bad name."""

        if request.url.path == "/users":
            return JSONResponse(
                status_code=400,
                content={"detail": f"name must be between 1 and {settings.max_name_length} characters"},
            )
        return await request_validation_exception_handler(request, exc)

    app.include_router(presence.router, tags=["presence"])
    app.include_router(users.router, tags=["users"])
    app.include_router(chats.router, tags=["chats"])

    @app.get("/api/health", tags=["meta"])
    async def health() -> dict[str, str]:
        """Simple liveness probe."""

        return {"status": "ok"}

    @app.head("/api/health", tags=["meta"])
    async def health_head() -> Response:
        """Allow HEAD for uptime monitors that only need the status code."""

        return Response(status_code=200)

    return app


app = create_app()
