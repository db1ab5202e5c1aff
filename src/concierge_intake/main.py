# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Concierge Intake - FastAPI Application.

Members' club front door:
- Access code gate and signed invite links
- RSVP, concierge, membership and seat request forms
- Admin login and read-only record listing
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.middleware.sessions import SessionMiddleware

from concierge_intake import __version__
from concierge_intake.api.deps import limiter
from concierge_intake.api.v1.router import invite_router
from concierge_intake.api.v1.router import router as api_router
from concierge_intake.config import Settings, get_settings
from concierge_intake.errors import IntakeError, IntakeErrorCode, StorageError
from concierge_intake.logging_config import configure_logging, get_logger
from concierge_intake.schemas.gate import HealthResponse
from concierge_intake.services.access_codes import AccessCodeRegistry
from concierge_intake.services.admin_auth import AdminAuthenticator
from concierge_intake.services.gate_session import GateSession
from concierge_intake.services.intake_service import IntakeService
from concierge_intake.services.intake_validator import IntakeValidator
from concierge_intake.services.notifier import EmailNotifier, NotificationQueue
from concierge_intake.services.record_store import build_record_store

logger = get_logger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application with every component wired from ``settings``."""
    settings = settings or get_settings()
    configure_logging(settings)

    registry = AccessCodeRegistry(settings.access_code_list, settings.access_code_hash_list)
    store = build_record_store(settings.storage_backend, settings.data_dir, settings.database_url)
    notifications = NotificationQueue(EmailNotifier(settings), maxsize=settings.notify_queue_size)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Open the store and start the notification worker."""
        logger.info(
            "Starting Concierge Intake service",
            version=__version__,
            environment=settings.environment,
            storage_backend=settings.storage_backend,
            access_codes=len(registry),
        )
        if not len(registry):
            logger.warning("No access codes configured, the gate will stay locked")
        if not settings.invite_signing_secret:
            logger.warning("Invite signing secret not set, invite links are disabled")
        if settings.session_secret == "change-me":
            logger.warning("Using the default session secret")

        await store.startup()
        notifications.start()

        yield

        logger.info("Shutting down Concierge Intake service", pending_notifications=notifications.pending)
        await notifications.stop()
        await store.close()

    app = FastAPI(
        title="Concierge Intake",
        description="Access gate and intake forms for a private members' club",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url=None,
        openapi_url="/openapi.json" if settings.debug else None,
    )

    app.state.settings = settings
    app.state.store = store
    app.state.notifications = notifications
    app.state.gate = GateSession(
        registry,
        settings.invite_signing_secret,
        ttl_seconds=settings.session_max_age_seconds,
        cooldown_seconds=settings.gate_cooldown_ms / 1000,
    )
    app.state.intake = IntakeService(IntakeValidator(registry), store, notifications)
    app.state.admin = AdminAuthenticator(settings.admin_email, settings.admin_password_hash)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "X-Request-ID"],
    )
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.session_secret,
        session_cookie=settings.session_cookie_name,
        max_age=settings.session_max_age_seconds,
        same_site="lax",
        https_only=settings.cookie_secure,
    )

    # Configure rate limiter
    limiter.enabled = settings.rate_limit_enabled
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    @app.exception_handler(IntakeError)
    async def intake_error_handler(request: Request, exc: IntakeError):
        if isinstance(exc, StorageError):
            logger.error(
                "Storage failure",
                path=request.url.path,
                collection=exc.collection,
                reason=exc.details.get("reason"),
            )
        return JSONResponse(status_code=exc.http_status, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"ok": False, "error": IntakeErrorCode.MISSING_FIELDS.value},
        )

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Handle uncaught exceptions."""
        logger.exception("Unhandled error", path=request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"ok": False, "error": IntakeErrorCode.INTERNAL_ERROR.value},
        )

    @app.get("/api/health", response_model=HealthResponse, tags=["health"], summary="Health check")
    async def health() -> HealthResponse:
        return HealthResponse(time=datetime.now(timezone.utc), version=__version__)

    @app.get("/robots.txt", response_class=PlainTextResponse, include_in_schema=False)
    async def robots() -> str:
        return "User-agent: *\nDisallow: /\n"

    app.include_router(api_router)
    app.include_router(invite_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    _settings = get_settings()
    uvicorn.run(
        "concierge_intake.main:app",
        host=_settings.host,
        port=_settings.port,
        reload=_settings.debug,
    )
