"""FastAPI application factory with lifecycle management."""

from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

from .auth import AdminTokenVerifier
from .config import Settings
from .db import Database
from .exceptions import register_exception_handlers
from .logger import logger, setup_logger
from .middleware import (
    add_request_id_middleware,
    request_logging_middleware,
    security_headers_middleware,
)
from .monitoring import setup_monitoring
from .routes import create_router


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application. Settings are read from the environment when not given."""
    if settings is None:
        settings = Settings.load()

    setup_logger(settings)

    database = Database(settings)
    admin_verifier = AdminTokenVerifier(settings.ADMIN_TOKEN_HASH)
    limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)

    # ==================== Application Lifecycle ====================

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan - prepares the schema and releases connections on shutdown."""
        logger.info(f"Starting {settings.APP_NAME} in {settings.APP_ENV} mode")

        if settings.DB_AUTO_CREATE:
            await database.create_all()
        if not admin_verifier.enabled:
            logger.warning("ADMIN_TOKEN_HASH is not set - admin listing will reject every request")

        logger.info(f"{settings.APP_NAME} started successfully - ready to accept requests")

        yield

        logger.info(f"Shutting down {settings.APP_NAME}...")
        await database.dispose()
        logger.info(f"{settings.APP_NAME} shutdown complete")

    # ==================== Application Setup ====================

    app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)
    app.state.settings = settings
    app.state.database = database
    app.state.admin_verifier = admin_verifier
    app.state.limiter = limiter

    # Middleware registration (last registered = outermost layer)
    app.middleware("http")(security_headers_middleware)
    app.middleware("http")(request_logging_middleware)
    app.middleware("http")(add_request_id_middleware)

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_cors_origins(),
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Origin", "Content-Type", "Accept"],
        expose_headers=["Content-Length"],
        max_age=settings.CORS_MAX_AGE,
    )

    # Error responses
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    register_exception_handlers(app)

    app.include_router(create_router(settings, limiter))

    if settings.METRICS_ENABLED:
        setup_monitoring(app)

    return app


def run() -> None:
    """Console entry point: serve the application with uvicorn."""
    settings = Settings.load()
    uvicorn.run(
        create_app(settings),
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )
