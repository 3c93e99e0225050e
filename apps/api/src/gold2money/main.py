"""
Gold 2 Money API - Main Application Entry Point

This module builds and configures the FastAPI application including:
- Upload storage, mail delivery and admin sessions
- Optional Redis connection
- Background job scheduler
- CORS middleware
- API routing, protected pages and static files
- Health check endpoints

Run with:
    uvicorn gold2money.main:app
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from gold2money.api import api_router
from gold2money.core.config import Settings, get_settings
from gold2money.core.email import Mailer
from gold2money.core.errors import RateLimitExceeded, ServiceError
from gold2money.core.logging import configure_logging
from gold2money.core.rate_limit import RateLimiter, register_rate_limit_jobs
from gold2money.core.redis import close_redis, init_redis
from gold2money.core.scheduler import start_scheduler, stop_scheduler
from gold2money.core.sessions import MemorySessionStore, RedisSessionStore, SessionManager
from gold2money.modules.auth import build_verifier, register_session_jobs
from gold2money.modules.loan_applications.notifications import Notifier
from gold2money.modules.loan_applications.uploads import UploadStorage
from gold2money.modules.pages import router as pages_router

logger = logging.getLogger(__name__)

INVALID_REQUEST_MESSAGE = "Invalid request."


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Handles startup and shutdown events including:
    - Upload directory creation
    - Redis connection (sessions and rate limits move to Redis)
    - Background job scheduler
    """
    settings: Settings = app.state.settings

    # Startup
    logger.info(f"Starting Gold 2 Money API in {settings.python_env} mode...")

    app.state.uploads.ensure_directory()
    logger.info(f"[OK] Upload directory ready: {settings.upload_dir}")

    if settings.redis_url:
        try:
            app.state.redis = await init_redis(settings.redis_url)
            app.state.sessions.store = RedisSessionStore(
                app.state.redis,
                ttl_seconds=settings.session_ttl_seconds,
                secret=settings.session_secret,
            )
            app.state.rate_limiter.redis = app.state.redis
            logger.info("[OK] Redis connected")
        except Exception as e:
            logger.error(f"[FAIL] Redis connection failed, using in-memory sessions: {e}")
            if settings.is_production:
                raise

    if settings.scheduler_enabled:
        try:
            register_session_jobs(app.state.sessions.store)
            register_rate_limit_jobs(app.state.rate_limiter)
            await start_scheduler()
            logger.info("[OK] Background scheduler started")
        except Exception as e:
            logger.error(f"[FAIL] Background scheduler failed to start: {e}")
            if settings.is_production:
                raise

    yield  # Application runs here

    # Shutdown
    logger.info("Shutting down Gold 2 Money API...")

    await stop_scheduler()
    await close_redis(app.state.redis)
    app.state.redis = None
    logger.info("[OK] Cleanup complete")


async def service_error_handler(_request: Request, exc: ServiceError) -> JSONResponse:
    """Render service errors as the {success, message} envelope."""
    headers = None
    if isinstance(exc, RateLimitExceeded):
        headers = {"Retry-After": str(exc.retry_after_seconds)}
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": exc.message},
        headers=headers,
    )


async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Render malformed requests in the same envelope as every other error."""
    logger.info(f"Malformed request to {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=400,
        content={"success": False, "message": INVALID_REQUEST_MESSAGE},
    )


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Build the application from explicit settings.

    Components start with in-process backends; the lifespan switches
    sessions and rate limits to Redis when REDIS_URL is set.
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Gold 2 Money API",
        description="Loan application intake and admin access for Gold 2 Money",
        version="0.1.0",
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        lifespan=lifespan,
    )

    storage = UploadStorage(settings.upload_dir)

    app.state.settings = settings
    app.state.redis = None
    app.state.uploads = storage
    app.state.notifier = Notifier(Mailer(settings), storage, settings)
    app.state.credentials = build_verifier(settings)
    app.state.sessions = SessionManager(
        MemorySessionStore(
            ttl_seconds=settings.session_ttl_seconds,
            secret=settings.session_secret,
        ),
        settings,
    )
    app.state.rate_limiter = RateLimiter()

    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router, prefix="/api")

    @app.get("/health", tags=["Health"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint for container orchestration."""
        return {"status": "healthy"}

    @app.get("/ready", tags=["Health"])
    async def readiness_check() -> dict[str, str]:
        """Readiness check endpoint."""
        return {"status": "ready"}

    app.include_router(pages_router)

    # Must stay last: the mount matches every path not handled above
    app.mount(
        "/",
        StaticFiles(directory=settings.public_dir, html=True, check_dir=False),
        name="public",
    )

    return app


app = create_app()
