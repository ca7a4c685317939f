import asyncio
import logging
import sys
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.endpoints.contact import router as contact_router
from app.api.endpoints.health import router as health_router
from app.constants.constants import API_VERSION, SITE_NAME
from app.core.config import Settings, get_settings, missing_settings
from app.core.exceptions import (
    MailDeliveryError,
    global_exception_handler,
    not_found_handler,
    rate_limit_exceeded_handler,
    validation_exception_handler,
)
from app.core.limiter import limiter
from app.services.MailDispatcher import MailDispatcher

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

CONTENT_SECURITY_POLICY = (
    "default-src 'self'; style-src 'self' 'unsafe-inline'; "
    "script-src 'self'; img-src 'self' data: https:"
)


async def verify_mail_relay(dispatcher: MailDispatcher) -> None:
    """Startup check of the SMTP relay; failures are logged, not fatal."""
    try:
        await dispatcher.verify()
    except MailDeliveryError as e:
        logger.error(f"⚠️ SMTP relay verification failed ({e.reason.value}): {e.detail}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Async context manager for app lifespan events"""
    settings: Settings = app.state.settings

    logger.info(f"🚀 Starting {SITE_NAME} API...")
    logger.info(f"📧 Initializing SMTP pool for {settings.SMTP_HOST}:{settings.SMTP_PORT}...")
    app.state.mail_dispatcher = MailDispatcher.from_settings(settings)
    if settings.IS_DEVELOPMENT:
        logging.getLogger("aiosmtplib").setLevel(logging.DEBUG)

    if settings.SMTP_VERIFY_ON_STARTUP:
        app.state.startup_tasks.append(asyncio.create_task(verify_mail_relay(app.state.mail_dispatcher)))

    logger.info(f"🏁 {SITE_NAME} API startup complete ({settings.ENVIRONMENT})")
    yield
    # The SMTP pool is left to die with the process.
    logger.info("👋 Application shutdown complete")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the FastAPI application for the given settings."""
    settings = settings or get_settings()

    app = FastAPI(
        title=f"{SITE_NAME} API",
        description="Contact form backend for the portfolio website",
        version=API_VERSION,
        lifespan=lifespan,
        docs_url=None if settings.IS_PRODUCTION else "/docs",
        redoc_url=None,
        openapi_url=None if settings.IS_PRODUCTION else "/openapi.json",
    )
    app.state.settings = settings
    app.state.started_at = time.monotonic()
    app.state.startup_tasks = []

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_exception_handler(StarletteHTTPException, not_found_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)
    app.add_middleware(SlowAPIMiddleware)

    @app.middleware("http")
    async def security_headers(request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-XSS-Protection"] = "1; mode=block"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Cross-Origin-Resource-Policy"] = "cross-origin"
        response.headers["Content-Security-Policy"] = CONTENT_SECURITY_POLICY
        if settings.IS_PRODUCTION:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains; preload"
        return response

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        timestamp = datetime.now(timezone.utc).isoformat()
        logger.info(f"[{timestamp}] {request.method} {request.url.path} - IP: {get_remote_address(request)}")
        return await call_next(request)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
        max_age=86400,
    )

    app.include_router(health_router, prefix="/api")
    app.include_router(contact_router, prefix="/api")

    logger.info(f"✅ Loaded {len(app.routes)} routes")
    return app


def main() -> None:
    """Console entry point: validate configuration, then serve."""
    try:
        settings = get_settings()
    except ValidationError as e:
        missing = missing_settings(e.errors())
        if missing:
            logger.critical(f"❌ Missing required environment variables: {missing}")
            logger.critical("Please check your .env file")
        else:
            logger.critical(f"❌ Invalid configuration: {e}")
        sys.exit(1)

    app = create_app(settings)
    logger.info(
        f"✨ {SITE_NAME} backend on port {settings.PORT} "
        f"({settings.ENVIRONMENT}, mail relay {settings.SMTP_HOST})"
    )
    uvicorn.run(
        app,
        host=settings.HOST,
        port=settings.PORT,
        proxy_headers=True,
        forwarded_allow_ips=settings.FORWARDED_ALLOW_IPS,
        server_header=False,
    )


if __name__ == "__main__":
    main()
