"""Health and mail-configuration check endpoints."""

import logging
import os
import platform
import time

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from app.api.dependencies import get_app_settings, get_mail_dispatcher
from app.constants.constants import API_VERSION, SITE_NAME
from app.core.config import Settings
from app.core.exceptions import MailDeliveryError
from app.services.MailDispatcher import MailDispatcher
from app.utils.sanitize import mask_address
from app.utils.timing import utc_timestamp

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health Check"])


@router.get("/health")
async def health_check(request: Request, settings: Settings = Depends(get_app_settings)):
    """Report that the API is up, with a few process details."""
    return {
        "success": True,
        "message": f"🚀 {SITE_NAME} API is running smoothly",
        "timestamp": utc_timestamp(),
        "version": API_VERSION,
        "environment": settings.ENVIRONMENT,
        "services": {
            "email": "Ready",
            "database": "Not required",
            "rateLimiting": "Active",
        },
        "system": {
            "pythonVersion": platform.python_version(),
            "platform": platform.system().lower(),
            "pid": os.getpid(),
            "uptime": round(time.monotonic() - request.app.state.started_at, 3),
        },
    }


@router.get("/test-email")
async def test_email(
    settings: Settings = Depends(get_app_settings),
    dispatcher: MailDispatcher = Depends(get_mail_dispatcher),
):
    """Verify the SMTP relay accepts our credentials."""
    try:
        await dispatcher.verify()
    except MailDeliveryError as e:
        logger.error(f"Email test failed: {e.detail}", exc_info=e)
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "message": "❌ Email configuration error",
                "error": e.detail if settings.IS_DEVELOPMENT else "Check server logs",
                "code": e.reason.value,
            },
        )

    return {
        "success": True,
        "message": "✅ Email configuration is correct and ready to send emails!",
        "service": settings.SMTP_HOST,
        "user": mask_address(settings.EMAIL_USER),
    }
