"""Domain errors, SMTP error translation and the API's exception handlers."""

import logging
import traceback
from typing import Optional

import aiosmtplib
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.constants.constants import GENERAL_RATE_LIMIT_MESSAGE, FailureReason

logger = logging.getLogger(__name__)


class MailDeliveryError(Exception):
    """Raised when the mail relay refuses or fails to take a message."""

    def __init__(self, reason: FailureReason, detail: str, code: Optional[int] = None):
        super().__init__(detail)
        self.reason = reason
        self.detail = detail
        self.code = code


def classify_smtp_error(error: BaseException) -> FailureReason:
    """Map a transport exception onto the closed set of failure reasons."""
    if isinstance(error, MailDeliveryError):
        return error.reason
    if isinstance(error, aiosmtplib.SMTPAuthenticationError):
        return FailureReason.authentication
    if isinstance(
        error,
        (
            aiosmtplib.SMTPRecipientRefused,
            aiosmtplib.SMTPRecipientsRefused,
            aiosmtplib.SMTPSenderRefused,
        ),
    ):
        return FailureReason.address_rejected
    if isinstance(
        error,
        (
            aiosmtplib.SMTPConnectError,
            aiosmtplib.SMTPServerDisconnected,
            aiosmtplib.SMTPTimeoutError,
            ConnectionError,
            OSError,
        ),
    ):
        return FailureReason.connection
    return FailureReason.unknown


def to_delivery_error(error: BaseException) -> MailDeliveryError:
    """Wrap any transport exception in a MailDeliveryError."""
    if isinstance(error, MailDeliveryError):
        return error
    code = getattr(error, "code", None)
    detail = str(error) or error.__class__.__name__
    return MailDeliveryError(classify_smtp_error(error), detail, code if isinstance(code, int) else None)


# =============================================================================
# Exception handlers
# =============================================================================

def _settings(request: Request):
    return request.app.state.settings


async def not_found_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Unknown paths and unsupported methods both answer 404, other HTTP errors pass through."""
    if exc.status_code in (404, 405):
        return JSONResponse(
            status_code=404,
            content={
                "success": False,
                "message": "Endpoint not found",
                "path": request.url.path,
                "method": request.method,
            },
        )
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.error(f"Validation Error: {exc.errors()}")
    content = {"success": False, "message": "Invalid request body"}
    if _settings(request).IS_DEVELOPMENT:
        content["errors"] = [error.get("msg") for error in exc.errors()]
    return JSONResponse(status_code=400, content=content)


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Shared per-IP ceiling. Plain function: SlowAPIMiddleware calls it without awaiting."""
    logger.warning(f"Rate limit exceeded for {request.url.path} ({exc.detail})")
    return JSONResponse(status_code=429, content={"success": False, "message": GENERAL_RATE_LIMIT_MESSAGE})


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for errors no other handler claimed."""
    logger.error(f"🚨 Global Error Handler: {exc}", exc_info=exc)
    settings = _settings(request)

    status_code = getattr(exc, "status_code", None)
    if not isinstance(status_code, int):
        status_code = 500

    content = {
        "success": False,
        "message": "Internal server error" if settings.IS_PRODUCTION else (str(exc) or exc.__class__.__name__),
    }
    if settings.IS_DEVELOPMENT:
        content["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        content["details"] = {"type": exc.__class__.__name__, "args": [str(arg) for arg in exc.args]}
    return JSONResponse(status_code=status_code, content=content)
