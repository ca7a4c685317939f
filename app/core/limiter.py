"""Per-IP rate limiting for the API."""

import logging

from fastapi import HTTPException, Request
from limits import parse
from slowapi import Limiter
from slowapi.util import get_remote_address

from app.constants.constants import CONTACT_RATE_LIMIT_MESSAGE, GENERAL_LIMIT, RATE_LIMIT_WINDOW

logger = logging.getLogger(__name__)

# Application limits are checked by SlowAPIMiddleware on every route.
limiter = Limiter(
    key_func=get_remote_address,
    application_limits=[f"{GENERAL_LIMIT}/{RATE_LIMIT_WINDOW}"],
)


def enforce_contact_limit(request: Request) -> None:
    """
    Count one contact submission against the client's window.

    The ceiling comes from the settings the application was built with, so it
    is evaluated per request rather than fixed when the route is declared.

    Raises:
        HTTPException: 429 once the window is used up.
    """
    app_limiter: Limiter = request.app.state.limiter
    contact_limit = parse(request.app.state.settings.CONTACT_RATE_LIMIT)
    client = get_remote_address(request)

    if not app_limiter.limiter.hit(contact_limit, "contact", client):
        logger.warning(f"Contact rate limit exceeded for {client} ({contact_limit})")
        raise HTTPException(status_code=429, detail=CONTACT_RATE_LIMIT_MESSAGE)
