"""Contact form submission endpoint."""

import logging
import time
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from slowapi.util import get_remote_address

from app.api.dependencies import get_app_settings, get_mail_dispatcher
from app.constants.constants import CONTACT_FIELDS, FAILURE_RESPONSES, FailureReason
from app.core.config import Settings
from app.core.limiter import enforce_contact_limit
from app.schemas.contactSchema import ContactFormRequest, DispatchOutcome
from app.services.ContactEmailTemplates import build_contact_messages
from app.services.MailDispatcher import MailDispatcher
from app.utils.timing import elapsed_ms, utc_timestamp
from app.utils.validation import validate_contact_form

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Contact"])


def _failure(status_code: int, content: dict, started: float) -> JSONResponse:
    body = {"success": False, **content, "processingTime": elapsed_ms(started)}
    return JSONResponse(status_code=status_code, content=body)


@router.post("/contact", dependencies=[Depends(enforce_contact_limit)])
async def submit_contact(
    request: Request,
    payload: Optional[ContactFormRequest] = None,
    settings: Settings = Depends(get_app_settings),
    dispatcher: MailDispatcher = Depends(get_mail_dispatcher),
):
    """
    Validate a contact form and email both the site operator and the submitter.

    Responds 400 for missing or invalid fields, 200 once both emails were
    accepted by the relay, and a status chosen by failure reason otherwise.
    """
    started = time.perf_counter()
    raw = payload.model_dump() if payload else {}

    missing = [field for field in CONTACT_FIELDS if not raw.get(field)]
    if missing:
        return _failure(
            400,
            {
                "message": "All fields are required",
                "errors": {
                    field: f"{field.capitalize()} is required" if field in missing else ""
                    for field in CONTACT_FIELDS
                },
            },
            started,
        )

    validation = validate_contact_form(raw)
    if not validation.is_valid:
        return _failure(
            400,
            {"message": "Please fix the validation errors", "errors": validation.errors},
            started,
        )

    form = validation.sanitized_data
    try:
        owner_message, user_message = build_contact_messages(
            form,
            sender=settings.EMAIL_FROM,
            operator=settings.EMAIL_TO,
            client_ip=get_remote_address(request),
        )
        outcome = await dispatcher.send_contact_pair(
            owner_message,
            user_message,
            timeout=settings.CONTACT_DISPATCH_TIMEOUT,
        )
    except Exception as e:
        logger.error(f"❌ Contact form error: {e}", exc_info=e)
        outcome = DispatchOutcome.failed(FailureReason.unknown, str(e))

    if not outcome.succeeded:
        logger.error(f"❌ Contact form error ({outcome.reason.value}): {outcome.error}")
        status_code, message = FAILURE_RESPONSES[outcome.reason]
        content = {"message": message}
        if settings.IS_DEVELOPMENT:
            content["error"] = outcome.error
        return _failure(status_code, content, started)

    processing_time = elapsed_ms(started)
    logger.info(f"✅ Contact form submitted - {form.email} - {processing_time}")

    return {
        "success": True,
        "message": "Message sent successfully! Check your email for confirmation.",
        "data": {
            "messageId": outcome.message_id,
            "userMessageId": outcome.user_message_id,
            "timestamp": utc_timestamp(),
            "processingTime": processing_time,
        },
    }
