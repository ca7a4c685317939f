from dataclasses import dataclass
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict

from app.constants.constants import FailureReason


class ContactFormRequest(BaseModel):
    """Raw contact form body. Fields are untrusted and may be of any JSON type."""

    model_config = ConfigDict(extra="ignore")

    name: Any = None
    email: Any = None
    subject: Any = None
    message: Any = None


class SanitizedContactForm(BaseModel):
    """Contact form after escaping and truncation."""

    model_config = ConfigDict(frozen=True)

    name: str
    email: str
    subject: str
    message: str

    @property
    def first_name(self) -> str:
        parts = self.name.split()
        return parts[0] if parts else ""


class ValidationResult(BaseModel):
    """Outcome of validating a contact form."""

    model_config = ConfigDict(frozen=True)

    errors: Dict[str, str]
    sanitized_data: SanitizedContactForm

    @property
    def is_valid(self) -> bool:
        return not self.errors


@dataclass(frozen=True)
class OutboundMessage:
    """A fully rendered email ready to hand to the transport."""

    sender: str
    to: str
    subject: str
    html: str
    text: str
    reply_to: Optional[str] = None


@dataclass(frozen=True)
class DispatchOutcome:
    """Result of sending the operator and acknowledgment emails together."""

    message_id: Optional[str] = None
    user_message_id: Optional[str] = None
    reason: Optional[FailureReason] = None
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.reason is None

    @classmethod
    def delivered(cls, message_id: str, user_message_id: str) -> "DispatchOutcome":
        return cls(message_id=message_id, user_message_id=user_message_id)

    @classmethod
    def failed(cls, reason: FailureReason, error: str) -> "DispatchOutcome":
        return cls(reason=reason, error=error)
