"""Field rules for the contact form."""

import re
from typing import Any, Mapping

from app.constants.constants import (
    MAX_MESSAGE_LENGTH,
    MIN_MESSAGE_LENGTH,
    MIN_NAME_LENGTH,
    MIN_SUBJECT_LENGTH,
)
from app.schemas.contactSchema import SanitizedContactForm, ValidationResult
from app.utils.sanitize import sanitize_input

EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")


def is_valid_email(email: str) -> bool:
    """Loose local@domain.tld check."""
    return bool(EMAIL_PATTERN.fullmatch(email))


def validate_contact_form(data: Mapping[str, Any]) -> ValidationResult:
    """
    Sanitize every field of a contact form and check it.

    All rules run; errors are collected per field rather than stopping at the
    first failure.

    Args:
        data: Mapping with name, email, subject and message keys.

    Returns:
        ValidationResult holding the per-field errors and the sanitized form.
    """
    sanitized = SanitizedContactForm(
        name=sanitize_input(data.get("name")),
        email=sanitize_input(data.get("email")),
        subject=sanitize_input(data.get("subject")),
        message=sanitize_input(data.get("message")),
    )
    errors = {}

    if len(sanitized.name) < MIN_NAME_LENGTH:
        errors["name"] = f"Name must be at least {MIN_NAME_LENGTH} characters"

    if not sanitized.email or not is_valid_email(sanitized.email):
        errors["email"] = "Please provide a valid email address"

    if len(sanitized.subject) < MIN_SUBJECT_LENGTH:
        errors["subject"] = f"Subject must be at least {MIN_SUBJECT_LENGTH} characters"

    if len(sanitized.message) < MIN_MESSAGE_LENGTH:
        errors["message"] = f"Message must be at least {MIN_MESSAGE_LENGTH} characters"

    # Spam guard, tighter than the sanitizer cap.
    if len(sanitized.message) > MAX_MESSAGE_LENGTH:
        errors["message"] = f"Message is too long (max {MAX_MESSAGE_LENGTH} characters)"

    return ValidationResult(errors=errors, sanitized_data=sanitized)
