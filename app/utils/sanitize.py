"""String helpers for untrusted form fields and displayed addresses."""

from typing import Any

from app.constants.constants import MAX_FIELD_LENGTH

# Ampersands are left alone so already escaped text is not double encoded.
HTML_ESCAPES = (
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("'", "&#x27;"),
    ("/", "&#x2F;"),
)


def sanitize_input(value: Any, max_length: int = MAX_FIELD_LENGTH) -> str:
    """
    Neutralize a single untrusted form value.

    Args:
        value: Anything taken from a request body.
        max_length: Maximum length of the returned string.

    Returns:
        The trimmed, escaped and truncated string, or "" for non-string input.
    """
    if not isinstance(value, str):
        return ""

    cleaned = value.strip()
    for char, escaped in HTML_ESCAPES:
        cleaned = cleaned.replace(char, escaped)
    return cleaned[:max_length]


def mask_address(address: str) -> str:
    """Replace every character except the last four with '*'."""
    if not address:
        return address
    return "*" * max(len(address) - 4, 0) + address[-4:]
