"""Constants for form limits, branding, rate-limit messages and mail failure reasons."""

from enum import Enum


class FailureReason(str, Enum):
    """Closed set of reasons a contact dispatch can fail."""

    timeout = "timeout"
    authentication = "authentication"
    address_rejected = "address_rejected"
    connection = "connection"
    unknown = "unknown"


class Environment(str, Enum):
    """Deployment modes recognised by the settings."""

    development = "development"
    production = "production"
    test = "test"


# ------------------------------
# Form limits
# ------------------------------
MAX_FIELD_LENGTH = 1000
MAX_MESSAGE_LENGTH = 500
MIN_NAME_LENGTH = 2
MIN_SUBJECT_LENGTH = 3
MIN_MESSAGE_LENGTH = 10

CONTACT_FIELDS = ("name", "email", "subject", "message")

# ------------------------------
# Branding
# ------------------------------
SITE_NAME = "VYZ Portfolio"
REFERENCE_PREFIX = "VYZ"
API_VERSION = "1.0.0"

# ------------------------------
# Rate limiting
# ------------------------------
RATE_LIMIT_WINDOW = "15minutes"
CONTACT_LIMIT_PRODUCTION = 5
CONTACT_LIMIT_DEVELOPMENT = 10
GENERAL_LIMIT = 100

CONTACT_RATE_LIMIT_MESSAGE = "Too many contact form submissions. Please try again in 15 minutes."
GENERAL_RATE_LIMIT_MESSAGE = "Too many requests from this IP."

# ------------------------------
# User-facing dispatch messages
# ------------------------------
FAILURE_RESPONSES = {
    FailureReason.timeout: (500, "Request timeout. Please try again."),
    FailureReason.authentication: (503, "Email service temporarily unavailable."),
    FailureReason.address_rejected: (400, "Invalid email address. Please check and try again."),
    FailureReason.connection: (503, "Connection error. Please try again later."),
    FailureReason.unknown: (500, "Failed to send message. Please try again later."),
}
