from functools import lru_cache
from typing import ClassVar, List

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict

from app.constants.constants import (
    CONTACT_LIMIT_DEVELOPMENT,
    CONTACT_LIMIT_PRODUCTION,
    RATE_LIMIT_WINDOW,
    Environment,
)


class Settings(BaseSettings):
    """Class to store all the settings of the portfolio contact API."""

    # ------------------------------
    # Mail account - Required
    # ------------------------------
    EMAIL_USER: str = Field(..., min_length=1, description="SMTP account user name")
    EMAIL_PASS: str = Field(..., min_length=1, description="SMTP account password")
    EMAIL_FROM: str = Field(..., min_length=1, description="Envelope and header From address")
    EMAIL_TO: str = Field(..., min_length=1, description="Site operator address receiving leads")

    # ------------------------------
    # Mail relay - Optional
    # ------------------------------
    SMTP_HOST: str = Field(default="smtp.zoho.com")
    SMTP_PORT: int = Field(default=465)
    SMTP_SECURE: bool = Field(default=True, description="Implicit TLS on connect")
    SMTP_MAX_CONNECTIONS: int = Field(default=5, ge=1)
    SMTP_MAX_MESSAGES: int = Field(default=100, ge=1)
    SMTP_RATE_LIMIT: int = Field(default=5, ge=1, description="Messages per SMTP_RATE_DELTA")
    SMTP_RATE_DELTA: float = Field(default=1.0, gt=0)
    SMTP_CONNECT_TIMEOUT: float = Field(default=10.0, gt=0)
    SMTP_SOCKET_TIMEOUT: float = Field(default=15.0, gt=0)
    SMTP_VERIFY_ATTEMPTS: int = Field(default=4, ge=1)
    SMTP_VERIFY_BACKOFF: float = Field(default=2.0, ge=0)
    SMTP_VERIFY_ON_STARTUP: bool = Field(default=True)

    # ------------------------------
    # Contact pipeline
    # ------------------------------
    CONTACT_DISPATCH_TIMEOUT: float = Field(default=30.0, gt=0)

    # ------------------------------
    # Server & Environment
    # ------------------------------
    ENVIRONMENT: str = Field(default=Environment.development.value)
    HOST: str = Field(default="0.0.0.0")
    PORT: int = Field(default=3001)
    FORWARDED_ALLOW_IPS: str = Field(
        default="127.0.0.1",
        description="Comma separated proxy addresses whose X-Forwarded-For is trusted",
    )

    # ------------------------------
    # CORS allow-lists
    # ------------------------------
    PRODUCTION_ORIGINS: ClassVar[List[str]] = [
        "https://www.vyzx.live",
        "https://vyzx.live",
    ]
    DEVELOPMENT_ORIGINS: ClassVar[List[str]] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------
    # Computed Fields
    # ------------------------------
    @computed_field
    @property
    def IS_PRODUCTION(self) -> bool:
        return self.ENVIRONMENT == Environment.production.value

    @computed_field
    @property
    def IS_DEVELOPMENT(self) -> bool:
        return self.ENVIRONMENT == Environment.development.value

    @computed_field
    @property
    def ALLOWED_ORIGINS(self) -> List[str]:
        """CORS origins for the current environment."""
        return list(self.PRODUCTION_ORIGINS if self.IS_PRODUCTION else self.DEVELOPMENT_ORIGINS)

    @computed_field
    @property
    def CONTACT_RATE_LIMIT(self) -> str:
        """Per-IP contact submissions allowed in one window, stricter in production."""
        count = CONTACT_LIMIT_PRODUCTION if self.IS_PRODUCTION else CONTACT_LIMIT_DEVELOPMENT
        return f"{count}/{RATE_LIMIT_WINDOW}"


MISSING_ERROR_TYPES = ("missing", "string_too_short")


def missing_settings(errors: list) -> List[str]:
    """Names of required settings reported missing or blank by a pydantic ValidationError."""
    missing = []
    for error in errors:
        if error.get("type") in MISSING_ERROR_TYPES and error.get("loc"):
            missing.append(str(error["loc"][0]))
    return missing


@lru_cache
def get_settings() -> Settings:
    """Build the settings once per process."""
    return Settings()
