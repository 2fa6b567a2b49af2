# app/core/config.py
from __future__ import annotations

import secrets
import warnings
from typing import List, Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings, loaded from environment variables and/or .env file.
    """

    # Environment settings
    APP_NAME: str = "PassItOn Widget Service"
    APP_ENV: str = "development"
    LOG_LEVEL: str = "INFO"

    # Security / auth
    SECRET_KEY: str = Field(default="", repr=False)
    SECRET_KEY_AUTO_GENERATED: bool = False
    CORS_ALLOW_ORIGINS: List[str] = Field(
        default_factory=lambda: ["http://localhost:3000"],
        description="Comma-delimited list of dashboard origins",
    )
    PUBLIC_CORS_PATHS: List[str] = Field(
        default_factory=lambda: ["/api/v1/widget-config", "/embed/"],
        description="Path prefixes served with an open CORS policy",
    )

    # Database settings
    DATABASE_URL: str = "sqlite:///./passiton.db"

    # Public URLs
    PUBLIC_BASE_URL: str = "http://localhost:8000"
    EMBED_DEFAULT_DOMAIN: Optional[str] = None

    # Observability settings
    SENTRY_DSN: Optional[str] = None

    # Widget rules
    DONATION_MINIMUM_CENTS: int = 100
    MAX_DONATION_CENTS: int = 1_000_000
    MAX_CAUSES_PER_WIDGET: int = 5

    # Security settings
    ENABLE_SECURITY_HEADERS: bool = True
    CSP_POLICY: str = "default-src 'self'; style-src 'self' 'unsafe-inline'"
    WIDGET_FRAME_CSP: str = (
        "default-src 'self'; style-src 'self' 'unsafe-inline'; "
        "img-src 'self' data:; frame-ancestors *"
    )
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRES_MINUTES: int = 60
    JWT_ISSUER: Optional[str] = None
    SESSION_COOKIE_NAME: str = "passiton_session"

    @property
    def webhook_url(self) -> str:
        """Endpoint the dashboard exposes for donation notifications."""
        return f"{self.PUBLIC_BASE_URL.rstrip('/')}/api/webhooks/donations"

    @field_validator("CORS_ALLOW_ORIGINS", "PUBLIC_CORS_PATHS", mode="before")
    @classmethod
    def _split_csv(cls, value: str | List[str]) -> List[str]:
        """Allow comma-separated strings for list env vars."""
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return value

    @model_validator(mode="after")
    def _ensure_secret_key(self) -> "Settings":
        """Guarantee SECRET_KEY is present in non-development environments."""
        secret = (self.SECRET_KEY or "").strip()
        environment = (self.APP_ENV or "development").lower()

        if not secret or secret.lower() == "change-me":
            if environment in {"development", "test", "testing"}:
                generated = secrets.token_urlsafe(48)
                self.SECRET_KEY = generated
                self.SECRET_KEY_AUTO_GENERATED = True
                warnings.warn(
                    (
                        "SECRET_KEY was not provided; generated ephemeral key for "
                        f"{environment} environment. "
                        "Do not use this configuration in production."
                    ),
                    RuntimeWarning,
                )
            else:
                raise ValueError(
                    (
                        "SECRET_KEY must be set for secure operation. "
                        "Set SECRET_KEY in the environment or .env file before "
                        "starting the service."
                    )
                )
        return self

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )


settings = Settings()
