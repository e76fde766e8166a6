"""
Configuration for the Code Crew API.

Uses Pydantic Settings to load environment variables (and a local ``.env``
file). The app factory copies the relevant values into ``app.config``.
"""

import secrets
from typing import Literal, Optional

from flask import current_app
from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes:
        secret_key: Flask secret used to sign the session cookie.
        jwt_secret: HMAC secret for bearer tokens; falls back to ``secret_key``.
        database_url: SQLAlchemy URL; SQLite in the instance folder when empty.
        redis_url: When set, server-side sessions are kept in Redis.
        maintenance_interval_seconds: Period of the background sweep, 0 disables it.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    flask_env: str = Field(default="development")

    secret_key: str = Field(
        default_factory=lambda: secrets.token_hex(32),
        validation_alias=AliasChoices("FLASK_SECRET_KEY", "SECRET_KEY", "secret_key"),
    )
    jwt_secret: str = ""
    jwt_lifetime_hours: int = Field(default=24, ge=1)

    database_url: Optional[str] = None
    database_sslmode: Optional[str] = None
    redis_url: Optional[str] = None

    # Session cookie
    session_cookie_name: str = "codecrew_session"
    session_cookie_secure: Optional[bool] = None
    session_cookie_samesite: str = "Lax"
    session_lifetime_days: int = 14

    cors_origins: str = "http://localhost:5173"
    api_prefix: str = "/api/v1"

    invitation_ttl_days: int = Field(default=7, ge=1)
    password_reset_minutes: int = Field(default=10, ge=1)
    maintenance_interval_seconds: int = Field(default=300, ge=0)
    auto_bootstrap_admin: bool = False

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    @field_validator("api_prefix", mode="after")
    @classmethod
    def normalize_prefix(cls, v: str) -> str:
        """Always a leading slash, never a trailing one."""
        v = v.strip().rstrip("/")
        if v and not v.startswith("/"):
            v = f"/{v}"
        return v

    @property
    def is_production(self) -> bool:
        return self.flask_env.lower() in {"production", "prod"}

    @property
    def token_secret(self) -> str:
        return self.jwt_secret or self.secret_key

    @property
    def allowed_origins(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


def current_settings() -> Settings:
    """Settings of the running application."""
    return current_app.config["SETTINGS"]
