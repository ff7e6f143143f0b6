"""Application settings loaded from environment variables.

Environment Configuration:
    KIOSK_ENV: Deployment environment (local | test | staging | prod)
    DATABASE_URL: SQLAlchemy connection string (required)

Admin Session Configuration:
    KIOSK_ADMIN_EMAIL: The single CMS admin login (required in staging/prod)
    KIOSK_ADMIN_PASSWORD: The admin password (required in staging/prod)
    KIOSK_SESSION_SECRET: HS256 signing key for session tokens (required in staging/prod)
    KIOSK_SESSION_TTL_S: Session token lifetime in seconds

Asset Host Configuration (required in staging/prod; in-memory fake host when unset):
    CLOUDINARY_CLOUD_NAME, CLOUDINARY_API_KEY, CLOUDINARY_API_SECRET

Logging:
    LOG_LEVEL: Root log level (default INFO)
    LOG_FORMAT: json or console
"""

from enum import Enum
from functools import lru_cache
from typing import Annotated, Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings

# Deterministic signing key for local/test only.
DEV_SESSION_SECRET = "kiosk-local-dev-session-secret-do-not-use-in-prod"

MIN_SESSION_SECRET_LENGTH = 32


class Environment(str, Enum):
    """Valid deployment environments."""

    LOCAL = "local"
    TEST = "test"
    STAGING = "staging"
    PROD = "prod"


class Settings(BaseSettings):
    """Application configuration.

    Settings are loaded from environment variables.
    Validation rules:
    - DATABASE_URL is always required
    - Admin credentials, session secret, and Cloudinary credentials are required
      in staging and prod only
    """

    kiosk_env: Environment = Field(default=Environment.LOCAL, alias="KIOSK_ENV")
    database_url: Annotated[str, Field(alias="DATABASE_URL")]

    # Admin session settings
    admin_email: str | None = Field(default=None, alias="KIOSK_ADMIN_EMAIL")
    admin_password: str | None = Field(default=None, alias="KIOSK_ADMIN_PASSWORD")
    session_secret: str | None = Field(default=None, alias="KIOSK_SESSION_SECRET")
    session_ttl_s: int = Field(default=8 * 60 * 60, alias="KIOSK_SESSION_TTL_S", ge=60)

    # Cloudinary asset host
    cloudinary_cloud_name: str | None = Field(default=None, alias="CLOUDINARY_CLOUD_NAME")
    cloudinary_api_key: str | None = Field(default=None, alias="CLOUDINARY_API_KEY")
    cloudinary_api_secret: str | None = Field(default=None, alias="CLOUDINARY_API_SECRET")
    asset_folder: str = Field(default="kiosk", alias="ASSET_FOLDER")

    # Upload limits
    max_upload_bytes: int = Field(default=25 * 1024 * 1024, alias="MAX_UPLOAD_BYTES")  # 25 MB
    download_timeout_s: float = Field(default=30.0, alias="DOWNLOAD_TIMEOUT_S")

    # Kiosk screen
    venue_timezone: str = Field(default="UTC", alias="KIOSK_VENUE_TIMEZONE")
    default_hero_video_url: str = Field(
        default="https://interactive-examples.mdn.mozilla.net/media/cc0-videos/flower.mp4",
        alias="DEFAULT_HERO_VIDEO_URL",
    )
    cors_origins: str | None = Field(default=None, alias="KIOSK_CORS_ORIGINS")

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_format: Literal["json", "console"] = Field(default="json", alias="LOG_FORMAT")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @field_validator("venue_timezone")
    @classmethod
    def validate_venue_timezone(cls, v: str) -> str:
        """Require a known IANA zone name."""
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"KIOSK_VENUE_TIMEZONE is not a known timezone: {v}") from e
        return v

    @model_validator(mode="after")
    def validate_required_settings(self) -> "Settings":
        """Ensure admin and asset host settings are present outside local/test."""
        if self.kiosk_env in (Environment.STAGING, Environment.PROD):
            missing = []
            if not self.admin_email:
                missing.append("KIOSK_ADMIN_EMAIL")
            if not self.admin_password:
                missing.append("KIOSK_ADMIN_PASSWORD")
            if not self.session_secret:
                missing.append("KIOSK_SESSION_SECRET")
            if not self.cloudinary_cloud_name:
                missing.append("CLOUDINARY_CLOUD_NAME")
            if not self.cloudinary_api_key:
                missing.append("CLOUDINARY_API_KEY")
            if not self.cloudinary_api_secret:
                missing.append("CLOUDINARY_API_SECRET")
            if missing:
                raise ValueError(
                    f"Missing required settings for KIOSK_ENV={self.kiosk_env.value}: "
                    f"{', '.join(missing)}"
                )

        if self.session_secret and len(self.session_secret) < MIN_SESSION_SECRET_LENGTH:
            raise ValueError(
                f"KIOSK_SESSION_SECRET must be at least {MIN_SESSION_SECRET_LENGTH} characters"
            )

        return self

    @property
    def effective_session_secret(self) -> str:
        """Return the session signing key, falling back to the dev key in local/test."""
        return self.session_secret or DEV_SESSION_SECRET

    @property
    def cloudinary_configured(self) -> bool:
        """Whether all Cloudinary credentials are set."""
        return bool(
            self.cloudinary_cloud_name and self.cloudinary_api_key and self.cloudinary_api_secret
        )

    @property
    def cors_origin_list(self) -> list[str]:
        """Parse comma-separated CORS origins into a list."""
        if self.cors_origins:
            return [o.strip() for o in self.cors_origins.split(",") if o.strip()]
        return []


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Returns:
        Settings instance loaded from environment.

    Raises:
        ValidationError: If required settings are missing or invalid.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache. Useful for testing."""
    get_settings.cache_clear()
