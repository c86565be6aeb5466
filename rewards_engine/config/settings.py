"""
Application settings.

Loads configuration from environment variables using pydantic-settings.
"""

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from rewards_engine.config.constants import (
    ACTION_FOLLOW,
    ACTION_POST_COMMENT,
    ACTION_POST_CREATE,
    ACTION_POST_VIEW,
    ACTION_REACTION,
    ACTION_REFER,
    DEFAULT_DAILY_POINTS_LIMIT,
    LEGACY_PACKAGE_VALIDITY_DAYS,
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str
    database_echo: bool = False

    # Redis (points quota cache)
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_password: str | None = None
    redis_db: int = 0

    # Application
    environment: str = "production"
    log_level: str = "INFO"
    log_file: str | None = "logs/rewards.log"

    # Accounting window for daily points quota
    points_window_timezone: str = Field(
        default="UTC",
        description="IANA timezone whose midnight starts a new points day",
    )

    # Points per action (defaults, admin console may override per request)
    points_per_post: int = Field(default=10, ge=0)
    points_per_post_view: int = Field(default=1, ge=0)
    points_per_post_comment: int = Field(default=5, ge=0)
    points_per_reaction: int = Field(default=0, ge=0)
    points_per_follow: int = Field(default=5, ge=0)
    points_per_referred: int = Field(default=5, ge=0)

    # Daily points ceilings
    points_limit_user: int = Field(
        default=DEFAULT_DAILY_POINTS_LIMIT, gt=0,
        description="Daily points ceiling for users without an active package",
    )
    points_limit_pro: int = Field(
        default=DEFAULT_DAILY_POINTS_LIMIT, gt=0,
        description="Daily points ceiling for users with an active package",
    )

    # Package name -> validity in days, used when the package row
    # declares no period of its own
    package_validity_days: dict[str, int] = Field(
        default_factory=lambda: dict(LEGACY_PACKAGE_VALIDITY_DAYS)
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("points_window_timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        """Validate timezone name."""
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"Unknown timezone: {v}") from exc
        return v

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        """Validate database URL."""
        if not v.startswith(("postgresql://", "postgresql+asyncpg://")):
            raise ValueError(
                "DATABASE_URL must start with postgresql:// or postgresql+asyncpg://"
            )
        return v

    @field_validator("package_validity_days")
    @classmethod
    def validate_package_validity(cls, v: dict[str, int]) -> dict[str, int]:
        """Reject non-positive validity periods."""
        for name, days in v.items():
            if days <= 0:
                raise ValueError(
                    f"Validity for package {name!r} must be positive, got {days}"
                )
        return v

    @property
    def window_timezone(self) -> ZoneInfo:
        """Timezone object for the accounting window."""
        return ZoneInfo(self.points_window_timezone)

    def get_points_rules(self) -> dict[str, int]:
        """Default points value per action type."""
        return {
            ACTION_POST_CREATE: self.points_per_post,
            ACTION_POST_VIEW: self.points_per_post_view,
            ACTION_POST_COMMENT: self.points_per_post_comment,
            ACTION_REACTION: self.points_per_reaction,
            ACTION_FOLLOW: self.points_per_follow,
            ACTION_REFER: self.points_per_referred,
        }


# Global settings instance
settings = Settings()
