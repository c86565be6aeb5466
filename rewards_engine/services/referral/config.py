"""
Referral system configuration.

Global affiliate settings from system options and per-referrer overrides,
validated once when loaded.
"""

from decimal import Decimal

from loguru import logger
from pydantic import BaseModel, Field, field_validator, model_validator

from rewards_engine.config.constants import (
    AFFILIATE_PERCENT_OPTIONS,
    HARD_MAX_AFFILIATE_LEVELS,
    OPTION_AFFILIATES_ENABLED,
    OPTION_AFFILIATES_LEVELS,
    OPTION_AFFILIATES_MIN_WITHDRAWAL,
    OPTION_AFFILIATES_TRANSFER_ENABLED,
    OPTION_AFFILIATES_TYPE,
    OPTION_AFFILIATES_WITHDRAW_ENABLED,
)
from rewards_engine.models.user import User
from rewards_engine.repositories.system_option_repository import (
    SystemOptionRepository,
)
from rewards_engine.utils.money import to_decimal


def _flag(value) -> bool:
    return str(value if value is not None else "0").strip().lower() in ("1", "true")


class AffiliateSettings(BaseModel):
    """
    Global affiliate configuration.

    ``levels`` is clamped to 1..HARD_MAX_AFFILIATE_LEVELS and ``percents``
    always holds exactly ``levels`` entries (missing levels are 0).
    """

    enabled: bool = False
    levels: int = 1
    percents: list[Decimal] = Field(default_factory=list)
    affiliate_type: str = "percentage"
    min_withdrawal: Decimal = Decimal("0")
    transfer_enabled: bool = False
    withdraw_enabled: bool = False

    @field_validator("levels", mode="before")
    @classmethod
    def clamp_levels(cls, v) -> int:
        """Non-numeric -> 1, then clamp to the hard maximum."""
        levels = int(to_decimal(v, Decimal("1")))
        return min(max(1, levels), HARD_MAX_AFFILIATE_LEVELS)

    @field_validator("percents", mode="before")
    @classmethod
    def parse_percents(cls, v) -> list[Decimal]:
        """Non-numeric and negative percentages count as 0."""
        return [max(Decimal("0"), to_decimal(item)) for item in (v or [])]

    @field_validator("min_withdrawal", mode="before")
    @classmethod
    def parse_min_withdrawal(cls, v) -> Decimal:
        """Non-numeric -> 0."""
        return max(Decimal("0"), to_decimal(v))

    @model_validator(mode="after")
    def fit_percents_to_levels(self) -> "AffiliateSettings":
        """Pad or truncate percents to the number of levels."""
        percents = list(self.percents[: self.levels])
        percents.extend([Decimal("0")] * (self.levels - len(percents)))
        self.percents = percents
        return self

    def percent_for_level(self, level: int) -> Decimal:
        """Global percentage for a 1-indexed level."""
        if 1 <= level <= len(self.percents):
            return self.percents[level - 1]
        return Decimal("0")


class ReferrerOverride(BaseModel):
    """Per-referrer custom percentages, index 0 = level 1."""

    percents: list[Decimal | None] = Field(
        default_factory=list, max_length=HARD_MAX_AFFILIATE_LEVELS
    )

    @field_validator("percents")
    @classmethod
    def validate_range(cls, v: list[Decimal | None]) -> list[Decimal | None]:
        """Each percentage must lie in 0..100."""
        for pct in v:
            if pct is not None and not (Decimal("0") <= pct <= Decimal("100")):
                raise ValueError(f"Percentage out of range: {pct}")
        return v

    def percent_for_level(self, level: int) -> Decimal | None:
        """Custom percentage for a level, None when not set."""
        if 1 <= level <= len(self.percents):
            return self.percents[level - 1]
        return None


def referrer_override_percent(user: User, level: int) -> Decimal | None:
    """
    Custom percentage a referrer has opted into for a level.

    Args:
        user: Referrer
        level: 1-indexed level

    Returns:
        Custom percentage, or None to use the global one. An invalid
        override list is logged and ignored.
    """
    if not user.custom_affiliate_system:
        return None
    try:
        override = ReferrerOverride(percents=user.affiliate_percentages or [])
    except ValueError as e:
        logger.warning(
            "Invalid affiliate override ignored",
            extra={"user_id": user.id, "error": str(e)},
        )
        return None
    return override.percent_for_level(level)


async def load_affiliate_settings(
    option_repo: SystemOptionRepository,
) -> AffiliateSettings:
    """
    Load global affiliate settings from system options.

    Args:
        option_repo: System option repository

    Returns:
        Validated AffiliateSettings
    """
    names = [
        OPTION_AFFILIATES_ENABLED,
        OPTION_AFFILIATES_LEVELS,
        OPTION_AFFILIATES_TYPE,
        OPTION_AFFILIATES_MIN_WITHDRAWAL,
        OPTION_AFFILIATES_TRANSFER_ENABLED,
        OPTION_AFFILIATES_WITHDRAW_ENABLED,
        *AFFILIATE_PERCENT_OPTIONS,
    ]
    options = await option_repo.get_many(names)

    return AffiliateSettings(
        enabled=_flag(options.get(OPTION_AFFILIATES_ENABLED)),
        levels=options.get(OPTION_AFFILIATES_LEVELS, 1),
        percents=[options.get(name) for name in AFFILIATE_PERCENT_OPTIONS],
        affiliate_type=options.get(OPTION_AFFILIATES_TYPE) or "percentage",
        min_withdrawal=options.get(OPTION_AFFILIATES_MIN_WITHDRAWAL),
        transfer_enabled=_flag(options.get(OPTION_AFFILIATES_TRANSFER_ENABLED)),
        withdraw_enabled=_flag(options.get(OPTION_AFFILIATES_WITHDRAW_ENABLED)),
    )
