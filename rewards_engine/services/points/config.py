"""
Points accrual configuration.

Rule table and daily ceilings supplied per request by the caller.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field

from rewards_engine.config.constants import (
    ACTION_ALIASES,
    REPEATABLE_ACTIONS,
)
from rewards_engine.config.settings import Settings, settings


def normalize_action_type(action_type: str) -> str:
    """
    Map legacy action names to canonical action types.

    Args:
        action_type: Action type as sent by the caller

    Returns:
        Canonical, lower-cased action type
    """
    normalized = str(action_type).strip().lower()
    return ACTION_ALIASES.get(normalized, normalized)


def is_repeatable(action_type: str) -> bool:
    """Whether the action is credited on every occurrence."""
    return action_type in REPEATABLE_ACTIONS


@dataclass(frozen=True)
class AccrualContext:
    """
    Runtime configuration for one accrual call.

    Attributes:
        rules: Canonical action type -> points per occurrence
        daily_limit_user: Daily ceiling without an active package
        daily_limit_pro: Daily ceiling with an active package
    """

    rules: Mapping[str, int] = field(default_factory=dict)
    daily_limit_user: int | None = None
    daily_limit_pro: int | None = None

    @classmethod
    def from_settings(cls, config: Settings | None = None) -> "AccrualContext":
        """Build context from application settings."""
        config = config or settings
        return cls(
            rules=config.get_points_rules(),
            daily_limit_user=config.points_limit_user,
            daily_limit_pro=config.points_limit_pro,
        )

    def rule_points(self, action_type: str) -> int | None:
        """
        Points configured for an action.

        Returns:
            Positive integer value, or None when the action is unknown,
            disabled or misconfigured
        """
        value = self.rules.get(action_type)
        if isinstance(value, bool) or not isinstance(value, int):
            return None
        return value if value > 0 else None

    def daily_limit(self, active_tier: bool) -> int | None:
        """Ceiling for the user's tier, None when not configured."""
        limit = self.daily_limit_pro if active_tier else self.daily_limit_user
        if limit is None or isinstance(limit, bool) or limit <= 0:
            return None
        return int(limit)
