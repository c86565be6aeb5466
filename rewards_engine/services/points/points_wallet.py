"""
Points wallet service.

Points overview, history and conversion of points into wallet money.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from rewards_engine.config.constants import (
    ACTION_LABELS,
    DEFAULT_POINTS_PER_CURRENCY,
    HISTORY_MAX_PAGE_SIZE,
    HISTORY_SORT_COLUMNS,
    OPTION_POINTS_PER_CURRENCY,
    OPTION_POINTS_TRANSFER_ENABLED,
)
from rewards_engine.repositories.points_log_repository import (
    PointsLogRepository,
)
from rewards_engine.repositories.system_option_repository import (
    SystemOptionRepository,
)
from rewards_engine.repositories.user_repository import UserRepository
from rewards_engine.services.base_service import BaseService, transaction
from rewards_engine.services.entitlement_service import EntitlementResolver
from rewards_engine.services.points.config import AccrualContext
from rewards_engine.services.points.quota_ledger import QuotaLedger
from rewards_engine.utils.datetime_utils import utc_now
from rewards_engine.utils.exceptions import (
    ConfigurationError,
    InsufficientBalanceError,
    TransferDisabledError,
    UserNotFoundError,
)
from rewards_engine.utils.money import round_money, to_decimal


def option_enabled(value: str | None) -> bool:
    """Parse a "1"/"true" style option flag."""
    return str(value or "0").strip().lower() in ("1", "true")


def action_label(action_type: str) -> str:
    """Human label for an action type."""
    return ACTION_LABELS.get(action_type, action_type.replace("_", " "))


@dataclass
class PointsTransfer:
    """Result of a points-to-wallet conversion."""

    points: int
    money: Decimal
    points_balance: int
    wallet_balance: Decimal
    points_per_currency: Decimal


class PointsWalletService(BaseService):
    """Read models and transfers over a user's points."""

    def __init__(
        self,
        session: AsyncSession,
        quota_ledger: QuotaLedger,
        entitlement_resolver: EntitlementResolver | None = None,
    ) -> None:
        """
        Initialize points wallet service.

        Args:
            session: Async database session
            quota_ledger: Quota ledger bound to the same session
            entitlement_resolver: Tier lookup for the daily ceiling
        """
        super().__init__(session)
        self.quota_ledger = quota_ledger
        self.entitlements = entitlement_resolver or EntitlementResolver(session)
        self.user_repo = UserRepository(session)
        self.points_log_repo = PointsLogRepository(session)
        self.option_repo = SystemOptionRepository(session)

    async def _conversion_settings(self) -> tuple[bool, Decimal]:
        """Load (transfer_enabled, points_per_currency)."""
        options = await self.option_repo.get_many(
            [OPTION_POINTS_TRANSFER_ENABLED, OPTION_POINTS_PER_CURRENCY]
        )
        enabled = option_enabled(options.get(OPTION_POINTS_TRANSFER_ENABLED))
        rate = to_decimal(options.get(OPTION_POINTS_PER_CURRENCY))
        return enabled, rate

    async def get_overview(
        self,
        user_id: int,
        context: AccrualContext,
        now: datetime | None = None,
    ) -> dict:
        """
        Get points balances, rules and remaining daily quota.

        Args:
            user_id: User ID
            context: Rule table and daily ceilings
            now: Reference time (defaults to current UTC time)

        Returns:
            Dict with balances, rules, daily_limit, remaining_today and
            window_ends_at

        Raises:
            UserNotFoundError: User does not exist
        """
        user = await self.user_repo.get_by_id(user_id)
        if user is None:
            raise UserNotFoundError(user_id)

        now = now or utc_now()
        entitlement = await self.entitlements.resolve_tier(user_id, now)
        daily_limit = context.daily_limit(entitlement.active) or 0
        window_total = await self.quota_ledger.get_window_total(user_id, now)
        _, window_end = self.quota_ledger.window(now)

        enabled, rate = await self._conversion_settings()

        return {
            "balances": {
                "points": user.points_balance,
                "money": user.wallet_balance,
            },
            "rules": {
                "conversion": {
                    "points_per_currency": (
                        rate if rate > 0 else Decimal(DEFAULT_POINTS_PER_CURRENCY)
                    ),
                    "enabled": enabled,
                },
                "actions": dict(context.rules),
            },
            "daily_limit": daily_limit,
            "earned_today": window_total.total,
            "remaining_today": max(0, daily_limit - window_total.total),
            "window_ends_at": window_end,
            "tier": entitlement.tier_name,
        }

    async def get_history(
        self,
        user_id: int,
        page: int = 1,
        limit: int = 10,
        query: str | None = None,
        sort: str = "time",
        direction: str = "desc",
    ) -> dict:
        """
        Get paginated points history.

        Args:
            user_id: User ID
            page: Page number (1-indexed, clamped to >= 1)
            limit: Page size (clamped to 1..100)
            query: Optional search string
            sort: "time", "points" or "node_id" (others fall back to time)
            direction: "asc" or "desc"

        Returns:
            Dict with page, page_size, total and rows
        """
        page = max(1, page)
        limit = min(HISTORY_MAX_PAGE_SIZE, max(1, limit))
        sort = sort if sort in HISTORY_SORT_COLUMNS else "time"
        descending = direction.lower() != "asc"

        rows, total = await self.points_log_repo.get_history(
            user_id,
            page=page,
            per_page=limit,
            query=(query or "").strip() or None,
            sort=sort,
            descending=descending,
        )

        return {
            "page": page,
            "page_size": limit,
            "total": total,
            "rows": [
                {
                    "id": row.id,
                    "points": row.points,
                    "from": action_label(row.action_type),
                    "node_id": row.node_id,
                    "node_type": row.action_type,
                    "time": row.created_at,
                }
                for row in rows
            ],
        }

    @transaction
    async def transfer_to_wallet(
        self, user_id: int, points: int
    ) -> PointsTransfer:
        """
        Convert points into wallet money.

        ``points_per_currency`` points buy one currency unit; the amount is
        rounded to two decimals.

        Args:
            user_id: User ID
            points: Points to convert (> 0)

        Returns:
            PointsTransfer with the moved amounts and new balances

        Raises:
            ValueError: Non-positive points
            TransferDisabledError: Conversion switched off
            ConfigurationError: Invalid conversion rate
            UserNotFoundError: User does not exist
            InsufficientBalanceError: Not enough points
            StoreError: Database failure
        """
        if isinstance(points, bool) or not isinstance(points, int) or points <= 0:
            raise ValueError("Invalid points amount")

        enabled, rate = await self._conversion_settings()
        if not enabled:
            raise TransferDisabledError("Points to money transfer is disabled")
        if rate <= 0:
            raise ConfigurationError("Invalid points_per_currency setting")

        user = await self.user_repo.lock_by_id(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        if points > user.points_balance:
            raise InsufficientBalanceError(points, user.points_balance)

        points_before = user.points_balance
        wallet_before = user.wallet_balance
        money = round_money(Decimal(points) / rate)
        await self.user_repo.move_points_to_wallet(user_id, points, money)

        self.logger.info(
            "Points transferred to wallet",
            extra={
                "user_id": user_id,
                "points": points,
                "money": str(money),
                "rate": str(rate),
            },
        )

        return PointsTransfer(
            points=points,
            money=money,
            points_balance=points_before - points,
            wallet_balance=wallet_before + money,
            points_per_currency=rate,
        )
