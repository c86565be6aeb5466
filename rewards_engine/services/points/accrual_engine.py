"""
Points accrual engine.

Credits users with points for qualifying actions under a daily quota.
"""

from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from rewards_engine.config.constants import REASON_DAILY_LIMIT, REASON_DUPLICATE
from rewards_engine.repositories.points_log_repository import (
    PointsLogRepository,
)
from rewards_engine.repositories.user_repository import UserRepository
from rewards_engine.services.base_service import BaseService, transaction
from rewards_engine.services.entitlement_service import EntitlementResolver
from rewards_engine.services.points.config import (
    AccrualContext,
    is_repeatable,
    normalize_action_type,
)
from rewards_engine.services.points.quota_ledger import QuotaLedger
from rewards_engine.utils.datetime_utils import utc_now
from rewards_engine.utils.exceptions import (
    ConfigurationError,
    StoreError,
    UserNotFoundError,
)


@dataclass
class AccrualResult:
    """
    Outcome of a credit_points call.

    ``awarded == 0`` with a reason code is a normal outcome, not a failure.
    """

    awarded: int
    remaining_today: int
    action_type: str
    reason: str | None = None
    points_balance: int | None = None

    @property
    def credited(self) -> bool:
        """True when points were written."""
        return self.awarded > 0


class PointsAccrualEngine(BaseService):
    """
    Points accrual engine.

    Each call runs in its own transaction on the given session:
    1. Lock the user row so concurrent credits for one user serialize
    2. Skip one-off actions already credited for the same node
    3. Skip when the daily ceiling is reached
    4. Append the log row and add the points to the balance
    5. After commit, mirror the award into the quota cache
    """

    def __init__(
        self,
        session: AsyncSession,
        quota_ledger: QuotaLedger | None,
        entitlement_resolver: EntitlementResolver | None = None,
    ) -> None:
        """
        Initialize accrual engine.

        Args:
            session: Async database session
            quota_ledger: Quota ledger bound to the same session
            entitlement_resolver: Tier lookup (defaults to a resolver on
                the same session)
        """
        super().__init__(session)
        self.quota_ledger = quota_ledger
        self.entitlements = entitlement_resolver or EntitlementResolver(session)
        self.user_repo = UserRepository(session)
        self.points_log_repo = PointsLogRepository(session)

    async def credit_points(
        self,
        user_id: int,
        node_id: int,
        action_type: str,
        context: AccrualContext,
        now: datetime | None = None,
    ) -> AccrualResult:
        """
        Credit points for an action.

        Args:
            user_id: User to credit
            node_id: Subject of the action (post, comment, followed user...)
            action_type: Action type (legacy aliases accepted)
            context: Rule table and daily ceilings
            now: Reference time (defaults to current UTC time)

        Returns:
            AccrualResult with the awarded amount and remaining quota

        Raises:
            ConfigurationError: Unknown/disabled action, missing ceiling or
                missing quota ledger; nothing is written
            UserNotFoundError: User row does not exist
            StoreError: Database failure; the transaction was rolled back
        """
        normalized = normalize_action_type(action_type)
        rule_points = context.rule_points(normalized)
        if rule_points is None:
            raise ConfigurationError(
                f"No positive points value for action type {normalized!r}"
            )
        if self.quota_ledger is None:
            raise ConfigurationError("Quota ledger is required for accrual")

        now = now or utc_now()
        try:
            entitlement = await self.entitlements.resolve_tier(user_id, now)
        except SQLAlchemyError as e:
            await self.rollback()
            self.logger.error(
                "Tier lookup failed",
                extra={"user_id": user_id, "error": str(e)},
            )
            raise StoreError(str(e)) from e
        daily_limit = context.daily_limit(entitlement.active)
        if daily_limit is None:
            raise ConfigurationError(
                "Daily points ceiling is not configured for "
                f"{'active' if entitlement.active else 'default'} tier"
            )

        result = await self._credit(
            user_id, node_id, normalized, rule_points, daily_limit, now
        )

        if result.credited:
            await self.quota_ledger.increment(user_id, result.awarded, now)
            self.logger.info(
                "Points credited",
                extra={
                    "user_id": user_id,
                    "node_id": node_id,
                    "action_type": normalized,
                    "awarded": result.awarded,
                    "remaining_today": result.remaining_today,
                    "tier": entitlement.tier_name,
                },
            )
        else:
            self.logger.debug(
                "Points not credited",
                extra={
                    "user_id": user_id,
                    "node_id": node_id,
                    "action_type": normalized,
                    "reason": result.reason,
                },
            )

        return result

    @transaction
    async def _credit(
        self,
        user_id: int,
        node_id: int,
        action_type: str,
        rule_points: int,
        daily_limit: int,
        now: datetime,
    ) -> AccrualResult:
        """Transactional part of credit_points; commits on return."""
        user = await self.user_repo.lock_by_id(user_id)
        if user is None:
            raise UserNotFoundError(user_id)

        if not is_repeatable(action_type) and node_id:
            if await self.points_log_repo.exists_for_node(
                user_id, node_id, action_type
            ):
                remaining = await self._remaining(user_id, daily_limit, now)
                return AccrualResult(
                    awarded=0,
                    remaining_today=remaining,
                    action_type=action_type,
                    reason=REASON_DUPLICATE,
                    points_balance=user.points_balance,
                )

        remaining = await self._remaining_from_log(user_id, daily_limit, now)

        if remaining == 0:
            return AccrualResult(
                awarded=0,
                remaining_today=0,
                action_type=action_type,
                reason=REASON_DAILY_LIMIT,
                points_balance=user.points_balance,
            )

        to_award = min(rule_points, remaining)
        balance_before = user.points_balance or 0

        await self.points_log_repo.create(
            user_id=user_id,
            node_id=node_id or 0,
            action_type=action_type,
            points=to_award,
            created_at=now,
        )
        await self.user_repo.add_points(user_id, to_award)

        return AccrualResult(
            awarded=to_award,
            remaining_today=remaining - to_award,
            action_type=action_type,
            points_balance=balance_before + to_award,
        )

    async def _remaining(self, user_id: int, daily_limit: int, now: datetime) -> int:
        """Quota left according to the ledger."""
        window_total = await self.quota_ledger.get_window_total(user_id, now)
        return max(0, daily_limit - window_total.total)

    async def _remaining_from_log(
        self, user_id: int, daily_limit: int, now: datetime
    ) -> int:
        """
        Quota left according to the log, read under the user row lock.

        The cache may lag a credit whose post-commit increment has not run
        yet. It may also run ahead when a rebuild raced such an increment
        and the credit was counted twice; an entry above the log is rebuilt
        so that later reads converge.
        """
        cached = await self.quota_ledger.get_window_total(user_id, now)
        earned = await self.quota_ledger.sum_from_log(user_id, now)
        if cached.total > earned:
            self.logger.warning(
                "Points cache ahead of log, rebuilding",
                extra={"user_id": user_id, "cached": cached.total, "logged": earned},
            )
            earned = await self.quota_ledger.reconstruct(user_id, now)
        return max(0, daily_limit - earned)
