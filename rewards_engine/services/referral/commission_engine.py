"""
Commission distribution engine.

Credits affiliate commissions up the referral chain after a paid purchase.
"""

from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from rewards_engine.repositories.system_option_repository import (
    SystemOptionRepository,
)
from rewards_engine.repositories.user_repository import UserRepository
from rewards_engine.services.base_service import BaseService
from rewards_engine.services.referral.config import (
    AffiliateSettings,
    load_affiliate_settings,
    referrer_override_percent,
)
from rewards_engine.services.referral.graph_resolver import (
    ReferralGraphResolver,
)
from rewards_engine.utils.exceptions import StoreError
from rewards_engine.utils.money import percent_of, to_decimal


@dataclass(frozen=True)
class CommissionAward:
    """One credited level of a distribution run."""

    level: int
    referrer_id: int
    percent: Decimal
    amount: Decimal


class CommissionEngine(BaseService):
    """
    Multi-level commission distribution.

    The upline is bounded by the configured depth and guarded against
    cycles, so each referrer is credited at most once per run.
    """

    def __init__(self, session: AsyncSession) -> None:
        """
        Initialize commission engine.

        Args:
            session: Async database session
        """
        super().__init__(session)
        self.user_repo = UserRepository(session)
        self.option_repo = SystemOptionRepository(session)
        self.graph = ReferralGraphResolver(session)

    async def distribute_commissions(
        self,
        purchaser_id: int,
        gross_amount: Decimal | int | str,
        settings: AffiliateSettings | None = None,
        external_transaction: bool = False,
    ) -> list[CommissionAward]:
        """
        Distribute commissions for a purchase.

        Args:
            purchaser_id: Buyer's user ID
            gross_amount: Purchase amount commissions are computed on
            settings: Affiliate settings (loaded from system options when
                omitted)
            external_transaction: The caller owns the transaction; flush
                only, never commit or roll back

        Returns:
            Awards in level order; empty when there is no upline or no level
            produced a positive amount

        Raises:
            ValueError: Invalid purchaser ID
            StoreError: Database failure in a locally owned transaction
                (rolled back in full)
        """
        if isinstance(purchaser_id, bool) or not isinstance(purchaser_id, int) or purchaser_id <= 0:
            raise ValueError("Invalid purchaser_id")

        amount = to_decimal(gross_amount)
        if amount <= 0:
            return []

        if external_transaction:
            return await self._distribute(purchaser_id, amount, settings)

        try:
            awards = await self._distribute(purchaser_id, amount, settings)
            await self.commit()
        except SQLAlchemyError as e:
            await self.rollback()
            self.logger.error(
                "Commission distribution rolled back",
                extra={"purchaser_id": purchaser_id, "error": str(e)},
                exc_info=True,
            )
            raise StoreError(str(e)) from e
        except Exception:
            await self.rollback()
            raise

        return awards

    async def _distribute(
        self,
        purchaser_id: int,
        gross_amount: Decimal,
        settings: AffiliateSettings | None,
    ) -> list[CommissionAward]:
        """Compute and credit every level inside the current transaction."""
        if settings is None:
            settings = await load_affiliate_settings(self.option_repo)

        chain = await self.graph.upline(purchaser_id, settings.levels)
        if not chain:
            self.logger.debug(
                "No upline for purchaser",
                extra={"purchaser_id": purchaser_id},
            )
            return []

        awards: list[CommissionAward] = []

        for index, referrer_id in enumerate(chain):
            level = index + 1

            referrer = await self.user_repo.lock_by_id(referrer_id)
            if referrer is None:
                self.logger.warning(
                    "Referrer not found for commission",
                    extra={"referrer_id": referrer_id, "level": level},
                )
                continue

            custom = referrer_override_percent(referrer, level)
            percent = custom if custom is not None else settings.percent_for_level(level)
            if percent <= 0:
                continue

            amount = percent_of(gross_amount, percent)
            if amount <= 0:
                continue

            await self.user_repo.add_affiliate_balance(referrer_id, amount)
            awards.append(
                CommissionAward(
                    level=level,
                    referrer_id=referrer_id,
                    percent=percent,
                    amount=amount,
                )
            )

            self.logger.info(
                "Affiliate commission credited",
                extra={
                    "purchaser_id": purchaser_id,
                    "referrer_id": referrer_id,
                    "level": level,
                    "percent": str(percent),
                    "custom": custom is not None,
                    "amount": str(amount),
                },
            )

        await self.session.flush()

        self.logger.info(
            "Affiliate commissions distributed",
            extra={
                "purchaser_id": purchaser_id,
                "gross_amount": str(gross_amount),
                "chain_length": len(chain),
                "awards_count": len(awards),
                "total": str(sum((a.amount for a in awards), Decimal("0"))),
            },
        )

        return awards
