"""
Affiliate wallet service.

Affiliate overview, referral listing and transfer of commission balance
into the wallet.
"""

from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from rewards_engine.config.constants import REFERRALS_MAX_PAGE_SIZE
from rewards_engine.repositories.system_option_repository import (
    SystemOptionRepository,
)
from rewards_engine.repositories.user_repository import UserRepository
from rewards_engine.services.base_service import BaseService, transaction
from rewards_engine.services.referral.config import load_affiliate_settings
from rewards_engine.services.referral.graph_resolver import (
    ReferralGraphResolver,
)
from rewards_engine.utils.exceptions import (
    InsufficientBalanceError,
    TransferDisabledError,
    UserNotFoundError,
)
from rewards_engine.utils.money import round_money, to_decimal


class AffiliateWalletService(BaseService):
    """Read models and transfers over a user's affiliate balance."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize affiliate wallet service."""
        super().__init__(session)
        self.user_repo = UserRepository(session)
        self.option_repo = SystemOptionRepository(session)
        self.graph = ReferralGraphResolver(session)

    async def get_overview(self, user_id: int) -> dict:
        """
        Get affiliate settings, balances and referral counts per level.

        Args:
            user_id: User ID

        Returns:
            Dict with settings, balance and referrals

        Raises:
            UserNotFoundError: User does not exist
        """
        user = await self.user_repo.get_by_id(user_id)
        if user is None:
            raise UserNotFoundError(user_id)

        settings = await load_affiliate_settings(self.option_repo)
        per_level = await self.graph.downline_counts(user_id, settings.levels)

        return {
            "settings": {
                "enabled": settings.enabled,
                "levels": settings.levels,
                "type": settings.affiliate_type,
                "percents": settings.percents,
                "min_withdrawal": settings.min_withdrawal,
                "transfer_enabled": settings.transfer_enabled,
                "withdraw_enabled": settings.withdraw_enabled,
            },
            "balance": {
                "affiliate": user.affiliate_balance,
                "wallet": user.wallet_balance,
            },
            "referrals": {
                "per_level": per_level,
                "total": sum(per_level),
            },
        }

    async def list_referrals(
        self,
        user_id: int,
        level: int = 1,
        page: int = 1,
        limit: int = 20,
        search: str | None = None,
    ) -> dict:
        """
        List the user's referrals at one level.

        Args:
            user_id: User ID
            level: Referral level (1 = direct referrals)
            page: Page number (clamped to >= 1)
            limit: Page size (clamped to 1..100)
            search: Optional username / name filter

        Returns:
            Dict with items, total, page and limit
        """
        level = max(1, level)
        page = max(1, page)
        limit = min(REFERRALS_MAX_PAGE_SIZE, max(1, limit))

        ids = await self.graph.downline_ids(user_id, level)

        users, total = await self.user_repo.find_page_by_ids(
            ids,
            page=page,
            per_page=limit,
            search=(search or "").strip() or None,
        )

        return {
            "items": [
                {
                    "id": user.id,
                    "username": user.username,
                    "full_name": user.display_name,
                    "avatar": user.picture,
                    "joined_at": user.created_at,
                }
                for user in users
            ],
            "total": total,
            "page": page,
            "limit": limit,
        }

    @transaction
    async def transfer_to_wallet(
        self, user_id: int, amount: Decimal | int | str
    ) -> dict:
        """
        Move commission balance into the wallet.

        Args:
            user_id: User ID
            amount: Amount to move

        Returns:
            Dict with moved amount and new balances

        Raises:
            TransferDisabledError: Transfers switched off
            ValueError: Non-positive or below-minimum amount
            UserNotFoundError: User does not exist
            InsufficientBalanceError: Affiliate balance too low
            StoreError: Database failure
        """
        settings = await load_affiliate_settings(self.option_repo)
        if not settings.transfer_enabled:
            raise TransferDisabledError("Affiliate transfer is disabled")

        amount = round_money(to_decimal(amount))
        if amount <= 0:
            raise ValueError("Invalid amount")
        if amount < settings.min_withdrawal:
            raise ValueError(f"Minimum is {settings.min_withdrawal}")

        user = await self.user_repo.lock_by_id(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        if amount > user.affiliate_balance:
            raise InsufficientBalanceError(amount, user.affiliate_balance)

        affiliate_before = user.affiliate_balance
        wallet_before = user.wallet_balance
        await self.user_repo.move_affiliate_to_wallet(user_id, amount)

        self.logger.info(
            "Affiliate balance transferred to wallet",
            extra={"user_id": user_id, "amount": str(amount)},
        )

        return {
            "amount": amount,
            "affiliate_balance": affiliate_before - amount,
            "wallet_balance": wallet_before + amount,
        }
