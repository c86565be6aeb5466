"""
User repository.

Data access layer for User model: balance mutations and referral lookups.
"""

from decimal import Decimal

from sqlalchemy import func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from rewards_engine.models.user import User
from rewards_engine.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """User repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize user repository."""
        super().__init__(User, session)

    async def get_referrer_id(self, user_id: int) -> int | None:
        """
        Get referrer stored on the user row.

        Args:
            user_id: User ID

        Returns:
            Referrer ID or None
        """
        stmt = select(User.referrer_id).where(User.id == user_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def add_points(self, user_id: int, points: int) -> bool:
        """
        Atomically add points to the user's balance.

        Args:
            user_id: User ID
            points: Points to add

        Returns:
            True if the row was updated
        """
        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(points_balance=User.points_balance + points)
        )
        result = await self.session.execute(stmt)
        return result.rowcount > 0

    async def add_affiliate_balance(
        self, user_id: int, amount: Decimal
    ) -> bool:
        """
        Atomically add commission to the user's affiliate balance.

        Args:
            user_id: User ID
            amount: Amount to add

        Returns:
            True if the row was updated
        """
        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(affiliate_balance=User.affiliate_balance + amount)
        )
        result = await self.session.execute(stmt)
        return result.rowcount > 0

    async def move_points_to_wallet(
        self, user_id: int, points: int, money: Decimal
    ) -> bool:
        """
        Debit points and credit the converted amount to the wallet.

        Caller must hold the row lock and have checked the balance.

        Args:
            user_id: User ID
            points: Points to debit
            money: Wallet amount to credit

        Returns:
            True if the row was updated
        """
        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(
                points_balance=User.points_balance - points,
                wallet_balance=User.wallet_balance + money,
            )
        )
        result = await self.session.execute(stmt)
        return result.rowcount > 0

    async def move_affiliate_to_wallet(
        self, user_id: int, amount: Decimal
    ) -> bool:
        """
        Move amount from affiliate balance to wallet balance.

        Caller must hold the row lock and have checked the balance.

        Args:
            user_id: User ID
            amount: Amount to move

        Returns:
            True if the row was updated
        """
        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(
                affiliate_balance=User.affiliate_balance - amount,
                wallet_balance=User.wallet_balance + amount,
            )
        )
        result = await self.session.execute(stmt)
        return result.rowcount > 0

    async def find_page_by_ids(
        self,
        user_ids: list[int],
        page: int = 1,
        per_page: int = 20,
        search: str | None = None,
    ) -> tuple[list[User], int]:
        """
        Page through a set of users, newest first.

        Args:
            user_ids: Candidate user IDs
            page: Page number (1-indexed)
            per_page: Items per page
            search: Optional username / name substring

        Returns:
            Tuple of (users, total_count)
        """
        if not user_ids:
            return [], 0

        conditions = [User.id.in_(user_ids)]
        if search:
            like = f"%{search}%"
            full_name = func.concat_ws(" ", User.first_name, User.last_name)
            conditions.append(
                or_(User.username.ilike(like), full_name.ilike(like))
            )

        count_stmt = select(func.count(User.id)).where(*conditions)
        count_result = await self.session.execute(count_stmt)
        total = count_result.scalar() or 0

        stmt = (
            select(User)
            .where(*conditions)
            .order_by(User.created_at.desc())
            .offset((page - 1) * per_page)
            .limit(per_page)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all()), total
