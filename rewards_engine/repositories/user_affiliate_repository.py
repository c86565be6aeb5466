"""
UserAffiliate repository.

Data access layer for the referral edge table.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rewards_engine.models.user_affiliate import UserAffiliate
from rewards_engine.repositories.base import BaseRepository


class UserAffiliateRepository(BaseRepository[UserAffiliate]):
    """Referral edge repository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize user affiliate repository."""
        super().__init__(UserAffiliate, session)

    async def get_referrer_id(self, referee_id: int) -> int | None:
        """
        Get referrer of a user from the edge table.

        Args:
            referee_id: Referred user ID

        Returns:
            Referrer ID or None
        """
        stmt = (
            select(UserAffiliate.referrer_id)
            .where(UserAffiliate.referee_id == referee_id)
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_referee_ids(self, referrer_ids: list[int]) -> list[int]:
        """
        Get users directly referred by any of the given referrers.

        Args:
            referrer_ids: Referrer user IDs

        Returns:
            Referee IDs
        """
        if not referrer_ids:
            return []
        stmt = select(UserAffiliate.referee_id).where(
            UserAffiliate.referrer_id.in_(referrer_ids)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
