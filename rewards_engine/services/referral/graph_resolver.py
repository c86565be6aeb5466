"""
Referral graph resolver.

Reads "who referred whom" from the user row and the referral edge table.
"""

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from rewards_engine.config.constants import HARD_MAX_AFFILIATE_LEVELS
from rewards_engine.repositories.user_affiliate_repository import (
    UserAffiliateRepository,
)
from rewards_engine.repositories.user_repository import UserRepository


class ReferralGraphResolver:
    """Read-only traversal of the referral graph."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize graph resolver."""
        self.session = session
        self.user_repo = UserRepository(session)
        self.affiliate_repo = UserAffiliateRepository(session)

    async def direct_referrer(self, user_id: int) -> int | None:
        """
        Get the user's direct referrer.

        The referrer stored on the user row wins; the edge table is the
        fallback. Self-references are ignored.

        Args:
            user_id: User ID

        Returns:
            Referrer ID or None
        """
        referrer_id = await self.user_repo.get_referrer_id(user_id)
        if referrer_id and referrer_id != user_id:
            return referrer_id

        referrer_id = await self.affiliate_repo.get_referrer_id(user_id)
        if referrer_id and referrer_id != user_id:
            return referrer_id
        return None

    async def upline(self, user_id: int, max_depth: int) -> list[int]:
        """
        Build the referral chain above a user.

        Stops at the first missing referrer, at a referrer already in the
        chain (cycle) or after ``max_depth`` levels.

        Args:
            user_id: Starting user (not included in the result)
            max_depth: Maximum number of levels

        Returns:
            Referrer IDs, index 0 = level 1
        """
        chain: list[int] = []
        visited = {user_id}
        current = user_id

        for _ in range(max(0, max_depth)):
            parent = await self.direct_referrer(current)
            if parent is None:
                break
            if parent in visited:
                logger.warning(
                    "Referral cycle detected, upline truncated",
                    extra={
                        "user_id": user_id,
                        "cycle_at": parent,
                        "chain": chain,
                    },
                )
                break
            chain.append(parent)
            visited.add(parent)
            current = parent

        return chain

    async def downline_levels(
        self, user_id: int, levels: int
    ) -> list[list[int]]:
        """
        Referees of a user, level by level, from the edge table.

        Args:
            user_id: Root user
            levels: Number of levels (capped at the hard maximum)

        Returns:
            One list of user IDs per level; a user appears at most once
        """
        levels = min(max(0, levels), HARD_MAX_AFFILIATE_LEVELS)
        visited = {user_id}
        frontier = [user_id]
        result: list[list[int]] = []

        for _ in range(levels):
            if not frontier:
                result.append([])
                continue
            referees = await self.affiliate_repo.get_referee_ids(frontier)
            frontier = []
            for referee_id in referees:
                if referee_id not in visited:
                    visited.add(referee_id)
                    frontier.append(referee_id)
            result.append(frontier)

        return result

    async def downline_counts(self, user_id: int, levels: int) -> list[int]:
        """Number of referees per level."""
        return [len(ids) for ids in await self.downline_levels(user_id, levels)]

    async def downline_ids(self, user_id: int, level: int) -> list[int]:
        """Referees at one level (1 = direct referrals)."""
        if level < 1:
            return []
        levels = await self.downline_levels(user_id, level)
        return levels[level - 1] if len(levels) >= level else []
