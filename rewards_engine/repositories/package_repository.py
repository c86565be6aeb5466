"""
Package repository.

Data access layer for packages and purchase records.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rewards_engine.models.package import Package, PackagePayment
from rewards_engine.repositories.base import BaseRepository


class PackageRepository(BaseRepository[Package]):
    """Package repository with purchase lookups."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize package repository."""
        super().__init__(Package, session)

    async def get_by_name(self, name: str) -> Package | None:
        """
        Get package by name.

        Args:
            name: Package name

        Returns:
            Package or None
        """
        return await self.get_by(name=name)

    async def get_latest_payment(
        self, user_id: int
    ) -> PackagePayment | None:
        """
        Get the most recent purchase of a user.

        Args:
            user_id: User ID

        Returns:
            Latest purchase record or None
        """
        stmt = (
            select(PackagePayment)
            .where(PackagePayment.user_id == user_id)
            .order_by(
                PackagePayment.purchased_at.desc(),
                PackagePayment.id.desc(),
            )
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()
