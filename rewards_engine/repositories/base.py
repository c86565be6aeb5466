"""
Repository base.

Lookups, row locks and inserts shared by the table repositories. The log
and purchase tables are append-only, so there is no delete or generic
update here; balance changes live on UserRepository as atomic UPDATEs.
"""

from typing import Any, Generic, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rewards_engine.models.base import Base


M = TypeVar("M", bound=Base)


class BaseRepository(Generic[M]):
    """
    Table access bound to one session.

    Subclasses pass their model:

        class PackageRepository(BaseRepository[Package]):
            def __init__(self, session: AsyncSession) -> None:
                super().__init__(Package, session)
    """

    def __init__(self, model: type[M], session: AsyncSession) -> None:
        self.model = model
        self.session = session

    async def get_by_id(self, id: int) -> M | None:
        """Row by primary key, from the identity map when already loaded."""
        return await self.session.get(self.model, id)

    async def lock_by_id(self, id: int) -> M | None:
        """
        Row by primary key under SELECT ... FOR UPDATE.

        The lock is held until the session's transaction ends. Attributes
        are reloaded even if the row is already in the session, so checks
        made after locking see committed values.

        Args:
            id: Primary key

        Returns:
            Locked row, or None when it does not exist
        """
        stmt = (
            select(self.model)
            .where(self.model.id == id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by(self, **filters: Any) -> M | None:
        """First row matching equality filters."""
        stmt = select(self.model).filter_by(**filters).limit(1)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create(self, **values: Any) -> M:
        """
        Insert a row and flush so its primary key is assigned.

        The insert belongs to the caller's transaction; nothing is
        committed here.
        """
        row = self.model(**values)
        self.session.add(row)
        await self.session.flush()
        return row

    async def exists(self, **filters: Any) -> bool:
        """Whether any row matches equality filters."""
        stmt = select(self.model.id).filter_by(**filters).limit(1)
        result = await self.session.execute(stmt)
        return result.first() is not None
