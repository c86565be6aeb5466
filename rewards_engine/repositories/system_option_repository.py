"""
SystemOption repository.

Data access layer for runtime options.
"""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from rewards_engine.models.system_option import SystemOption
from rewards_engine.repositories.base import BaseRepository


class SystemOptionRepository(BaseRepository[SystemOption]):
    """SystemOption repository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize system option repository."""
        super().__init__(SystemOption, session)

    async def get_many(self, names: list[str]) -> dict[str, str | None]:
        """
        Get several options at once.

        Args:
            names: Option names

        Returns:
            Mapping of lower-cased option name to raw value; missing
            options are absent
        """
        lowered = [name.lower() for name in names]
        stmt = select(
            SystemOption.option_name, SystemOption.option_value
        ).where(func.lower(SystemOption.option_name).in_(lowered))
        result = await self.session.execute(stmt)
        return {row.option_name.lower(): row.option_value for row in result.all()}
