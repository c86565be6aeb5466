"""
PointsLog repository.

Data access layer for the append-only points log.
"""

from datetime import datetime

from sqlalchemy import String, cast, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from rewards_engine.models.points_log import PointsLog
from rewards_engine.repositories.base import BaseRepository


_SORT_COLUMNS = {
    "time": PointsLog.created_at,
    "points": PointsLog.points,
    "node_id": PointsLog.node_id,
}


class PointsLogRepository(BaseRepository[PointsLog]):
    """PointsLog repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize points log repository."""
        super().__init__(PointsLog, session)

    async def exists_for_node(
        self, user_id: int, node_id: int, action_type: str
    ) -> bool:
        """
        Check whether an action on a node was already credited.

        Args:
            user_id: User ID
            node_id: Action subject ID
            action_type: Canonical action type

        Returns:
            True if a log row exists
        """
        return await self.exists(
            user_id=user_id, node_id=node_id, action_type=action_type
        )

    async def sum_points(
        self, user_id: int, since: datetime, until: datetime
    ) -> int:
        """
        Sum points credited to a user in [since, until).

        Args:
            user_id: User ID
            since: Window start (inclusive)
            until: Window end (exclusive)

        Returns:
            Total points
        """
        stmt = select(func.coalesce(func.sum(PointsLog.points), 0)).where(
            PointsLog.user_id == user_id,
            PointsLog.created_at >= since,
            PointsLog.created_at < until,
        )
        result = await self.session.execute(stmt)
        return int(result.scalar() or 0)

    async def get_history(
        self,
        user_id: int,
        page: int = 1,
        per_page: int = 10,
        query: str | None = None,
        sort: str = "time",
        descending: bool = True,
    ) -> tuple[list[PointsLog], int]:
        """
        Page through a user's points log.

        Args:
            user_id: User ID
            page: Page number (1-indexed)
            per_page: Items per page
            query: Substring matched against action type, node ID or points
            sort: One of "time", "points", "node_id"
            descending: Sort direction

        Returns:
            Tuple of (rows, total_count)
        """
        conditions = [PointsLog.user_id == user_id]
        if query:
            like = f"%{query}%"
            conditions.append(
                or_(
                    PointsLog.action_type.ilike(like),
                    cast(PointsLog.node_id, String).ilike(like),
                    cast(PointsLog.points, String).ilike(like),
                )
            )

        count_stmt = select(func.count(PointsLog.id)).where(*conditions)
        count_result = await self.session.execute(count_stmt)
        total = count_result.scalar() or 0

        column = _SORT_COLUMNS.get(sort, PointsLog.created_at)
        order = column.desc() if descending else column.asc()
        stmt = (
            select(PointsLog)
            .where(*conditions)
            .order_by(order, PointsLog.id.desc())
            .offset((page - 1) * per_page)
            .limit(per_page)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all()), total
