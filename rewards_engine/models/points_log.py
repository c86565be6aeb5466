"""
PointsLog model.

Append-only log of every successful points credit.
"""

from datetime import datetime

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column

from rewards_engine.models.base import Base
from rewards_engine.utils.datetime_utils import utc_now


class PointsLog(Base):
    """
    PointsLog entity.

    One row per credit. Rows are never updated or deleted: the log is both
    the audit trail and the source the daily quota is rebuilt from.

    Attributes:
        id: Primary key (monotonic)
        user_id: Credited user
        node_id: Subject of the action (post id, comment id, ...)
        action_type: Canonical action type
        points: Points awarded (> 0)
        created_at: When the credit was committed
    """

    __tablename__ = "points_log"
    __table_args__ = (
        Index("idx_points_log_user_time", "user_id", "created_at"),
        Index(
            "idx_points_log_user_node_type",
            "user_id", "node_id", "action_type",
        ),
        CheckConstraint('points > 0', name='check_points_log_positive'),
    )

    id: Mapped[int] = mapped_column(
        BigInteger,
        primary_key=True,
        autoincrement=True,
    )
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    node_id: Mapped[int] = mapped_column(
        BigInteger, default=0, nullable=False
    )
    action_type: Mapped[str] = mapped_column(
        String(50), nullable=False
    )
    points: Mapped[int] = mapped_column(
        Integer, nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<PointsLog(id={self.id}, user_id={self.user_id}, "
            f"action_type={self.action_type!r}, points={self.points})>"
        )
