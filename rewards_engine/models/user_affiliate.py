"""
UserAffiliate model.

Directed referral edge: who referred whom.
"""

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer
from sqlalchemy.orm import Mapped, mapped_column

from rewards_engine.models.base import Base
from rewards_engine.utils.datetime_utils import utc_now


class UserAffiliate(Base):
    """Referral edge. A referee has at most one referrer."""

    __tablename__ = "users_affiliates"
    __table_args__ = (
        CheckConstraint(
            'referrer_id <> referee_id', name='check_affiliate_not_self'
        ),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    referrer_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    referee_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<UserAffiliate(referrer_id={self.referrer_id}, "
            f"referee_id={self.referee_id})>"
        )
