"""
User model.

Holds the balances mutated by the points and commission engines.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column

from rewards_engine.models.base import Base
from rewards_engine.models.types import MoneyType
from rewards_engine.utils.datetime_utils import utc_now


class User(Base):
    """User model - balances and referral link of a registered user."""

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint(
            'points_balance >= 0', name='check_user_points_non_negative'
        ),
        CheckConstraint(
            'affiliate_balance >= 0',
            name='check_user_affiliate_balance_non_negative'
        ),
        CheckConstraint(
            'wallet_balance >= 0',
            name='check_user_wallet_balance_non_negative'
        ),
        CheckConstraint(
            'referrer_id IS NULL OR referrer_id <> id',
            name='check_user_not_self_referred'
        ),
    )

    # Primary key
    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )

    # Profile
    username: Mapped[str | None] = mapped_column(
        String(255), nullable=True, index=True
    )
    first_name: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )
    last_name: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )
    picture: Mapped[str | None] = mapped_column(
        String(500), nullable=True
    )

    # Balances
    points_balance: Mapped[int] = mapped_column(
        Integer, default=0, nullable=False
    )
    affiliate_balance: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )
    wallet_balance: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )

    # Referral (set at signup, immutable thereafter)
    referrer_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )

    # Per-referrer commission override
    custom_affiliate_system: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )
    affiliate_percentages: Mapped[list[Any] | None] = mapped_column(
        JSON,
        nullable=True,
        comment="Custom percentage per level, index 0 = level 1",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )

    @property
    def display_name(self) -> str:
        """Full name, falling back to username or ID."""
        full_name = " ".join(
            part for part in (self.first_name, self.last_name) if part
        )
        return full_name or self.username or f"ID:{self.id}"

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<User(id={self.id}, username={self.username!r}, "
            f"points={self.points_balance}, "
            f"affiliate_balance={self.affiliate_balance})>"
        )
