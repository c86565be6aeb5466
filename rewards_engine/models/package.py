"""
Package models.

Subscription packages and the append-only purchase records.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from rewards_engine.models.base import Base
from rewards_engine.models.types import MoneyType
from rewards_engine.utils.datetime_utils import utc_now


class Package(Base):
    """Subscription package (paid tier)."""

    __tablename__ = "packages"

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    name: Mapped[str] = mapped_column(
        String(255), unique=True, nullable=False
    )
    price: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )
    # Validity: period_num x period ("day", "week", "month", "year")
    period_num: Mapped[int | None] = mapped_column(
        Integer, nullable=True
    )
    period: Mapped[str | None] = mapped_column(
        String(20), nullable=True
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<Package(id={self.id}, name={self.name!r}, "
            f"period={self.period_num} {self.period})>"
        )


class PackagePayment(Base):
    """
    Purchase record.

    One row per purchase, never updated. Entitlement is derived from the
    most recent row per user.
    """

    __tablename__ = "package_payments"
    __table_args__ = (
        Index("idx_package_payments_user_time", "user_id", "purchased_at"),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    package_name: Mapped[str] = mapped_column(
        String(255), nullable=False
    )
    amount: Mapped[Decimal] = mapped_column(
        MoneyType, nullable=False
    )
    purchased_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<PackagePayment(id={self.id}, user_id={self.user_id}, "
            f"package_name={self.package_name!r}, amount={self.amount})>"
        )
