"""
SystemOption model.

Key/value runtime configuration edited from the admin console.
"""

from sqlalchemy import Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from rewards_engine.models.base import Base


class SystemOption(Base):
    """Single runtime option."""

    __tablename__ = "system_options"

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    option_name: Mapped[str] = mapped_column(
        String(255), unique=True, nullable=False, index=True
    )
    option_value: Mapped[str | None] = mapped_column(
        Text, nullable=True
    )

    def __repr__(self) -> str:
        """String representation."""
        return f"<SystemOption({self.option_name}={self.option_value!r})>"
