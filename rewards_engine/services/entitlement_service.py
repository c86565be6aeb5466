"""
Entitlement resolver.

Determines whether a user currently holds an active paid package.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timedelta

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from rewards_engine.config.settings import settings
from rewards_engine.models.package import Package
from rewards_engine.repositories.package_repository import PackageRepository
from rewards_engine.utils.datetime_utils import add_months, ensure_aware, utc_now


@dataclass(frozen=True)
class Entitlement:
    """Active tier of a user."""

    active: bool
    tier_name: str | None = None
    expires_at: datetime | None = None


INACTIVE = Entitlement(active=False)


def package_expiry(
    purchased_at: datetime,
    package: Package | None,
    package_name: str,
    validity_days: Mapping[str, int],
) -> datetime | None:
    """
    Compute when a purchase stops granting its tier.

    The package's own period wins; plans without one fall back to the
    configured name -> days map.

    Args:
        purchased_at: Purchase timestamp
        package: Package row, if it exists
        package_name: Name recorded on the purchase
        validity_days: Fallback validity per package name

    Returns:
        Expiry timestamp, or None when no validity can be determined
    """
    purchased_at = ensure_aware(purchased_at)

    if package is not None and package.period_num and package.period:
        num = int(package.period_num)
        unit = package.period.strip().lower()
        if num > 0:
            if unit.startswith("day"):
                return purchased_at + timedelta(days=num)
            if unit.startswith("week"):
                return purchased_at + timedelta(weeks=num)
            if unit.startswith("month"):
                return add_months(purchased_at, num)
            if unit.startswith("year"):
                return add_months(purchased_at, num * 12)

    days = validity_days.get(package_name)
    if days:
        return purchased_at + timedelta(days=days)
    return None


class EntitlementResolver:
    """Resolves the active package tier of a user."""

    def __init__(
        self,
        session: AsyncSession,
        validity_days: Mapping[str, int] | None = None,
    ) -> None:
        """
        Initialize entitlement resolver.

        Args:
            session: Async database session
            validity_days: Package name -> validity in days
                (defaults to settings.package_validity_days)
        """
        self.session = session
        self.package_repo = PackageRepository(session)
        self.validity_days = (
            settings.package_validity_days
            if validity_days is None
            else validity_days
        )

    async def resolve_tier(
        self, user_id: int, now: datetime | None = None
    ) -> Entitlement:
        """
        Resolve the tier granted by the user's most recent purchase.

        Args:
            user_id: User ID
            now: Reference time (defaults to current UTC time)

        Returns:
            Entitlement; inactive when there is no purchase, the product
            is unknown or the validity period has passed
        """
        payment = await self.package_repo.get_latest_payment(user_id)
        if payment is None:
            return INACTIVE

        package = await self.package_repo.get_by_name(payment.package_name)
        expires_at = package_expiry(
            payment.purchased_at,
            package,
            payment.package_name,
            self.validity_days,
        )
        if expires_at is None:
            logger.debug(
                "Unknown package on latest purchase",
                extra={
                    "user_id": user_id,
                    "package_name": payment.package_name,
                },
            )
            return INACTIVE

        now = ensure_aware(now or utc_now())
        if now > expires_at:
            return Entitlement(active=False, expires_at=expires_at)

        return Entitlement(
            active=True,
            tier_name=payment.package_name,
            expires_at=expires_at,
        )
