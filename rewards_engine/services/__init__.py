"""
Services package.

Engines of the rewards and referral economy.
"""

from rewards_engine.services.entitlement_service import (
    Entitlement,
    EntitlementResolver,
)
from rewards_engine.services.points import (
    AccrualContext,
    AccrualResult,
    PointsAccrualEngine,
    PointsWalletService,
    QuotaLedger,
)
from rewards_engine.services.referral import (
    AffiliateWalletService,
    CommissionAward,
    CommissionEngine,
    ReferralGraphResolver,
)


__all__ = [
    "Entitlement",
    "EntitlementResolver",
    "AccrualContext",
    "AccrualResult",
    "PointsAccrualEngine",
    "PointsWalletService",
    "QuotaLedger",
    "AffiliateWalletService",
    "CommissionAward",
    "CommissionEngine",
    "ReferralGraphResolver",
]
