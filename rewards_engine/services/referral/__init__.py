"""
Referral services package.

Contains modular services for referral processing:
- config: Global affiliate settings and per-referrer overrides
- graph_resolver: Upline / downline traversal
- commission_engine: Multi-level commission distribution
- affiliate_wallet: Overview, referral listing and balance transfer
"""

from rewards_engine.services.referral.affiliate_wallet import (
    AffiliateWalletService,
)
from rewards_engine.services.referral.commission_engine import (
    CommissionAward,
    CommissionEngine,
)
from rewards_engine.services.referral.config import (
    AffiliateSettings,
    ReferrerOverride,
    load_affiliate_settings,
    referrer_override_percent,
)
from rewards_engine.services.referral.graph_resolver import (
    ReferralGraphResolver,
)


__all__ = [
    # Configuration
    "AffiliateSettings",
    "ReferrerOverride",
    "load_affiliate_settings",
    "referrer_override_percent",
    # Graph
    "ReferralGraphResolver",
    # Commissions
    "CommissionEngine",
    "CommissionAward",
    # Wallet
    "AffiliateWalletService",
]
