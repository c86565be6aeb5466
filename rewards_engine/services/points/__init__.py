"""
Points services package.

Contains the points economy:
- config: Per-request rule table and daily ceilings
- quota_ledger: Cache-backed daily totals
- accrual_engine: Idempotent, quota-bounded crediting
- points_wallet: Overview, history and points-to-wallet transfer
"""

from rewards_engine.services.points.accrual_engine import (
    AccrualResult,
    PointsAccrualEngine,
)
from rewards_engine.services.points.config import (
    AccrualContext,
    is_repeatable,
    normalize_action_type,
)
from rewards_engine.services.points.points_wallet import (
    PointsTransfer,
    PointsWalletService,
)
from rewards_engine.services.points.quota_ledger import QuotaLedger, WindowTotal


__all__ = [
    # Configuration
    "AccrualContext",
    "normalize_action_type",
    "is_repeatable",
    # Quota
    "QuotaLedger",
    "WindowTotal",
    # Accrual
    "PointsAccrualEngine",
    "AccrualResult",
    # Wallet
    "PointsWalletService",
    "PointsTransfer",
]
