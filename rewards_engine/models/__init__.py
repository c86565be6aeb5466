"""
Database models.

Exports all SQLAlchemy models for easy imports.
"""

from rewards_engine.models.base import Base

# Core Models
from rewards_engine.models.user import User
from rewards_engine.models.user_affiliate import UserAffiliate

# Points Models
from rewards_engine.models.points_log import PointsLog

# Package Models
from rewards_engine.models.package import Package, PackagePayment

# System Models
from rewards_engine.models.system_option import SystemOption

__all__ = [
    # Base
    "Base",
    # Core Models
    "User",
    "UserAffiliate",
    # Points Models
    "PointsLog",
    # Package Models
    "Package",
    "PackagePayment",
    # System Models
    "SystemOption",
]
