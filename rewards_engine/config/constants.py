"""
Application constants.

Centralized constants for the rewards and referral engines.
"""

from decimal import Decimal

# ========================================================================
# POINTS
# ========================================================================

# Canonical action types
ACTION_POST_CREATE = "post_create"
ACTION_POST_VIEW = "post_view"
ACTION_POST_COMMENT = "post_comment"
ACTION_REACTION = "reaction"
ACTION_FOLLOW = "follow"
ACTION_REFER = "refer"

# Legacy names still sent by older handlers
ACTION_ALIASES = {
    "post": ACTION_POST_CREATE,
    "comment": ACTION_POST_COMMENT,
    "post_like": ACTION_REACTION,
    "post_reaction": ACTION_REACTION,
    "posts_reactions": ACTION_REACTION,
}

# Credited on every occurrence, never deduplicated
REPEATABLE_ACTIONS = frozenset({ACTION_POST_VIEW})

# Labels for the points history
ACTION_LABELS = {
    ACTION_POST_VIEW: "Post View",
    ACTION_POST_COMMENT: "Comment",
    ACTION_REACTION: "Reaction",
    ACTION_FOLLOW: "Follow",
    ACTION_POST_CREATE: "Added Post",
    ACTION_REFER: "Referral",
}

DEFAULT_DAILY_POINTS_LIMIT = 1000

# Redis key for the per-window running total: user id, window date
POINTS_WINDOW_CACHE_KEY = "user:{user_id}:points24h:{window_date}"

# Reason codes for zero-award outcomes
REASON_DUPLICATE = "duplicate"
REASON_DAILY_LIMIT = "daily_limit_reached"

# Points history paging
HISTORY_MAX_PAGE_SIZE = 100
HISTORY_SORT_COLUMNS = frozenset({"time", "points", "node_id"})

# ========================================================================
# PACKAGES
# ========================================================================

# Plans created before packages carried their own period
LEGACY_PACKAGE_VALIDITY_DAYS = {
    "GADA VIP": 30,
    "GADA VVIP": 365,
}

# ========================================================================
# AFFILIATES
# ========================================================================

HARD_MAX_AFFILIATE_LEVELS = 5
MONEY_QUANT = Decimal("0.01")

REFERRALS_MAX_PAGE_SIZE = 100

# system_options keys
OPTION_AFFILIATES_ENABLED = "affiliates_enabled"
OPTION_AFFILIATES_LEVELS = "affiliates_levels"
OPTION_AFFILIATES_TYPE = "affiliate_type"
OPTION_AFFILIATES_MIN_WITHDRAWAL = "affiliates_min_withdrawal"
OPTION_AFFILIATES_TRANSFER_ENABLED = "affiliates_money_transfer_enabled"
OPTION_AFFILIATES_WITHDRAW_ENABLED = "affiliates_money_withdraw_enabled"
OPTION_POINTS_TRANSFER_ENABLED = "points_money_transfer_enabled"
OPTION_POINTS_PER_CURRENCY = "points_per_currency"

# Level N percentage key; level 1 has no suffix
AFFILIATE_PERCENT_OPTIONS = (
    "affiliates_percentage",
    "affiliates_percentage_2",
    "affiliates_percentage_3",
    "affiliates_percentage_4",
    "affiliates_percentage_5",
)

DEFAULT_POINTS_PER_CURRENCY = 10
