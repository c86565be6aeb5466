"""
Exception types for the rewards engine.

Zero-award outcomes (duplicate action, exhausted quota) are results with a
reason code, not exceptions. Everything raised here is a real failure.
"""


class RewardsError(Exception):
    """Base class for rewards engine failures."""
    pass


class ConfigurationError(RewardsError):
    """Unknown action type, missing point value or missing quota ceiling."""
    pass


class UserNotFoundError(RewardsError):
    """Raised when the user row to credit does not exist."""

    def __init__(self, user_id: int):
        self.user_id = user_id
        super().__init__(f"User {user_id} not found")


class StoreError(RewardsError):
    """
    Database failure inside a transaction.

    The transaction has been rolled back in full; the call may be retried.
    """

    retryable = True


class TransferDisabledError(RewardsError):
    """Raised when a balance transfer is switched off in system options."""
    pass


class InsufficientBalanceError(RewardsError):
    """Raised when a transfer exceeds the available balance."""

    def __init__(self, requested, available):
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient balance: requested {requested}, available {available}"
        )
