"""
Service base and the transaction decorator.

Every engine that mutates balances runs its unit of work through
``@transaction`` so that a failure never leaves a log row or a balance
change behind.
"""

import functools
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from rewards_engine.utils.exceptions import StoreError


R = TypeVar("R")


class BaseService:
    """Holds the request's session and a logger tagged with the service name."""

    def __init__(self, session: AsyncSession) -> None:
        """
        Args:
            session: Async database session owned by the caller
        """
        self.session = session
        self.logger = logger.bind(service=type(self).__name__)

    async def commit(self) -> None:
        """Commit the session's transaction."""
        await self.session.commit()

    async def rollback(self) -> None:
        """
        Roll the session back.

        A rollback that itself fails is only logged: the caller has to see
        the error that triggered it.
        """
        try:
            await self.session.rollback()
        except SQLAlchemyError as e:
            self.logger.error(
                "Rollback failed",
                extra={"error": str(e)},
                exc_info=True,
            )


def transaction(
    func: Callable[..., Awaitable[R]],
) -> Callable[..., Awaitable[R]]:
    """
    Run a service coroutine as one database transaction.

    Returning (zero-award outcomes included) commits. Raising rolls back;
    SQLAlchemy errors come out as retryable ``StoreError``, anything else
    is re-raised unchanged.

    Usage:
        @transaction
        async def transfer_to_wallet(self, user_id, amount):
            ...
    """
    @functools.wraps(func)
    async def wrapper(self: BaseService, *args: Any, **kwargs: Any) -> R:
        try:
            result = await func(self, *args, **kwargs)
        except SQLAlchemyError as e:
            await self.rollback()
            self.logger.error(
                f"{func.__name__} rolled back on store error",
                extra={"operation": func.__name__, "error": str(e)},
                exc_info=True,
            )
            raise StoreError(str(e)) from e
        except Exception:
            await self.rollback()
            raise

        try:
            await self.commit()
        except SQLAlchemyError as e:
            await self.rollback()
            self.logger.error(
                f"{func.__name__} commit failed",
                extra={"operation": func.__name__, "error": str(e)},
                exc_info=True,
            )
            raise StoreError(str(e)) from e
        return result

    return wrapper
