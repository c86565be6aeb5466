"""
Quota ledger.

Per-user running total of points earned in the current accounting window,
cached in Redis and rebuilt from the points log on a miss.

The log is the system of record. The cache is written only after the
transaction it mirrors has committed, and any cache failure degrades to
recomputation from the log.
"""

import math
from dataclasses import dataclass
from datetime import datetime, tzinfo
from typing import Any, Literal

from loguru import logger
from redis.exceptions import RedisError
from sqlalchemy.ext.asyncio import AsyncSession

from rewards_engine.config.constants import POINTS_WINDOW_CACHE_KEY
from rewards_engine.config.settings import settings
from rewards_engine.repositories.points_log_repository import (
    PointsLogRepository,
)
from rewards_engine.utils.datetime_utils import (
    accounting_window,
    utc_now,
    window_date,
)


TotalSource = Literal["cache", "reconstructed"]

# INCRBY only when the key is present; nil otherwise
_INCR_IF_EXISTS = """
if redis.call('EXISTS', KEYS[1]) == 1 then
    return redis.call('INCRBY', KEYS[1], ARGV[1])
end
return false
"""


@dataclass(frozen=True)
class WindowTotal:
    """Points earned in the current window and where the figure came from."""

    total: int
    source: TotalSource


class QuotaLedger:
    """Cache-backed daily points totals."""

    def __init__(
        self,
        session: AsyncSession,
        redis_client: Any | None = None,
        tz: tzinfo | None = None,
    ) -> None:
        """
        Initialize quota ledger.

        Args:
            session: Async database session (reads the points log)
            redis_client: Optional async Redis client; without one every
                read is rebuilt from the log
            tz: Timezone of the accounting window
                (defaults to settings.window_timezone)
        """
        self.session = session
        self.redis_client = redis_client
        self.tz = tz or settings.window_timezone
        self.points_log_repo = PointsLogRepository(session)

    def window(self, now: datetime | None = None) -> tuple[datetime, datetime]:
        """Current accounting window as (start, end) in UTC."""
        return accounting_window(now or utc_now(), self.tz)

    def cache_key(self, user_id: int, now: datetime | None = None) -> str:
        """Redis key holding the user's total for the window of ``now``."""
        day = window_date(now or utc_now(), self.tz)
        return POINTS_WINDOW_CACHE_KEY.format(
            user_id=user_id, window_date=day.strftime("%Y%m%d")
        )

    def _ttl_seconds(self, now: datetime) -> int:
        """Seconds until the window ends (at least one)."""
        _, end = self.window(now)
        return max(1, math.ceil((end - now).total_seconds()))

    async def sum_from_log(self, user_id: int, now: datetime | None = None) -> int:
        """
        Sum the points log over the window, ignoring the cache.

        Args:
            user_id: User ID
            now: Reference time

        Returns:
            Points earned in the window
        """
        start, end = self.window(now)
        return await self.points_log_repo.sum_points(user_id, start, end)

    async def get_window_total(
        self, user_id: int, now: datetime | None = None
    ) -> WindowTotal:
        """
        Get points earned in the current window.

        Cache hit returns without touching the database. On a miss (or an
        unreachable cache) the total is summed from the log and the cache
        is repopulated with a TTL ending at the window boundary.

        Args:
            user_id: User ID
            now: Reference time (defaults to current UTC time)

        Returns:
            WindowTotal with source "cache" or "reconstructed"
        """
        now = now or utc_now()
        key = self.cache_key(user_id, now)

        if self.redis_client is not None:
            try:
                cached = await self.redis_client.get(key)
                if cached is not None:
                    return WindowTotal(total=int(cached), source="cache")
            except (RedisError, ValueError) as e:
                logger.warning(
                    "Points cache read failed, rebuilding from log",
                    extra={"user_id": user_id, "key": key, "error": str(e)},
                )

        total = await self.sum_from_log(user_id, now)
        await self._store(key, total, now, only_if_absent=True)
        return WindowTotal(total=total, source="reconstructed")

    async def increment(
        self, user_id: int, amount: int, now: datetime | None = None
    ) -> None:
        """
        Mirror a committed credit into the cache.

        Adds ``amount`` atomically when the entry exists. When it does not,
        the total is rebuilt from the log, which already holds the committed
        row, so nothing is added on top. A read transaction opened by that
        rebuild on an idle session is ended here. Never raises.

        Args:
            user_id: User ID
            amount: Points just committed
            now: Reference time (defaults to current UTC time)
        """
        if self.redis_client is None or amount <= 0:
            return

        now = now or utc_now()
        key = self.cache_key(user_id, now)

        try:
            new_total = await self.redis_client.eval(
                _INCR_IF_EXISTS, 1, key, amount
            )
            if new_total is not None:
                logger.debug(
                    "Points cache incremented",
                    extra={"user_id": user_id, "amount": amount, "total": new_total},
                )
                return

            idle = not self.session.in_transaction()
            total = await self.sum_from_log(user_id, now)
            if idle:
                await self.session.commit()
            await self._store(key, total, now, only_if_absent=False)
        except Exception as e:
            # Log stays authoritative; next read rebuilds
            logger.warning(
                "Points cache increment skipped",
                extra={
                    "user_id": user_id,
                    "amount": amount,
                    "key": key,
                    "error": str(e),
                },
            )

    async def reconstruct(
        self, user_id: int, now: datetime | None = None
    ) -> int:
        """
        Rebuild the user's entry from the log, overwriting the cache.

        Args:
            user_id: User ID
            now: Reference time (defaults to current UTC time)

        Returns:
            Points earned in the window according to the log
        """
        now = now or utc_now()
        total = await self.sum_from_log(user_id, now)
        await self._store(self.cache_key(user_id, now), total, now, only_if_absent=False)
        logger.info(
            "Points cache rebuilt",
            extra={"user_id": user_id, "total": total},
        )
        return total

    async def _store(
        self, key: str, total: int, now: datetime, only_if_absent: bool
    ) -> None:
        """Write a total with the window TTL; failures are logged only."""
        if self.redis_client is None:
            return
        try:
            await self.redis_client.set(
                key, total, ex=self._ttl_seconds(now), nx=only_if_absent
            )
        except RedisError as e:
            logger.warning(
                "Points cache write failed",
                extra={"key": key, "error": str(e)},
            )
