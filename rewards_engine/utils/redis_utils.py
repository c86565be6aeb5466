"""
Redis helpers for the points quota cache.

The client is created here and passed explicitly to QuotaLedger; nothing in
the engine holds a global connection.
"""

import redis.asyncio as redis

from rewards_engine.config.settings import settings


def get_redis_client(db: int | None = None) -> redis.Redis:
    """
    Build an async Redis client from settings.

    Responses are decoded to str, so cached totals come back as "12".

    Args:
        db: Database index override (defaults to settings.redis_db)

    Returns:
        redis.Redis client; the caller closes it with ``aclose()``

    Example:
        >>> client = get_redis_client()
        >>> ledger = QuotaLedger(session, client)
    """
    return redis.Redis(
        host=settings.redis_host,
        port=settings.redis_port,
        password=settings.redis_password,
        db=settings.redis_db if db is None else db,
        decode_responses=True,
    )


def get_redis_url_masked() -> str:
    """Connection URL for log lines, password replaced by ****."""
    auth = ":****@" if settings.redis_password else ""
    return (
        f"redis://{auth}{settings.redis_host}:"
        f"{settings.redis_port}/{settings.redis_db}"
    )
