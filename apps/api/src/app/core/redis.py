"""
Redis Configuration

Async Redis client used for the session deny-list and rate limiting.
When Redis is unavailable, revocations are kept in process memory.
"""

import logging
import time

from redis.asyncio import Redis, from_url

from app.core.config import settings

logger = logging.getLogger(__name__)

# Redis client instance
redis_client: Redis | None = None

REVOKED_TOKEN_PREFIX = "auth:revoked:"

# In-memory fallback: {jti: expires_at_epoch}
_revoked_tokens: dict[str, float] = {}


async def init_redis() -> Redis:
    """
    Initialize Redis connection.

    Call this on application startup.
    """
    global redis_client
    redis_client = from_url(
        settings.redis_url,
        encoding="utf-8",
        decode_responses=True,
    )
    await redis_client.ping()
    return redis_client


async def get_redis() -> Redis | None:
    """
    Get Redis client instance.

    Returns None if Redis is not available.
    """
    return redis_client


def is_redis_available() -> bool:
    """Check if Redis client is initialized and available."""
    return redis_client is not None


async def close_redis() -> None:
    """Close Redis connection."""
    global redis_client
    if redis_client:
        await redis_client.aclose()
        redis_client = None


async def revoke_token(token_id: str, ttl_seconds: int) -> None:
    """
    Add a token id to the deny-list until the token would have expired.

    Args:
        token_id: The ``jti`` claim of the token
        ttl_seconds: Remaining lifetime of the token
    """
    ttl_seconds = max(int(ttl_seconds), 1)

    if redis_client is not None:
        try:
            await redis_client.set(f"{REVOKED_TOKEN_PREFIX}{token_id}", "1", ex=ttl_seconds)
            return
        except Exception as e:
            logger.warning(f"Redis unavailable for token revocation, using memory: {e}")

    _revoked_tokens[token_id] = time.time() + ttl_seconds


async def is_token_revoked(token_id: str | None) -> bool:
    """Return True if the token id has been revoked by a sign-out."""
    if not token_id:
        return False

    if redis_client is not None:
        try:
            return bool(await redis_client.exists(f"{REVOKED_TOKEN_PREFIX}{token_id}"))
        except Exception as e:
            logger.warning(f"Redis revocation lookup failed, using memory: {e}")

    expires_at = _revoked_tokens.get(token_id)
    if expires_at is None:
        return False
    if expires_at < time.time():
        _revoked_tokens.pop(token_id, None)
        return False
    return True
