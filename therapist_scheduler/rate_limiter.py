"""
Per-caller request quotas for provider-facing routes.

Each caller gets a fixed window counter in Redis, so the quota is shared by
every worker process. When Redis cannot be reached the routes fail closed.
"""

import logging
from typing import Callable, Optional

import redis
from fastapi import HTTPException, Request, status

from .config import REDIS_URL

logger = logging.getLogger(__name__)

_redis_client: Optional[redis.Redis] = None


def get_redis_client() -> redis.Redis:
    """Shared Redis connection, created on first use"""
    global _redis_client

    if _redis_client is None:
        client = redis.from_url(
            REDIS_URL,
            decode_responses=True,
            socket_connect_timeout=5,
            socket_timeout=5,
        )
        client.ping()
        logger.info("Redis connected successfully")
        _redis_client = client

    return _redis_client


def caller_key(request: Request, key_prefix: str, use_ip: bool = True) -> str:
    if not use_ip:
        return f"{key_prefix}:global"

    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        caller = forwarded.split(",")[0].strip()
    else:
        caller = request.client.host if request.client else "unknown"
    return f"{key_prefix}:{caller}"


def consume(client: redis.Redis, key: str, limit: int, window_seconds: int) -> tuple[bool, int]:
    """
    Count one request against the caller's window.

    Returns:
        Tuple of (is_allowed, retry_after_seconds)
    """
    count = client.incr(key)
    if count == 1:
        client.expire(key, window_seconds)

    if count <= limit:
        return True, 0

    ttl = client.ttl(key)
    if ttl is None or ttl < 0:
        # Counter without expiry would block the caller forever
        client.expire(key, window_seconds)
        ttl = window_seconds
    return False, int(ttl)


def create_rate_limiter(
    limit: int,
    window_seconds: int,
    key_prefix: str = "rate_limit",
    use_ip: bool = True,
    client_factory: Callable[[], redis.Redis] = get_redis_client,
):
    """
    Build a FastAPI dependency enforcing `limit` requests per `window_seconds`.

    Example usage:
        rate_limit_geocoding = create_rate_limiter(limit=60, window_seconds=60, key_prefix="geocode")

        @router.post("/resolve")
        async def resolve(data: ResolveAddressRequest, _: None = Depends(rate_limit_geocoding)):
            ...
    """

    async def rate_limiter(request: Request):
        key = caller_key(request, key_prefix, use_ip)
        try:
            allowed, retry_after = consume(client_factory(), key, limit, window_seconds)
        except redis.RedisError as e:
            logger.error(f"❌ Rate limiting unavailable for {key}: {e}")
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Rate limiting service temporarily unavailable",
            ) from e

        if not allowed:
            logger.warning(f"🚫 Rate limit exceeded for {key} ({limit}/{window_seconds}s)")
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail={
                    "success": False,
                    "error": f"Rate limit exceeded. Maximum {limit} requests per {window_seconds} seconds.",
                    "errorType": "rate_limited",
                    "retryAfter": retry_after,
                },
                headers={"Retry-After": str(retry_after)},
            )

    return rate_limiter
