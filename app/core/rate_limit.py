"""Redis-backed lightweight rate-limiting helpers."""

from __future__ import annotations

import logging
import time

import redis
from fastapi import HTTPException, Request, status

from app.config import get_settings

logger = logging.getLogger(__name__)


def _get_client() -> redis.Redis:
    return redis.Redis.from_url(get_settings().REDIS_URL, decode_responses=True)


def enforce_rate_limit(key: str, limit: int, window_seconds: int) -> None:
    """Raise 429 when key exceeds limit inside time window."""
    if limit <= 0 or not get_settings().REDIS_URL:
        return

    now = int(time.time())
    window_key = f"rl:{key}:{now // window_seconds}"

    try:
        client = _get_client()
        count = client.incr(window_key)
        if count == 1:
            client.expire(window_key, window_seconds)
    except redis.RedisError as exc:
        # fail-open: donations must not depend on redis
        logger.warning("Rate limiter unavailable: %s", exc)
        return

    if count > limit:
        raise HTTPException(status_code=status.HTTP_429_TOO_MANY_REQUESTS, detail="Rate limit exceeded")


def payment_rate_limit(request: Request) -> None:
    """Per-client limit for donor-facing payment endpoints."""
    settings = get_settings()
    client_ip = request.client.host if request.client else "unknown"
    enforce_rate_limit(
        f"payments:{request.url.path}:{client_ip}",
        limit=settings.PAYMENT_RATE_LIMIT,
        window_seconds=settings.PAYMENT_RATE_WINDOW_SECONDS,
    )
