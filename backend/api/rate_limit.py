"""
api/rate_limit.py
-----------------
Per-user fixed-window rate limiting backed by Redis.

Tiers (config.RATE_LIMIT_TIERS):
    auth      5 / hour
    strict    5 / minute
    standard  30 / minute
    relaxed   100 / minute

Off unless RATE_LIMIT_ENABLED=true. If Redis is unreachable the request is
let through and a warning is logged.

Usage:
    @router.post("/x", dependencies=[Depends(rate_limited("standard"))])
"""
from __future__ import annotations

import logging
import time
from typing import Callable

import redis
from fastapi import Depends, HTTPException

import config
from api.deps import get_current_user
from db.redis_client import hit_rate_limit

logger = logging.getLogger(__name__)


def rate_limited(tier: str) -> Callable[..., None]:
    """Build a dependency enforcing `tier` for the calling user."""
    if tier not in config.RATE_LIMIT_TIERS:
        raise ValueError(f"Unknown rate-limit tier {tier!r}")

    def _check(user_id: str = Depends(get_current_user)) -> None:
        if not config.RATE_LIMIT_ENABLED:
            return
        limit, window = config.RATE_LIMIT_TIERS[tier]
        try:
            count, reset = hit_rate_limit(tier, user_id, window)
        except redis.RedisError as exc:
            logger.warning("rate limit check skipped (%s): %s", tier, exc)
            return

        if count > limit:
            raise HTTPException(
                status_code=429,
                detail="Too many requests",
                headers={
                    "X-RateLimit-Limit":     str(limit),
                    "X-RateLimit-Remaining": "0",
                    "X-RateLimit-Reset":     str(reset),
                    "Retry-After":           str(max(0, reset - int(time.time()))),
                },
            )

    return _check
