"""
db/redis_client.py
-------------------
redis-py client singleton plus the rate-limit counter helper.

Key schema:

  rl:{tier}:{identity}:{window_start}
       Type : String (integer counter)
       TTL  : window length of the tier (config.RATE_LIMIT_TIERS)
       Value: requests seen in the current fixed window

Environment variables (set in config.py):
    REDIS_HOST        default: localhost
    REDIS_PORT        default: 6379
    REDIS_DB          default: 0
    REDIS_PASSWORD    default: ""  (empty = no auth)
"""

from __future__ import annotations

import time
from typing import Any

import redis

import config

# Initialised lazily on first call to get_redis()
_client: redis.Redis | None = None


def get_redis() -> redis.Redis:
    """Return the singleton Redis client, creating it on first call."""
    global _client
    if _client is None:
        kwargs: dict[str, Any] = {
            "host":             config.REDIS_HOST,
            "port":             config.REDIS_PORT,
            "db":               config.REDIS_DB,
            "decode_responses": True,   # return str, not bytes
        }
        if config.REDIS_PASSWORD:
            kwargs["password"] = config.REDIS_PASSWORD
        _client = redis.Redis(**kwargs)
    return _client


# ── Rate-limit counters ────────────────────────────────────────────────────────

def _rl_key(tier: str, identity: str, window_start: int) -> str:
    return f"rl:{tier}:{identity}:{window_start}"


def hit_rate_limit(
    tier: str,
    identity: str,
    window_seconds: int,
    now: float | None = None,
) -> tuple[int, int]:
    """
    Count one request in the current fixed window.

    INCR and EXPIRE go through one pipeline (single round-trip).

    Returns:
        (count including this request, unix time the window resets)
    """
    ts = int(time.time() if now is None else now)
    window_start = ts - ts % window_seconds
    key = _rl_key(tier, identity, window_start)

    pipe = get_redis().pipeline()
    pipe.incr(key)
    pipe.expire(key, window_seconds)
    count, _ = pipe.execute()
    return int(count), window_start + window_seconds
