from __future__ import annotations

import hashlib
import logging

import redis
from fastapi import HTTPException, Request

from teamspace.config import settings
from teamspace.redis_client import redis_client

logger = logging.getLogger(__name__)

def _hash(s: str) -> str:
    return hashlib.sha256(s.encode("utf-8")).hexdigest()[:24]

def _client_key(request: Request) -> str:
    return (request.client.host if request.client else "unknown").strip()

# fixed-window limiter using redis INCR + EXPIRE, keyed by route name and client ip
def rate_limit(name: str, limit_per_window: int, window_seconds: int):
    async def _dep(request: Request) -> None:
        if not settings.rate_limit_enabled:
            return

        key = f"rl:{name}:{_hash(_client_key(request))}"

        try:
            pipe = redis_client.pipeline()
            pipe.incr(key)
            pipe.expire(key, window_seconds, nx=True)
            count, _ = pipe.execute()
        except redis.RedisError as e:
            # fail-open if redis is down
            logger.warning("rate limiter unavailable for %s: %s", name, e)
            return

        if int(count) > int(limit_per_window):
            raise HTTPException(status_code=429, detail="rate_limited")

    return _dep
