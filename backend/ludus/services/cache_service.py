"""
Redis caching for activity listings.

What we cache:
  - Paginated, filtered listing responses (JSON-serialized)
  - Key pattern: "activities:list:<sorted query string>"

Invalidation:
  - Any activity create/update, and reviews (they move the rating)
  - TTL as the safety net

Availability is never cached: remaining capacity must be read fresh at
admission time, and the listing payload carries no booking counts.
"""

import json
from typing import Optional
from urllib.parse import urlencode

from redis.exceptions import RedisError

from ludus.core.config import get_settings
from ludus.core.logging import get_logger
from ludus.core.metrics import record_cache_operation
from ludus.infrastructure.redis_client import get_redis

logger = get_logger(__name__)
settings = get_settings()

LIST_KEY_PREFIX = "activities:list:"


def make_activity_list_key(filters: dict) -> str:
    present = {k: v for k, v in sorted(filters.items()) if v is not None and v != ""}
    return LIST_KEY_PREFIX + urlencode(present)


async def get_cached_activities(filters: dict) -> Optional[dict]:
    client = await get_redis()
    if not client:
        return None

    key = make_activity_list_key(filters)
    try:
        data = await client.get(key)
    except RedisError as e:
        logger.error("cache_get_error", key=key, error=str(e))
        return None

    record_cache_operation("get", hit=data is not None)
    if data:
        logger.debug("cache_hit", key=key)
        return json.loads(data)
    logger.debug("cache_miss", key=key)
    return None


async def set_cached_activities(filters: dict, data: dict) -> None:
    client = await get_redis()
    if not client:
        return

    key = make_activity_list_key(filters)
    try:
        await client.setex(key, settings.REDIS_CACHE_TTL, json.dumps(data, default=str))
        logger.debug("cache_set", key=key, ttl=settings.REDIS_CACHE_TTL)
    except RedisError as e:
        logger.error("cache_set_error", key=key, error=str(e))


async def invalidate_activity_cache() -> None:
    """Drop every cached listing page (SCAN over the key prefix)."""
    client = await get_redis()
    if not client:
        return

    try:
        deleted = 0
        async for key in client.scan_iter(match=f"{LIST_KEY_PREFIX}*", count=100):
            await client.delete(key)
            deleted += 1
        logger.info("cache_invalidated", keys_deleted=deleted)
    except RedisError as e:
        logger.error("cache_invalidation_error", error=str(e))


async def get_cache_stats() -> dict:
    client = await get_redis()
    if not client:
        return {"status": "disabled"}

    try:
        info = await client.info("stats")
    except RedisError as e:
        return {"status": "error", "error": str(e)}

    hits = info.get("keyspace_hits", 0)
    misses = info.get("keyspace_misses", 0)
    return {
        "status": "connected",
        "hits": hits,
        "misses": misses,
        "hit_rate": round(hits / max(hits + misses, 1) * 100, 2),
    }
