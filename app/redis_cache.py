"""
Redis Cache Module for GamerBoy
Caches API payloads (listings, by-ids, rating stats) with graceful degradation:
with no URL configured or an unreachable server every call is a no-op.
"""

import json
import logging
from typing import Any, Optional, Dict

import redis

logger = logging.getLogger("main")

redis_client = None
_cache_stats = {
    "hits": 0,
    "misses": 0,
    "sets": 0,
    "deletes": 0,
}


def init_cache(redis_url: Optional[str]) -> bool:
    """
    Connect to Redis. Returns True when the cache is usable.

    Args:
        redis_url: redis:// URL, or None to disable caching
    """
    global redis_client
    redis_client = None

    if not redis_url:
        logger.info("No Redis URL configured. Cache disabled.")
        return False

    try:
        client = redis.from_url(redis_url, decode_responses=True)
        client.ping()
    except redis.RedisError as e:
        logger.warning(f"Redis cache unavailable at {redis_url}: {e}. Cache will be disabled.")
        return False

    redis_client = client
    logger.info(f"Redis cache initialized at {redis_url}")
    return True


def is_cache_enabled() -> bool:
    """Check if Redis cache is enabled and available"""
    return redis_client is not None


def get_cache_stats() -> Dict:
    """Get cache statistics (hits, misses, sets, deletes)"""
    if is_cache_enabled():
        return {**_cache_stats}
    return {"status": "disabled"}


def reset_cache_stats() -> None:
    """Reset cache statistics"""
    for key in _cache_stats:
        _cache_stats[key] = 0


def make_cache_key(prefix: str, *args, **kwargs) -> str:
    """
    Generate a cache key from request parameters

    Args:
        prefix: Prefix for the cache key (e.g., "games", "ratings:12")
        *args: Positional parts to include in key
        **kwargs: Keyword parts to include in key (sorted by name)

    Returns:
        Cache key string
    """
    key_parts = [prefix]
    key_parts.extend(str(arg) for arg in args)
    for k, v in sorted(kwargs.items()):
        if isinstance(v, (list, tuple)):
            v = ",".join(str(item) for item in v)
        key_parts.append(f"{k}={v}")
    return ":".join(key_parts)


def cache_get(key: str) -> Optional[str]:
    """
    Get a value from cache

    Returns:
        Cached value or None if not found
    """
    if not redis_client:
        return None
    try:
        value = redis_client.get(key)
        if value:
            _cache_stats["hits"] += 1
            logger.debug(f"Cache HIT: {key}")
            return value
        _cache_stats["misses"] += 1
        logger.debug(f"Cache MISS: {key}")
        return None
    except redis.RedisError as e:
        logger.warning(f"Cache get error for {key}: {e}")
        return None


def cache_set(key: str, value: Any, ttl: int = 300) -> bool:
    """
    Set a value in cache with TTL

    Args:
        key: Cache key
        value: Value to cache (str, or JSON-serializable)
        ttl: Time to live in seconds (default: 300 = 5 min)
    """
    if not redis_client:
        return False
    try:
        if not isinstance(value, str):
            value = json.dumps(value)
        redis_client.setex(key, ttl, value)
        _cache_stats["sets"] += 1
        logger.debug(f"Cache SET: {key} (TTL: {ttl}s)")
        return True
    except redis.RedisError as e:
        logger.warning(f"Cache set error for {key}: {e}")
        return False


def cache_delete_pattern(pattern: str) -> int:
    """
    Delete multiple keys matching a pattern

    Args:
        pattern: Redis key pattern (e.g., "ratings:12:*")

    Returns:
        Number of keys deleted
    """
    if not redis_client:
        return 0
    try:
        keys = list(redis_client.scan_iter(match=pattern))
        if keys:
            count = redis_client.delete(*keys)
            _cache_stats["deletes"] += count
            logger.info(f"Cache DELETE: {pattern} ({count} keys)")
            return count
        return 0
    except redis.RedisError as e:
        logger.warning(f"Cache delete pattern error for {pattern}: {e}")
        return 0


def ratings_cache_prefix(game_id: int) -> str:
    return f"ratings:{game_id}"


def invalidate_ratings_cache(game_id: int) -> int:
    """
    Drop every cached rating payload of a game (all fingerprints)
    """
    return cache_delete_pattern(f"{ratings_cache_prefix(game_id)}:*")

