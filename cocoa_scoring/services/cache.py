"""
Cache Service Singleton - Cocoa Contest Scoring Engine
cocoa_scoring/services/cache.py

Provides a singleton Redis cache instance plus the key helpers for published
results. Gracefully handles Redis unavailability.
"""
import redis
import structlog
from typing import Optional

from cocoa_scoring.config import settings
from cocoa_scoring.models.enumerations import EvaluationStage
from cocoa_scoring.services.redis_cache import RedisCache

logger = structlog.get_logger(__name__)

TTL_RESULTS = settings.CACHE_TTL_RESULTS   # 5 minutes by default

# Key segment used in place of a contest id for the all-contests read
ALL_CONTESTS = "_all"

# Singleton instance
_cache: Optional[RedisCache] = None


def get_cache() -> Optional[RedisCache]:
    """
    Get or create Redis cache instance.

    Returns:
        RedisCache instance if Redis is available, None otherwise.

    Note:
        Returns None if Redis is unavailable, allowing the application
        to continue functioning without caching (graceful degradation).
    """
    global _cache
    if _cache is None:
        try:
            _cache = RedisCache()
            _cache.client.ping()  # Test connection
        except (redis.RedisError, ConnectionError) as e:
            logger.warning("redis_unavailable", error=str(e))
            _cache = None
    return _cache


def reset_cache() -> None:
    """
    Reset the cache singleton.

    Useful for testing or when Redis connection needs to be re-established.
    """
    global _cache
    _cache = None


def results_key(stage: EvaluationStage, contest_id: Optional[str], limit: int) -> str:
    return f"results:{EvaluationStage(stage).value}:{contest_id or ALL_CONTESTS}:{limit}"


def invalidate_results(cache: Optional[RedisCache], contest_id: str, stage: Optional[EvaluationStage] = None) -> None:
    """Drop cached top-N pages for a contest (one stage or all) and the all-contests pages."""
    if cache is None:
        return
    stage_part = EvaluationStage(stage).value if stage else "*"
    try:
        cache.delete_pattern(f"results:{stage_part}:{contest_id}:*")
        cache.delete_pattern(f"results:{stage_part}:{ALL_CONTESTS}:*")
    except redis.RedisError as e:
        logger.warning("results_cache_invalidation_failed", contest_id=contest_id, error=str(e))
