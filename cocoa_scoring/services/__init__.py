"""
Services module for the Cocoa Contest Scoring Engine.
"""

from cocoa_scoring.services.cache import get_cache, reset_cache
from cocoa_scoring.services.redis_cache import RedisCache
from cocoa_scoring.services.snowflake import get_snowflake_connection

__all__ = [
    "get_cache",
    "reset_cache",
    "RedisCache",
    "get_snowflake_connection",
]
