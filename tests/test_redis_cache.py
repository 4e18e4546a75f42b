"""
Redis Cache Tests - Cocoa Contest Scoring Engine
tests/test_redis_cache.py

Tests for Redis caching of published results including cache hits,
misses, invalidation, and graceful degradation.
"""
import pytest
import redis
from unittest.mock import call, patch, MagicMock
from pydantic import BaseModel

from cocoa_scoring.models.enumerations import EvaluationStage
from cocoa_scoring.services.redis_cache import RedisCache
from cocoa_scoring.services.cache import (
    TTL_RESULTS,
    get_cache,
    invalidate_results,
    reset_cache,
    results_key,
)


class MockModel(BaseModel):
    """Mock Pydantic model for testing."""
    id: str
    name: str


class TestRedisCache:
    """Tests for the RedisCache class."""

    def test_redis_cache_init_from_url(self):
        """Test RedisCache builds its client from the configured URL."""
        with patch('cocoa_scoring.services.redis_cache.redis.from_url') as mock_from_url:
            cache = RedisCache("redis://cache:6379/2")
            mock_from_url.assert_called_once()
            assert mock_from_url.call_args.args[0] == "redis://cache:6379/2"
            assert cache.client is mock_from_url.return_value

    def test_injected_client_used(self):
        """Test an explicit client skips URL construction."""
        client = MagicMock()
        with patch('cocoa_scoring.services.redis_cache.redis.from_url') as mock_from_url:
            cache = RedisCache(client=client)
            mock_from_url.assert_not_called()
        assert cache.client is client

    def test_cache_set_and_get(self):
        """Test setting and getting cached values."""
        client = MagicMock()
        cache = RedisCache(client=client)
        model = MockModel(id="123", name="Test")

        cache.set("test:key", model, 300)
        client.setex.assert_called_once_with("test:key", 300, model.model_dump_json())

        client.get.return_value = model.model_dump_json()
        result = cache.get("test:key", MockModel)
        assert result == model

    def test_zero_ttl_not_cached(self):
        """Test a TTL of zero disables writes."""
        client = MagicMock()
        RedisCache(client=client).set("k", MockModel(id="1", name="n"), 0)
        client.setex.assert_not_called()

    def test_cache_get_miss(self):
        """Test cache miss returns None."""
        client = MagicMock()
        client.get.return_value = None
        assert RedisCache(client=client).get("nonexistent:key", MockModel) is None

    def test_cache_delete(self):
        client = MagicMock()
        RedisCache(client=client).delete("test:key")
        client.delete.assert_called_once_with("test:key")

    def test_cache_delete_pattern(self):
        """Test deleting cache entries by pattern."""
        client = MagicMock()
        client.scan_iter.return_value = ["key:1", "key:2", "key:3"]
        client.delete.return_value = 1

        removed = RedisCache(client=client).delete_pattern("key:*")

        client.scan_iter.assert_called_once_with(match="key:*")
        assert client.delete.call_count == 3
        assert removed == 3


class TestCacheSingleton:
    """Tests for the cache singleton."""

    def teardown_method(self):
        reset_cache()

    def test_get_cache_returns_instance(self):
        with patch('cocoa_scoring.services.cache.RedisCache') as mock_cache_class:
            mock_instance = MagicMock()
            mock_instance.client.ping.return_value = True
            mock_cache_class.return_value = mock_instance

            reset_cache()
            assert get_cache() is mock_instance

    def test_get_cache_returns_none_when_redis_unavailable(self):
        with patch('cocoa_scoring.services.cache.RedisCache') as mock_cache_class:
            mock_cache_class.return_value.client.ping.side_effect = redis.ConnectionError("down")

            reset_cache()
            assert get_cache() is None

    def test_get_cache_singleton_behavior(self):
        with patch('cocoa_scoring.services.cache.RedisCache') as mock_cache_class:
            mock_cache_class.return_value.client.ping.return_value = True

            reset_cache()
            cache1 = get_cache()
            cache2 = get_cache()
            assert cache1 is cache2
            assert mock_cache_class.call_count == 1


class TestResultsInvalidation:
    """Tests for result key helpers and invalidation."""

    def test_results_key_pattern(self):
        assert results_key(EvaluationStage.SENSORY, "c1", 10) == "results:sensory:c1:10"
        assert results_key("final", "c1", 3) == "results:final:c1:3"

    def test_all_contests_key(self):
        assert results_key(EvaluationStage.SENSORY, None, 10) == "results:sensory:_all:10"

    def test_invalidate_single_stage(self):
        cache = MagicMock()
        invalidate_results(cache, "c1", EvaluationStage.FINAL)
        assert cache.delete_pattern.call_args_list == [
            call("results:final:c1:*"),
            call("results:final:_all:*"),
        ]

    def test_invalidate_all_stages(self):
        cache = MagicMock()
        invalidate_results(cache, "c1")
        assert cache.delete_pattern.call_args_list == [
            call("results:*:c1:*"),
            call("results:*:_all:*"),
        ]

    def test_invalidate_without_cache_is_noop(self):
        invalidate_results(None, "c1")

    def test_invalidation_failure_logged_not_raised(self):
        cache = MagicMock()
        cache.delete_pattern.side_effect = redis.ConnectionError("gone")
        invalidate_results(cache, "c1", EvaluationStage.SENSORY)

    def test_ttl_results_default(self):
        """Published results are cached for 5 minutes by default."""
        assert TTL_RESULTS == 300
