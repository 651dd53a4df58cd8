"""
Vector Store Tests

Tests for the in-memory and Redis vector stores and the store factory.
Redis is exercised through a mocked redis.asyncio client.

Test Categories:
1. TestInMemoryVectorStore - Put/get/close semantics
2. TestRedisVectorStore - Key layout, serialization and error mapping
3. TestStoreFactory - Settings-driven backend selection
"""

import json
from unittest.mock import AsyncMock, patch

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from semroute.config import Settings
from semroute.errors import KeyNotFoundError, StoreError
from semroute.stores import InMemoryVectorStore, RedisVectorStore, create_store


class TestInMemoryVectorStore:
    @pytest.mark.asyncio
    async def test_put_then_get(self):
        store = InMemoryVectorStore()
        await store.put("hi", [1, 0.5])

        assert await store.get("hi") == [1.0, 0.5]
        assert "hi" in store
        assert len(store) == 1

    @pytest.mark.asyncio
    async def test_put_overwrites(self):
        store = InMemoryVectorStore()
        await store.put("hi", [1.0])
        await store.put("hi", [2.0])

        assert await store.get("hi") == [2.0]

    @pytest.mark.asyncio
    async def test_missing_key(self):
        store = InMemoryVectorStore()

        with pytest.raises(KeyNotFoundError) as exc_info:
            await store.get("nope")
        assert exc_info.value.key == "nope"

    @pytest.mark.asyncio
    async def test_returned_vector_is_a_copy(self):
        store = InMemoryVectorStore()
        await store.put("hi", [1.0, 2.0])

        vector = await store.get("hi")
        vector[0] = 99.0

        assert await store.get("hi") == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_closed_store_rejects_operations(self):
        store = InMemoryVectorStore()
        await store.put("hi", [1.0])
        await store.close()

        with pytest.raises(StoreError, match="closed"):
            await store.get("hi")
        with pytest.raises(StoreError, match="closed"):
            await store.put("hello", [1.0])
        assert len(store) == 0


@pytest.fixture
def mock_redis():
    """Mocked redis.asyncio client."""
    return AsyncMock()


class TestRedisVectorStore:
    @pytest.mark.asyncio
    async def test_put_serializes_json_under_prefixed_key(self, mock_redis):
        store = RedisVectorStore(mock_redis, key_prefix="tenant", ttl_seconds=60)
        await store.put("hi", [1, 0.5])

        mock_redis.set.assert_awaited_once_with(
            "tenant:embedding:hi", json.dumps([1.0, 0.5]), ex=60
        )

    @pytest.mark.asyncio
    async def test_get_parses_json(self, mock_redis):
        mock_redis.get.return_value = "[1.0, 0.5]"
        store = RedisVectorStore(mock_redis)

        assert await store.get("hi") == [1.0, 0.5]
        mock_redis.get.assert_awaited_once_with("semroute:embedding:hi")

    @pytest.mark.asyncio
    async def test_get_decodes_bytes(self, mock_redis):
        mock_redis.get.return_value = b"[0.25]"
        store = RedisVectorStore(mock_redis)

        assert await store.get("hi") == [0.25]

    @pytest.mark.asyncio
    async def test_missing_key(self, mock_redis):
        mock_redis.get.return_value = None
        store = RedisVectorStore(mock_redis)

        with pytest.raises(KeyNotFoundError):
            await store.get("hi")

    @pytest.mark.asyncio
    async def test_corrupt_value(self, mock_redis):
        mock_redis.get.return_value = "not json"
        store = RedisVectorStore(mock_redis)

        with pytest.raises(StoreError, match="corrupt"):
            await store.get("hi")

    @pytest.mark.asyncio
    async def test_write_failure_mapped(self, mock_redis):
        mock_redis.set.side_effect = RedisConnectionError("down")
        store = RedisVectorStore(mock_redis)

        with pytest.raises(StoreError) as exc_info:
            await store.put("hi", [1.0])
        assert isinstance(exc_info.value.__cause__, RedisConnectionError)

    @pytest.mark.asyncio
    async def test_read_failure_mapped(self, mock_redis):
        mock_redis.get.side_effect = RedisConnectionError("down")
        store = RedisVectorStore(mock_redis)

        with pytest.raises(StoreError):
            await store.get("hi")

    @pytest.mark.asyncio
    async def test_close_closes_client(self, mock_redis):
        store = RedisVectorStore(mock_redis)
        await store.close()

        mock_redis.aclose.assert_awaited_once()


class TestStoreFactory:
    def test_memory_backend(self):
        store = create_store(Settings(store_backend="memory"))
        assert isinstance(store, InMemoryVectorStore)

    def test_redis_backend(self):
        settings = Settings(
            store_backend="redis",
            redis_url="redis://cache:6379/1",
            redis_key_prefix="routes",
            redis_ttl_seconds=300,
        )

        with patch("semroute.stores.redis.Redis.from_url") as mock_from_url:
            store = create_store(settings)

        assert isinstance(store, RedisVectorStore)
        mock_from_url.assert_called_once_with(
            "redis://cache:6379/1", decode_responses=True
        )
