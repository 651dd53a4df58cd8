"""
Redis Vector Store

Redis-backed implementation of VectorStore. Ideal for:
- Sharing one embedded corpus between several router processes
- Keeping embeddings across restarts (subject to Redis persistence)

Uses redis.asyncio for async operations.

Key pattern:
- {prefix}:embedding:{utterance text} -> JSON-encoded list of floats
"""

from __future__ import annotations

import json
import logging
from typing import Sequence

from redis.asyncio import Redis
from redis.exceptions import RedisError

from semroute.errors import KeyNotFoundError, StoreError
from semroute.stores.base import VectorStore

logger = logging.getLogger(__name__)


class RedisVectorStore(VectorStore):
    """
    Redis-based vector store with optional TTL.

    The client should be created with ``decode_responses=True``;
    raw bytes are decoded as UTF-8 otherwise.
    """

    def __init__(
        self,
        redis: Redis,
        key_prefix: str = "semroute",
        ttl_seconds: int | None = None,
    ) -> None:
        """
        Initialize Redis vector store.

        Args:
            redis: Redis async client
            key_prefix: Prefix for all keys (multi-tenant isolation)
            ttl_seconds: Expiry applied to every write, None for no expiry
        """
        self._redis = redis
        self._prefix = key_prefix
        self._ttl = ttl_seconds

    @classmethod
    def from_url(
        cls,
        url: str,
        key_prefix: str = "semroute",
        ttl_seconds: int | None = None,
    ) -> RedisVectorStore:
        """Create a store with its own client from a redis:// URL."""
        return cls(
            Redis.from_url(url, decode_responses=True),
            key_prefix=key_prefix,
            ttl_seconds=ttl_seconds,
        )

    def _key(self, key: str) -> str:
        """Key for an utterance embedding."""
        return f"{self._prefix}:embedding:{key}"

    async def put(self, key: str, vector: Sequence[float]) -> None:
        payload = json.dumps([float(x) for x in vector])
        try:
            await self._redis.set(self._key(key), payload, ex=self._ttl)
        except RedisError as e:
            logger.error(f"Redis write failed for {key!r}: {e}")
            raise StoreError(key) from e

    async def get(self, key: str) -> list[float]:
        try:
            data = await self._redis.get(self._key(key))
        except RedisError as e:
            logger.error(f"Redis read failed for {key!r}: {e}")
            raise StoreError(key, f"error reading embedding: {key!r}") from e
        if data is None:
            raise KeyNotFoundError(key)
        if isinstance(data, bytes):
            data = data.decode("utf-8")
        try:
            return [float(x) for x in json.loads(data)]
        except (ValueError, TypeError) as e:
            raise StoreError(key, f"corrupt embedding stored for {key!r}") from e

    async def close(self) -> None:
        await self._redis.aclose()
