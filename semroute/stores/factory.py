"""
Vector Store Factory

Selects the store adapter from settings.

Supported backends:
- memory: In-process dict (development/testing, no persistence)
- redis: Redis via redis.asyncio (shared, persistent)
"""

import logging

from semroute.config import Settings
from semroute.stores.base import VectorStore
from semroute.stores.memory import InMemoryVectorStore
from semroute.stores.redis import RedisVectorStore

logger = logging.getLogger(__name__)


def create_store(settings: Settings) -> VectorStore:
    """
    Create the vector store configured by ``settings.store_backend``.

    Raises:
        ValueError: If the backend name is unknown
    """
    backend = settings.store_backend
    if backend == "memory":
        logger.debug("Using in-memory vector store")
        return InMemoryVectorStore()
    if backend == "redis":
        logger.debug(f"Using Redis vector store (prefix={settings.redis_key_prefix})")
        return RedisVectorStore.from_url(
            settings.redis_url,
            key_prefix=settings.redis_key_prefix,
            ttl_seconds=settings.redis_ttl_seconds,
        )
    raise ValueError(f"Unknown store backend: {backend}")
