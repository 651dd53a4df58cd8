# Vector Store Layer
# Pluggable embedding persistence for the router
#
# This module provides:
# - The VectorStore port (ABC)
# - An in-memory implementation for development/testing
# - A Redis implementation for shared persistence
# - Factory for configuration-based adapter selection

from semroute.stores.base import VectorStore
from semroute.stores.memory import InMemoryVectorStore
from semroute.stores.redis import RedisVectorStore
from semroute.stores.factory import create_store

__all__ = [
    "VectorStore",
    "InMemoryVectorStore",
    "RedisVectorStore",
    "create_store",
]
