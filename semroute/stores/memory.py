"""
In-Memory Vector Store

Process-local dict of embeddings with no persistence. Suitable for
development, tests and single-process deployments where the router is
rebuilt at every startup anyway.

The store is thread-safe using threading.Lock.
"""

import threading
from typing import Sequence

from semroute.errors import KeyNotFoundError, StoreError
from semroute.stores.base import VectorStore


class InMemoryVectorStore(VectorStore):
    """
    Thread-safe in-memory vector store.

    Vectors are copied into tuples on write and returned as fresh lists on
    read, so callers can never mutate stored state.

    Example:
        store = InMemoryVectorStore()
        await store.put("hello", [0.1, 0.2])
        vector = await store.get("hello")
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._vectors: dict[str, tuple[float, ...]] | None = {}

    async def put(self, key: str, vector: Sequence[float]) -> None:
        with self._lock:
            if self._vectors is None:
                raise StoreError(key, "store is closed")
            self._vectors[key] = tuple(float(x) for x in vector)

    async def get(self, key: str) -> list[float]:
        with self._lock:
            if self._vectors is None:
                raise StoreError(key, "store is closed")
            vector = self._vectors.get(key)
        if vector is None:
            raise KeyNotFoundError(key)
        return list(vector)

    async def close(self) -> None:
        with self._lock:
            self._vectors = None

    def __len__(self) -> int:
        with self._lock:
            return len(self._vectors) if self._vectors is not None else 0

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return self._vectors is not None and key in self._vectors
