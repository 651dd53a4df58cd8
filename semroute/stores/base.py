"""
Vector Store Port

Abstract contract for persisting an embedding under a text key and reading
it back. Keys are utterance texts.

Writes happen only during router construction, one at a time. Reads happen
on every match and may be concurrent, so implementations must be safe for
concurrent reads.
"""

from abc import ABC, abstractmethod
from typing import Sequence


class VectorStore(ABC):
    """Keyed storage for embedding vectors."""

    @abstractmethod
    async def put(self, key: str, vector: Sequence[float]) -> None:
        """
        Store a vector under a key, replacing any previous value.

        Raises:
            StoreError: If the backend write fails
        """
        ...

    @abstractmethod
    async def get(self, key: str) -> list[float]:
        """
        Read the vector stored under a key.

        Raises:
            KeyNotFoundError: If nothing is stored under the key
            StoreError: If the backend read fails
        """
        ...

    async def close(self) -> None:
        """Release backend resources. The router never calls this."""
        return None
