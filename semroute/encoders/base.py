"""
Encoder Port

Abstract contract for turning text into a fixed-length embedding vector.
The router depends only on this interface; concrete backends (local ONNX
model, hosted API, local model server) are injected.

Thread-safety: implementations must allow concurrent encode() calls.
"""

from abc import ABC, abstractmethod


class Encoder(ABC):
    """
    Text-to-vector encoder.

    Attributes:
        name: Identifier of the backend model, reported in route info
    """

    name: str = "encoder"

    @abstractmethod
    async def encode(self, text: str) -> list[float]:
        """
        Embed a single text.

        Args:
            text: Text to embed

        Returns:
            The embedding vector

        Raises:
            Exception: Backend-specific errors; the router wraps them in
                       EncodingError
        """
        ...

    async def close(self) -> None:
        """Release any clients owned by the encoder."""
        return None
