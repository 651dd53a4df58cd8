"""
semantic-router Dense Encoder Adapter

Adapts any semantic-router dense encoder (FastEmbedEncoder, OpenAIEncoder,
HuggingFaceEncoder, ...) to the Encoder port. Those encoders are
synchronous callables mapping a list of documents to a list of vectors, so
calls are pushed to a worker thread to keep the event loop free.

The default backend is FastEmbed's local ONNX inference
(BAAI/bge-small-en-v1.5, 384 dimensions), which embeds a short query in
~15-25ms on CPU without any network call.
"""

import asyncio
import logging
from typing import Any

from semantic_router.encoders import FastEmbedEncoder

from semroute.encoders.base import Encoder

logger = logging.getLogger(__name__)


class DenseEncoderAdapter(Encoder):
    """
    Wrap a semantic-router dense encoder.

    Usage:
        encoder = DenseEncoderAdapter.fastembed("BAAI/bge-small-en-v1.5")
        vector = await encoder.encode("hello")
    """

    def __init__(self, encoder: Any, name: str | None = None) -> None:
        """
        Args:
            encoder: Callable taking list[str] and returning list[list[float]]
            name: Reported model name (defaults to the encoder's own name)
        """
        self._encoder = encoder
        self.name = name or getattr(encoder, "name", type(encoder).__name__)

    @classmethod
    def fastembed(
        cls,
        model: str = "BAAI/bge-small-en-v1.5",
        cache_dir: str | None = None,
        threads: int | None = None,
    ) -> "DenseEncoderAdapter":
        """
        Build the local FastEmbed backend.

        The model is downloaded to the fastembed cache on first use.
        """
        encoder = FastEmbedEncoder(name=model, cache_dir=cache_dir, threads=threads)
        logger.debug(f"Created FastEmbed encoder: {model}")
        return cls(encoder, name=model)

    async def encode(self, text: str) -> list[float]:
        vectors = await asyncio.to_thread(self._encoder, [text])
        if not vectors or len(vectors[0]) == 0:
            raise ValueError(f"{self.name} returned no embedding")
        return [float(x) for x in vectors[0]]
