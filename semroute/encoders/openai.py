"""
OpenAI Embeddings Encoder

Hosted embeddings through the official async SDK. Retries on rate limits
and transient errors are handled by the SDK's own ``max_retries``.
"""

import logging

from openai import AsyncOpenAI

from semroute.encoders.base import Encoder

logger = logging.getLogger(__name__)


class OpenAIEmbeddingEncoder(Encoder):
    """
    Encoder backed by the OpenAI embeddings endpoint.

    Args:
        client: Configured AsyncOpenAI client
        model: Embedding model name
        dimensions: Optional output dimensionality (text-embedding-3-* only)
    """

    def __init__(
        self,
        client: AsyncOpenAI,
        model: str = "text-embedding-3-small",
        dimensions: int | None = None,
    ) -> None:
        self._client = client
        self._dimensions = dimensions
        self.name = model

    async def encode(self, text: str) -> list[float]:
        kwargs = {"model": self.name, "input": text}
        if self._dimensions is not None:
            kwargs["dimensions"] = self._dimensions

        response = await self._client.embeddings.create(**kwargs)

        if not response.data:
            raise ValueError(f"OpenAI returned no embedding for model {self.name}")
        return [float(x) for x in response.data[0].embedding]

    async def close(self) -> None:
        await self._client.close()
