"""
Google Embeddings Encoder

Hosted embeddings from the Gemini API through the google-genai SDK's async
surface (``client.aio.models.embed_content``).
"""

import logging

from google import genai
from google.genai import types

from semroute.encoders.base import Encoder

logger = logging.getLogger(__name__)


class GoogleEmbeddingEncoder(Encoder):
    """
    Encoder backed by the Gemini embeddings endpoint.

    Args:
        client: Configured google.genai Client
        model: Embedding model name
        dimensions: Optional output dimensionality
    """

    def __init__(
        self,
        client: genai.Client,
        model: str = "text-embedding-004",
        dimensions: int | None = None,
    ) -> None:
        self._client = client
        self._dimensions = dimensions
        self.name = model

    async def encode(self, text: str) -> list[float]:
        config = None
        if self._dimensions is not None:
            config = types.EmbedContentConfig(output_dimensionality=self._dimensions)

        response = await self._client.aio.models.embed_content(
            model=self.name, contents=text, config=config
        )

        if not response.embeddings or not response.embeddings[0].values:
            raise ValueError(f"Google returned no embedding for model {self.name}")
        return [float(x) for x in response.embeddings[0].values]

    async def close(self) -> None:
        await self._client.aio.aclose()
