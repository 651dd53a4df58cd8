"""
Ollama Encoder

Embeddings from a locally served Ollama model (e.g. all-minilm) over its
HTTP API:

    POST {base_url}/api/embed  {"model": ..., "input": ...}
    -> {"embeddings": [[...]]}

Transient failures (connection errors, timeouts, 5xx) are retried with
exponential backoff (1s, 2s, 4s). Client errors (4xx) fail immediately.
"""

import asyncio
import logging

import httpx

from semroute.encoders.base import Encoder

logger = logging.getLogger(__name__)


def _is_transient(error: httpx.HTTPError) -> bool:
    """Connection problems and server-side errors are worth retrying."""
    if isinstance(error, httpx.HTTPStatusError):
        return error.response.status_code >= 500
    return isinstance(error, httpx.TransportError)


class OllamaEncoder(Encoder):
    """
    Encoder backed by an Ollama server.

    Args:
        model: Ollama embedding model name
        base_url: Server URL
        timeout: Per-request timeout in seconds
        max_retries: Retries after the first attempt
        backoff_seconds: Base delay, doubled after each failed attempt
        client: Optional pre-configured httpx.AsyncClient (not closed by us)
    """

    def __init__(
        self,
        model: str = "all-minilm",
        base_url: str = "http://localhost:11434",
        timeout: float = 30.0,
        max_retries: int = 3,
        backoff_seconds: float = 1.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.name = model
        self._attempts = max(0, max_retries) + 1
        self._backoff = backoff_seconds
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)

    async def _embed_once(self, text: str) -> list[float]:
        response = await self._client.post(
            "/api/embed", json={"model": self.name, "input": text}
        )
        response.raise_for_status()
        embeddings = response.json().get("embeddings") or []
        if not embeddings or not embeddings[0]:
            raise ValueError(f"Ollama returned no embedding for model {self.name}")
        return [float(x) for x in embeddings[0]]

    async def encode(self, text: str) -> list[float]:
        for attempt in range(self._attempts):
            try:
                return await self._embed_once(text)
            except httpx.HTTPError as e:
                if not _is_transient(e) or attempt == self._attempts - 1:
                    logger.error(
                        f"Ollama embedding failed after {attempt + 1} attempt(s): {e}"
                    )
                    raise
                wait_time = self._backoff * 2**attempt
                logger.warning(
                    f"Ollama embedding failed (attempt {attempt + 1}/{self._attempts}), "
                    f"retrying in {wait_time}s: {e}"
                )
                await asyncio.sleep(wait_time)

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()
