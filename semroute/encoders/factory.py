"""
Encoder Factory

Selects the embedding backend from settings.

Supported backends:
- fastembed: Local ONNX inference via semantic-router (default, no API key)
- openai: Hosted OpenAI embeddings
- google: Hosted Gemini embeddings
- ollama: Locally served Ollama model
"""

import logging

from google import genai
from google.genai import types
from openai import AsyncOpenAI

from semroute.config import Settings
from semroute.encoders.base import Encoder
from semroute.encoders.dense import DenseEncoderAdapter
from semroute.encoders.google import GoogleEmbeddingEncoder
from semroute.encoders.ollama import OllamaEncoder
from semroute.encoders.openai import OpenAIEmbeddingEncoder

logger = logging.getLogger(__name__)


def create_encoder(settings: Settings) -> Encoder:
    """
    Create the encoder configured by ``settings.encoder_backend``.

    Raises:
        ValueError: If the backend is unknown or its credentials are missing
    """
    backend = settings.encoder_backend

    if backend == "fastembed":
        return DenseEncoderAdapter.fastembed(
            model=settings.embedding_model,
            cache_dir=settings.embedding_cache_dir,
            threads=settings.embedding_threads,
        )

    if backend == "openai":
        if settings.openai_api_key is None:
            raise ValueError("OPENAI_API_KEY is required for the openai encoder")
        client = AsyncOpenAI(
            api_key=settings.openai_api_key.get_secret_value(),
            timeout=settings.encoder_timeout_seconds,
            max_retries=settings.encoder_max_retries,
        )
        logger.debug("Initialized OpenAI client")
        return OpenAIEmbeddingEncoder(
            client,
            model=settings.openai_embedding_model,
            dimensions=settings.openai_embedding_dimensions,
        )

    if backend == "google":
        if settings.google_api_key is None:
            raise ValueError("GOOGLE_API_KEY is required for the google encoder")
        client = genai.Client(
            api_key=settings.google_api_key.get_secret_value(),
            http_options=types.HttpOptions(
                timeout=int(settings.encoder_timeout_seconds * 1000)
            ),
        )
        logger.debug("Initialized Google GenAI client")
        return GoogleEmbeddingEncoder(
            client,
            model=settings.google_embedding_model,
            dimensions=settings.google_embedding_dimensions,
        )

    if backend == "ollama":
        return OllamaEncoder(
            model=settings.ollama_model,
            base_url=settings.ollama_base_url,
            timeout=settings.encoder_timeout_seconds,
            max_retries=settings.encoder_max_retries,
        )

    raise ValueError(f"Unknown encoder backend: {backend}")
