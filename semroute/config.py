"""
semroute Configuration Module

This module manages application settings and environment variables using
pydantic-settings for type-safe configuration management.

Environment variables are loaded from .env file or system environment.
All sensitive values use SecretStr to prevent accidental logging.
"""

from functools import lru_cache
from typing import Literal
import logging
import sys

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Pydantic Settings automatically reads from:
    1. Environment variables
    2. .env file in working directory
    3. Default values defined here

    Scoring coefficients left as None disable that metric. Distance metrics
    (euclidean, manhattan) should normally be given a negative coefficient.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore unknown env vars
    )

    encoder_backend: Literal["fastembed", "openai", "google", "ollama"] = Field(
        default="fastembed", description="Embedding backend used for utterances and queries"
    )

    embedding_model: str = Field(
        default="BAAI/bge-small-en-v1.5",
        description="FastEmbed model for local embeddings (ONNX Runtime)",
    )

    embedding_cache_dir: str | None = Field(
        default=None,
        description="Directory to cache embedding model (default: fastembed cache)",
    )

    embedding_threads: int | None = Field(
        default=None, description="CPU threads for embedding (default: auto-detect)"
    )

    openai_api_key: SecretStr | None = Field(
        default=None, description="OpenAI API key (required for the openai backend)"
    )

    openai_embedding_model: str = Field(
        default="text-embedding-3-small", description="OpenAI embedding model"
    )

    openai_embedding_dimensions: int | None = Field(
        default=None, gt=0, description="Optional reduced output dimensionality"
    )

    google_api_key: SecretStr | None = Field(
        default=None, description="Gemini API key (required for the google backend)"
    )

    google_embedding_model: str = Field(
        default="text-embedding-004", description="Google embedding model"
    )

    google_embedding_dimensions: int | None = Field(
        default=None, gt=0, description="Optional reduced output dimensionality"
    )

    ollama_base_url: str = Field(
        default="http://localhost:11434", description="Ollama server URL"
    )

    ollama_model: str = Field(default="all-minilm", description="Ollama embedding model")

    encoder_timeout_seconds: float = Field(
        default=30.0, gt=0, description="Per-request timeout for networked encoders"
    )

    encoder_max_retries: int = Field(
        default=3, ge=0, description="Retries after the first attempt (networked encoders)"
    )

    store_backend: Literal["memory", "redis"] = Field(
        default="memory", description="Where utterance embeddings are stored"
    )

    redis_url: str = Field(
        default="redis://localhost:6379/0", description="Redis connection URL"
    )

    redis_key_prefix: str = Field(
        default="semroute", description="Prefix for Redis keys (multi-tenant isolation)"
    )

    redis_ttl_seconds: int | None = Field(
        default=None, gt=0, description="Expiry for stored embeddings (default: none)"
    )

    routes_file: str | None = Field(
        default=None,
        description="JSON route definition file (default: built-in routes)",
    )

    dot_product_coefficient: float | None = Field(
        default=1.0, description="Weight of dot-product similarity"
    )

    euclidean_coefficient: float | None = Field(
        default=None, description="Weight of Euclidean distance (use a negative value)"
    )

    manhattan_coefficient: float | None = Field(
        default=None, description="Weight of Manhattan distance (use a negative value)"
    )

    jaccard_coefficient: float | None = Field(
        default=None, description="Weight of generalized Jaccard similarity"
    )

    pearson_coefficient: float | None = Field(
        default=None, description="Weight of Pearson correlation"
    )

    match_timeout_seconds: float | None = Field(
        default=5.0, gt=0, description="Upper bound on a single match (None: unbounded)"
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Application log level"
    )

    host: str = Field(default="0.0.0.0", description="Server bind host")

    port: int = Field(default=8000, description="Server bind port")

    debug: bool = Field(default=False, description="Enable debug mode")

    @model_validator(mode="after")
    def validate_backend_credentials(self) -> "Settings":
        """Ensure the selected encoder backend has what it needs."""
        if self.encoder_backend == "openai" and (
            self.openai_api_key is None or not self.openai_api_key.get_secret_value()
        ):
            raise ValueError("OPENAI_API_KEY is required when ENCODER_BACKEND=openai")
        if self.encoder_backend == "google" and (
            self.google_api_key is None or not self.google_api_key.get_secret_value()
        ):
            raise ValueError("GOOGLE_API_KEY is required when ENCODER_BACKEND=google")
        return self

    def metric_coefficients(self) -> dict[str, float | None]:
        """Scoring coefficients keyed by similarity metric name."""
        return {
            "dot_product": self.dot_product_coefficient,
            "euclidean": self.euclidean_coefficient,
            "manhattan": self.manhattan_coefficient,
            "jaccard": self.jaccard_coefficient,
            "pearson": self.pearson_coefficient,
        }


@lru_cache
def get_settings() -> Settings:
    """
    Returns cached settings instance.

    Using lru_cache ensures settings are loaded once and reused,
    avoiding repeated file reads and environment parsing.

    Returns:
        Settings: The application settings singleton.
    """
    return Settings()


def configure_logging(settings: Settings) -> None:
    """
    Configure application logging based on settings.

    Sets up structured logging with timestamps and reduces noise
    from third-party HTTP and model libraries.

    Args:
        settings: The application settings instance.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("openai").setLevel(logging.WARNING)
    logging.getLogger("google_genai").setLevel(logging.WARNING)
    logging.getLogger("fastembed").setLevel(logging.WARNING)
