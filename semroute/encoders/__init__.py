"""
Encoders module: text-to-vector backends.

This module contains:
- base.py: The Encoder port every backend implements
- dense.py: Adapter for semantic-router dense encoders (FastEmbed default)
- openai.py: Hosted OpenAI embeddings
- google.py: Hosted Gemini embeddings
- ollama.py: Locally served Ollama embeddings
- factory.py: Settings-driven backend selection
"""

from semroute.encoders.base import Encoder
from semroute.encoders.dense import DenseEncoderAdapter
from semroute.encoders.openai import OpenAIEmbeddingEncoder
from semroute.encoders.google import GoogleEmbeddingEncoder
from semroute.encoders.ollama import OllamaEncoder
from semroute.encoders.factory import create_encoder

__all__ = [
    "Encoder",
    "DenseEncoderAdapter",
    "OpenAIEmbeddingEncoder",
    "GoogleEmbeddingEncoder",
    "OllamaEncoder",
    "create_encoder",
]
