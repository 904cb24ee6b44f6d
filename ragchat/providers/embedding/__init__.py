"""Embedding provider adapters.

OpenAIEmbeddingProvider implements IEmbeddingProvider
(ragchat/interfaces/embedding_provider.py) against OpenAI or any
OpenAI-compatible embeddings endpoint.
"""

from ragchat.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider

__all__ = ["OpenAIEmbeddingProvider"]
