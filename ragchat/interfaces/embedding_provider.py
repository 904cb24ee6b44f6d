"""Abstract base class for text-embedding service providers.

Defines the contract for turning one piece of text into a fixed-dimension
vector.  Implementations may wrap OpenAI embeddings, an OpenAI-compatible
gateway, or a local model; the rest of ragchat only sees this interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


# Concrete implementation: OpenAIEmbeddingProvider (ragchat/providers/embedding/)
class IEmbeddingProvider(ABC):
    """Contract for the embedding model used by ingestion and retrieval.

    One call embeds one text.  Ingestion calls it once per section in
    order; retrieval calls it once per question.
    """

    @abstractmethod
    async def embed(self, text: str) -> list[float]:
        """Generate the embedding vector for *text*.

        Returns
        -------
        list[float]
            A vector whose length equals :meth:`get_dimension`.

        Raises
        ------
        ragchat.utils.errors.EmbeddingError
            If the upstream call fails (including authentication and rate
            limits) or returns malformed data.
        """

    @abstractmethod
    def get_dimension(self) -> int:
        """Return the dimensionality of the embedding vectors.

        Constant for the lifetime of the provider instance once known and
        must match the vectors already stored, or search fails at the store
        boundary.  May be ``0`` before the first call when the model is not
        known in advance.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier, e.g. ``"openai_embedding"``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if credentials are present (no network call)."""
