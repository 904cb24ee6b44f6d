"""OpenAI-compatible embedding provider adapter.

Wraps the ``openai`` async client to implement :class:`IEmbeddingProvider`.
Supports both real OpenAI and OpenAI-compatible providers (TogetherAI,
Anyscale, Fireworks) via custom ``base_url`` and model name settings.
"""

from __future__ import annotations

import math

import openai
import structlog

from ragchat.config.settings import Settings
from ragchat.interfaces.embedding_provider import IEmbeddingProvider
from ragchat.utils.errors import ConfigurationError, EmbeddingError

logger = structlog.get_logger(logger_name=__name__)

# Known embedding model dimensions.
_MODEL_DIMENSIONS: dict[str, int] = {
    "text-embedding-ada-002": 1536,
    "text-embedding-3-small": 1536,
    "text-embedding-3-large": 3072,
    "BAAI/bge-base-en-v1.5": 768,
    "BAAI/bge-large-en-v1.5": 1024,
    "togethercomputer/m2-bert-80M-8k-retrieval": 768,
    "WhereIsAI/UAE-Large-V1": 1024,
}

_DEFAULT_MODEL = "text-embedding-ada-002"


class OpenAIEmbeddingProvider(IEmbeddingProvider):
    """Embedding provider backed by an OpenAI-compatible embeddings API.

    Uses ``text-embedding-ada-002`` (1536 dims) by default.  Every response
    is checked for shape: exactly one vector of finite numbers whose length
    matches the model.  Models missing from the dimension table take their
    dimension from the first response.  Anything else is reported as
    :class:`EmbeddingError` so malformed vectors never reach the store.

    The ``openai`` client is created on the first :meth:`embed` call, so a
    provider can be built without an API key.
    """

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._api_key = settings.openai_api_key
        self._client: openai.AsyncOpenAI | None = None
        self._model = settings.openai_embedding_model or _DEFAULT_MODEL
        self._dimension: int | None = _MODEL_DIMENSIONS.get(self._model)
        self._provider_label = (
            "openai-compatible_embedding" if settings.openai_base_url else "openai_embedding"
        )

    def _get_client(self) -> openai.AsyncOpenAI:
        if self._client is None:
            if not self._api_key:
                raise ConfigurationError(
                    message="Missing required configuration: OPENAI_API_KEY.",
                    provider_name=self.get_provider_name(),
                )
            client_kwargs: dict = {"api_key": self._api_key}
            if self._settings.openai_base_url:
                client_kwargs["base_url"] = self._settings.openai_base_url
            self._client = openai.AsyncOpenAI(**client_kwargs)
        return self._client

    # ------------------------------------------------------------------
    # IEmbeddingProvider implementation
    # ------------------------------------------------------------------

    async def embed(self, text: str) -> list[float]:
        """Generate the embedding vector for a single text."""
        client = self._get_client()
        try:
            response = await client.embeddings.create(
                input=text,
                model=self._model,
            )
        except openai.AuthenticationError as exc:
            raise EmbeddingError(
                message=f"{self._provider_label} rejected the API key: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        except openai.RateLimitError as exc:
            raise EmbeddingError(
                message=f"{self._provider_label} rate limit exceeded: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        except openai.APIError as exc:
            raise EmbeddingError(
                message=f"{self._provider_label} API error: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        vector = self._extract_vector(response)
        logger.debug(
            "openai_embedding",
            model=self._model,
            provider=self._provider_label,
            tokens=response.usage.total_tokens if response.usage else None,
        )
        return vector

    def get_dimension(self) -> int:
        """Return the model's dimension, or ``0`` until an unlisted model has answered."""
        return self._dimension or 0

    def get_provider_name(self) -> str:
        return self._provider_label

    def is_available(self) -> bool:
        """Return ``True`` if an API key is configured."""
        return bool(self._api_key)

    # ------------------------------------------------------------------
    # Response validation
    # ------------------------------------------------------------------

    def _extract_vector(self, response) -> list[float]:  # noqa: ANN001
        data = getattr(response, "data", None)
        if not data:
            raise EmbeddingError(
                message=f"{self._provider_label} returned no embedding data",
                provider_name=self.get_provider_name(),
            )

        raw = getattr(data[0], "embedding", None)
        if not isinstance(raw, list) or not raw:
            raise EmbeddingError(
                message=f"{self._provider_label} returned a malformed embedding",
                provider_name=self.get_provider_name(),
            )

        try:
            vector = [float(v) for v in raw]
        except (TypeError, ValueError) as exc:
            raise EmbeddingError(
                message=f"{self._provider_label} returned non-numeric embedding values",
                provider_name=self.get_provider_name(),
            ) from exc

        if not all(math.isfinite(v) for v in vector):
            raise EmbeddingError(
                message=f"{self._provider_label} returned non-finite embedding values",
                provider_name=self.get_provider_name(),
            )

        if self._dimension is None:
            self._dimension = len(vector)
            logger.info(
                "embedding_dimension_learned",
                model=self._model,
                dimension=self._dimension,
            )
        elif len(vector) != self._dimension:
            raise EmbeddingError(
                message=(
                    f"{self._provider_label} returned a {len(vector)}-dim vector, "
                    f"expected {self._dimension} for model {self._model}"
                ),
                provider_name=self.get_provider_name(),
            )
        return vector
