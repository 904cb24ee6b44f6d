"""Shared pytest fixtures for the ragchat test suite."""

from __future__ import annotations

import hashlib
import struct
from pathlib import Path

import pytest
import pytest_asyncio

from ragchat.interfaces.document_lookup import IDocumentLookup
from ragchat.interfaces.embedding_provider import IEmbeddingProvider
from ragchat.interfaces.llm_provider import ILLMProvider
from ragchat.models.rag import Document
from ragchat.providers.vector_store.sqlite_vector_store import SQLiteVectorStore
from ragchat.utils.errors import EmbeddingError, GenerationError, NotFoundError

# ---------------------------------------------------------------------------
# Mock providers
# ---------------------------------------------------------------------------

_EMBEDDING_DIM = 8


def _hash_to_vector(text: str, dim: int = _EMBEDDING_DIM) -> list[float]:
    """Generate a deterministic fixed-length vector by hashing *text*.

    Uses SHA-256 to hash the text, then unpacks bytes into floats and
    normalises to unit length.  Deterministic - same text always produces
    the same vector.
    """
    digest = hashlib.sha256(text.encode("utf-8")).digest()
    raw = digest
    while len(raw) < dim * 2:
        raw += hashlib.sha256(raw).digest()
    # Signed 16-bit ints keep every value finite (random float32 bytes can be NaN).
    values = [float(v) for v in struct.unpack(f"<{dim}h", raw[: dim * 2])]
    magnitude = max(sum(v * v for v in values) ** 0.5, 1e-10)
    return [v / magnitude for v in values]


class MockEmbeddingProvider(IEmbeddingProvider):
    """Deterministic hash-based embedding provider.

    ``fail_on`` lists texts whose embedding call raises :class:`EmbeddingError`.
    Every call is recorded in ``calls`` in order.
    """

    def __init__(
        self,
        dim: int = _EMBEDDING_DIM,
        fail_on: set[str] | None = None,
    ) -> None:
        self._dim = dim
        self._fail_on = fail_on or set()
        self.calls: list[str] = []

    async def embed(self, text: str) -> list[float]:
        self.calls.append(text)
        if text in self._fail_on:
            raise EmbeddingError(message="mock embedding failure", provider_name="mock-embedding")
        return _hash_to_vector(text, self._dim)

    def get_dimension(self) -> int:
        return self._dim

    def get_provider_name(self) -> str:
        return "mock-embedding"

    def is_available(self) -> bool:
        return True


class KeywordEmbeddingProvider(IEmbeddingProvider):
    """Embedding provider returning fixed vectors for known texts.

    Lets a test pin exact cosine similarities between a query and stored
    sections.  Unknown texts raise :class:`EmbeddingError`.
    """

    def __init__(self, vectors: dict[str, list[float]]) -> None:
        self._vectors = vectors

    async def embed(self, text: str) -> list[float]:
        try:
            return list(self._vectors[text])
        except KeyError:
            raise EmbeddingError(
                message=f"no vector for {text!r}", provider_name="keyword-embedding"
            ) from None

    def get_dimension(self) -> int:
        return len(next(iter(self._vectors.values())))

    def get_provider_name(self) -> str:
        return "keyword-embedding"

    def is_available(self) -> bool:
        return True


class MockLLMProvider(ILLMProvider):
    """Language model stub that records prompts and returns a fixed answer."""

    def __init__(self, answer: str = "Mock answer.", error: Exception | None = None) -> None:
        self._answer = answer
        self._error = error
        self.calls: list[dict] = []

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.3,
        max_tokens: int = 1000,
    ) -> str:
        self.calls.append(
            {
                "system_prompt": system_prompt,
                "user_prompt": user_prompt,
                "temperature": temperature,
                "max_tokens": max_tokens,
            }
        )
        if self._error is not None:
            raise self._error
        return self._answer

    def get_provider_name(self) -> str:
        return "mock-llm"

    def is_available(self) -> bool:
        return True


class MockDocumentLookup(IDocumentLookup):
    """Lookup over a dict of id -> name; ids in ``errors`` raise their error."""

    def __init__(
        self,
        names: dict[int, str],
        errors: dict[int, Exception] | None = None,
    ) -> None:
        self._names = names
        self._errors = errors or {}
        self.calls: list[int] = []

    async def get_document(self, document_id: int) -> Document:
        self.calls.append(document_id)
        if document_id in self._errors:
            raise self._errors[document_id]
        if document_id not in self._names:
            raise NotFoundError(document_id, provider_name="mock-lookup")
        return Document(id=document_id, name=self._names[document_id], content="")


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_embedding_provider() -> MockEmbeddingProvider:
    return MockEmbeddingProvider()


@pytest.fixture
def mock_llm_provider() -> MockLLMProvider:
    return MockLLMProvider()


@pytest.fixture
def failing_llm_provider() -> MockLLMProvider:
    return MockLLMProvider(error=GenerationError(message="boom", provider_name="mock-llm"))


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "ragchat_test.db"


@pytest_asyncio.fixture
async def store(db_path: Path):
    """A SQLiteVectorStore over a fresh temp database with the schema created."""
    s = SQLiteVectorStore(db_path=db_path)
    await s.setup()
    yield s
    await s.close()


@pytest_asyncio.fixture
async def empty_store(db_path: Path):
    """A SQLiteVectorStore over a temp database with no schema."""
    s = SQLiteVectorStore(db_path=db_path)
    yield s
    await s.close()
