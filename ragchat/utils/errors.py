"""Custom exception hierarchy for ragchat.

All application exceptions inherit from :class:`RagChatError`, which
carries an optional ``provider_name`` so error handlers can identify which
external service (e.g. "openai", "sqlite") caused the failure.

The hierarchy is organized by pipeline boundary:

    RagChatError  (base -- catch-all for any ragchat error)
    +-- ConfigurationError       (missing credentials / setup)
    |   +-- StoreSetupError      (tables or similarity function not provisioned)
    +-- EmbeddingError           (embedding model call failed or malformed)
    +-- StoreWriteError          (document or section insert failed)
    +-- StoreReadError           (document read failed in transport)
    +-- StoreSearchError         (similarity search failed)
    +-- NotFoundError            (no document with that id or name)
    +-- AmbiguousNameError       (several documents share a name)
    +-- GenerationError          (language-model call failed)

Each boundary raises exactly one of these, so callers branch on the type
and never on the message text.
"""

from __future__ import annotations


class RagChatError(Exception):
    """Base exception for all ragchat errors.

    Every subclass carries a human-readable ``message`` and an optional
    ``provider_name`` identifying which external service triggered the
    error.  ``__str__`` prefixes the provider name in brackets, e.g.
    ``[openai] Rate limit exceeded``.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Configuration errors
# ---------------------------------------------------------------------------

class ConfigurationError(RagChatError):
    """Raised when configuration is invalid or missing at startup."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class StoreSetupError(ConfigurationError):
    """Raised when the backing store lacks required tables or functions.

    ``missing`` lists the components reported by the store's setup check.
    """

    def __init__(
        self,
        missing: list[str],
        provider_name: str | None = None,
    ) -> None:
        self._missing = list(missing)
        super().__init__(
            message=(
                "Database setup is incomplete. Missing: "
                + ", ".join(self._missing)
                + ". Run `ragchat setup-db` first."
            ),
            provider_name=provider_name,
        )

    @property
    def missing(self) -> list[str]:
        return list(self._missing)


# ---------------------------------------------------------------------------
# Embedding errors
# ---------------------------------------------------------------------------

class EmbeddingError(RagChatError):
    """Raised when an embedding call fails or returns malformed data.

    During ingestion the pipeline re-raises with ``chunk_index`` (zero-based)
    and ``document_id`` set so the failing section can be identified.
    """

    def __init__(
        self,
        message: str = "Embedding generation failed",
        provider_name: str | None = None,
        chunk_index: int | None = None,
        document_id: int | None = None,
    ) -> None:
        self._chunk_index = chunk_index
        self._document_id = document_id
        super().__init__(message=message, provider_name=provider_name)

    @property
    def chunk_index(self) -> int | None:
        return self._chunk_index

    @property
    def document_id(self) -> int | None:
        return self._document_id


# ---------------------------------------------------------------------------
# Vector store errors
# ---------------------------------------------------------------------------

class StoreWriteError(RagChatError):
    """Raised when a document or section insert fails.

    ``stage`` names the write step (``"metadata_insert"`` or
    ``"bulk_insert"``); ``document_id`` is set once the document row exists.
    """

    def __init__(
        self,
        message: str = "Vector store write failed",
        provider_name: str | None = None,
        stage: str | None = None,
        document_id: int | None = None,
    ) -> None:
        self._stage = stage
        self._document_id = document_id
        super().__init__(message=message, provider_name=provider_name)

    @property
    def stage(self) -> str | None:
        return self._stage

    @property
    def document_id(self) -> int | None:
        return self._document_id


class StoreReadError(RagChatError):
    """Raised when a read fails for transport or permission reasons."""

    def __init__(
        self,
        message: str = "Vector store read failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class StoreSearchError(RagChatError):
    """Raised when similarity search is unavailable or dimensions mismatch."""

    def __init__(
        self,
        message: str = "Similarity search failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Lookup errors
# ---------------------------------------------------------------------------

class NotFoundError(RagChatError):
    """Raised when no document matches an id or exact name."""

    def __init__(
        self,
        identifier: int | str,
        provider_name: str | None = None,
    ) -> None:
        self._identifier = identifier
        if isinstance(identifier, int):
            message = f"Document not found with ID: {identifier}"
        else:
            message = f'Document not found with name: "{identifier}"'
        super().__init__(message=message, provider_name=provider_name)

    @property
    def identifier(self) -> int | str:
        return self._identifier


class AmbiguousNameError(RagChatError):
    """Raised when more than one document shares the requested exact name."""

    def __init__(
        self,
        name: str,
        document_ids: list[int],
        provider_name: str | None = None,
    ) -> None:
        self._name = name
        self._document_ids = list(document_ids)
        super().__init__(
            message=(
                f'Multiple documents found with name: "{name}" '
                f"(IDs: {', '.join(str(i) for i in self._document_ids)}). "
                "Please use the document ID instead."
            ),
            provider_name=provider_name,
        )

    @property
    def name(self) -> str:
        return self._name

    @property
    def document_ids(self) -> list[int]:
        return list(self._document_ids)


# ---------------------------------------------------------------------------
# Generation errors
# ---------------------------------------------------------------------------

class GenerationError(RagChatError):
    """Raised when the language-model call fails or returns no content."""

    def __init__(
        self,
        message: str = "Response generation failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
