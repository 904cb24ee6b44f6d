"""Abstract base class for the vector store gateway.

Defines the contract for persisting documents and their embedded sections
and for similarity search.  The backing store is treated as a service that
exposes CRUD tables plus one similarity-search call; the concrete adapter
decides the transport.
"""

from __future__ import annotations

from abc import abstractmethod

from ragchat.interfaces.document_lookup import IDocumentLookup
from ragchat.models.rag import DocumentSummary, NewSection, QueryMatch, SetupStatus

DEFAULT_MATCH_THRESHOLD = 0.7
DEFAULT_MATCH_COUNT = 5


# Concrete implementation: SQLiteVectorStore (ragchat/providers/vector_store/)
class IVectorStoreProvider(IDocumentLookup):
    """Contract for document/section storage and similarity search.

    Every method is async so network-backed stores never block the event
    loop.  ``get_document`` is inherited from :class:`IDocumentLookup`.
    """

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @abstractmethod
    async def connect(self) -> None:
        """Open the long-lived store connection.

        Idempotent: concurrent and repeated calls leave exactly one ready
        connection.
        """

    @abstractmethod
    async def close(self) -> None:
        """Release the store connection, if open."""

    @abstractmethod
    async def check_setup(self) -> SetupStatus:
        """Report which required tables and functions are missing."""

    @abstractmethod
    async def setup(self) -> None:
        """Provision the missing tables and functions.  Safe to repeat."""

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    @abstractmethod
    async def insert_document(self, name: str, content: str) -> int:
        """Insert a document row and return its generated id.

        Raises
        ------
        ragchat.utils.errors.StoreWriteError
            On any persistence error.
        """

    @abstractmethod
    async def insert_sections(self, sections: list[NewSection]) -> None:
        """Insert all *sections* in one call.

        On error nothing may be assumed about which rows landed; the caller
        treats the sections as missing.

        Raises
        ------
        ragchat.utils.errors.StoreWriteError
            On any persistence error, including embedding dimensions that
            differ within the batch or from vectors already stored.
        """

    @abstractmethod
    async def delete_document(self, document_id: int) -> None:
        """Delete a document and, by cascade, all its sections.

        May succeed silently for an id that does not exist; callers that
        need a precise not-found error resolve the id first.
        """

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @abstractmethod
    async def search(
        self,
        query_embedding: list[float],
        threshold: float = DEFAULT_MATCH_THRESHOLD,
        limit: int = DEFAULT_MATCH_COUNT,
    ) -> list[QueryMatch]:
        """Return up to *limit* sections with similarity >= *threshold*.

        Results are ordered by descending similarity.

        Raises
        ------
        ragchat.utils.errors.StoreSearchError
            If the similarity function is unavailable or the query
            dimension differs from the stored vectors.
        """

    @abstractmethod
    async def list_documents(self) -> list[DocumentSummary]:
        """Return all documents, most recently created first."""

    @abstractmethod
    async def find_by_name_or_id(self, identifier: str) -> int:
        """Resolve *identifier* to a document id.

        If *identifier* parses as an integer it is treated as an id and its
        existence verified; otherwise it is matched exactly against names.
        The two branches never fall back to each other.

        Raises
        ------
        ragchat.utils.errors.NotFoundError
            No document with that id, or no document with that name.
        ragchat.utils.errors.AmbiguousNameError
            More than one document has that exact name.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier, e.g. ``"sqlite"``."""
