"""Single-method capability for resolving a document id to its record.

The context assembler depends on this rather than on the whole vector
store, so tests can hand it a fake that fails for chosen ids.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from ragchat.models.rag import Document


class IDocumentLookup(ABC):
    """Resolve a document id to the stored :class:`Document`."""

    @abstractmethod
    async def get_document(self, document_id: int) -> Document:
        """Return the document with *document_id*.

        Raises
        ------
        ragchat.utils.errors.NotFoundError
            If no document has that id.
        ragchat.utils.errors.StoreReadError
            On transport or permission failure.
        """
