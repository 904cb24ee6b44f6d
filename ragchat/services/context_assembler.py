"""Builds the prompt context from search matches.

Each match is labelled with its parent document's name, looked up through
an :class:`IDocumentLookup`.  Lookups for all matches run concurrently
(bounded by a semaphore) and the snippets are joined back in match order,
not completion order.

A lookup that fails for any reason degrades only its own snippet, which is
labelled with the raw document id instead of the name.  The other
snippets are unaffected and assembly never raises for a lookup failure.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from ragchat.models.rag import QueryMatch
from ragchat.utils.concurrency import throttled_gather

if TYPE_CHECKING:
    from ragchat.interfaces.document_lookup import IDocumentLookup

logger = structlog.get_logger(logger_name=__name__)

CONTEXT_HEADER = "Here are some relevant sections from documents:\n\n"
NO_CONTEXT_PLACEHOLDER = "No relevant context found in the documents."


def format_snippet(name: str, content: str) -> str:
    return f'From document "{name}": {content}'


def format_fallback_snippet(document_id: int, content: str) -> str:
    return f"From document ID {document_id} (details unavailable): {content}"


class ContextAssembler:
    """Joins matches and their document names into one context string.

    Parameters
    ----------
    lookup:
        Resolves a document id to its record (for the name).
    concurrency:
        Maximum number of lookups in flight at once.
    """

    def __init__(self, lookup: IDocumentLookup, concurrency: int = 5) -> None:
        self._lookup = lookup
        self._concurrency = max(1, concurrency)

    async def assemble(self, query: str, matches: list[QueryMatch]) -> str:
        if not matches:
            logger.info("context_empty", query_length=len(query))
            return NO_CONTEXT_PLACEHOLDER

        documents = await throttled_gather(
            [self._lookup.get_document(m.document_id) for m in matches],
            limit=self._concurrency,
        )

        snippets: list[str] = []
        failures = 0
        for match, document in zip(matches, documents):
            if isinstance(document, BaseException):
                failures += 1
                logger.warning(
                    "document_lookup_failed",
                    document_id=match.document_id,
                    error=str(document),
                    error_type=type(document).__name__,
                )
                snippets.append(format_fallback_snippet(match.document_id, match.content))
            else:
                snippets.append(format_snippet(document.name, match.content))

        logger.info(
            "context_assembled",
            matches=len(matches),
            lookup_failures=failures,
        )
        return CONTEXT_HEADER + "".join(f"{s}\n\n" for s in snippets)
