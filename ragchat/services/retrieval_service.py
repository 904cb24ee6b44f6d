"""Retrieval pipeline: embed the question, ask the store for similar sections.

One embedding call, one search call.  Errors from either propagate
unchanged (``EmbeddingError``, ``StoreSearchError``); an empty match list is
a normal result meaning nothing cleared the threshold.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from ragchat.interfaces.vector_store_provider import (
    DEFAULT_MATCH_COUNT,
    DEFAULT_MATCH_THRESHOLD,
)
from ragchat.models.rag import QueryMatch

if TYPE_CHECKING:
    from ragchat.interfaces.embedding_provider import IEmbeddingProvider
    from ragchat.interfaces.vector_store_provider import IVectorStoreProvider

logger = structlog.get_logger(logger_name=__name__)


class RetrievalService:
    """Finds the stored sections most similar to a query.

    Parameters
    ----------
    embedding_provider:
        Embeds the query text; must be the same model used at ingestion.
    vector_store:
        Runs the similarity search.
    match_threshold:
        Default minimum similarity for a section to be returned.
    match_count:
        Default maximum number of sections returned.
    """

    def __init__(
        self,
        embedding_provider: IEmbeddingProvider,
        vector_store: IVectorStoreProvider,
        match_threshold: float = DEFAULT_MATCH_THRESHOLD,
        match_count: int = DEFAULT_MATCH_COUNT,
    ) -> None:
        self._embedding_provider = embedding_provider
        self._vector_store = vector_store
        self._match_threshold = match_threshold
        self._match_count = match_count

    async def retrieve(
        self,
        query: str,
        threshold: float | None = None,
        limit: int | None = None,
    ) -> list[QueryMatch]:
        """Return up to *limit* sections scoring at least *threshold*, best first."""
        threshold = self._match_threshold if threshold is None else threshold
        limit = self._match_count if limit is None else limit

        query_embedding = await self._embedding_provider.embed(query)
        matches = await self._vector_store.search(
            query_embedding, threshold=threshold, limit=limit
        )

        logger.info(
            "retrieval_complete",
            query_length=len(query),
            threshold=threshold,
            limit=limit,
            matches=len(matches),
            top_similarity=round(matches[0].similarity, 4) if matches else None,
        )
        return matches
