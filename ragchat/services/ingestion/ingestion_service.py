"""Orchestrator for the document ingestion pipeline.

Pipeline stages: **metadata insert -> split -> embed -> bulk insert**.

The :class:`IngestionService` implements the **Orchestrator pattern**: it
coordinates three collaborators (section splitter, embedding provider,
vector store) without any of them knowing about each other.

    1. IVectorStoreProvider.insert_document -- creates the document row
    2. SectionSplitter -- splits the content on blank lines
    3. IEmbeddingProvider -- embeds each section, one call at a time
    4. IVectorStoreProvider.insert_sections -- stores every section at once

Embedding is sequential and fails fast: the first failing section aborts
the run and the raised :class:`EmbeddingError` carries its zero-based
index.  Nothing is retried.

A failure after step 1 leaves the document row without sections (an
orphan, visible in the listing with a section count of zero).  With
``rollback_on_failure`` enabled the row is deleted before the error is
re-raised.

All dependencies are injected via constructor (Dependency Injection), so
providers can be swapped without changing this class.
"""

from __future__ import annotations

import time
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from ragchat.models.rag import IngestionResult, NewSection
from ragchat.services.ingestion.splitter import SectionSplitter
from ragchat.utils.errors import EmbeddingError, RagChatError, StoreWriteError

if TYPE_CHECKING:
    from ragchat.interfaces.embedding_provider import IEmbeddingProvider
    from ragchat.interfaces.vector_store_provider import IVectorStoreProvider

logger = structlog.get_logger(logger_name=__name__)


class IngestionService:
    """Adds one document to the store: insert -> split -> embed -> bulk insert.

    Parameters
    ----------
    splitter:
        Splits document content into paragraph sections.
    embedding_provider:
        Generates one embedding vector per section.
    vector_store:
        Persists the document row and its embedded sections.
    rollback_on_failure:
        Delete the document row when a later stage fails.  Off by default,
        in which case the orphaned row stays for manual cleanup.
    """

    def __init__(
        self,
        splitter: SectionSplitter,
        embedding_provider: IEmbeddingProvider,
        vector_store: IVectorStoreProvider,
        rollback_on_failure: bool = False,
    ) -> None:
        self._splitter = splitter
        self._embedding_provider = embedding_provider
        self._vector_store = vector_store
        self._rollback_on_failure = rollback_on_failure

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def ingest(self, name: str, content: str) -> IngestionResult:
        """Ingest *content* under the display name *name*.

        Returns
        -------
        IngestionResult
            The new document id and the number of sections stored.  Zero
            sections is a valid outcome for blank content.

        Raises
        ------
        StoreWriteError
            The metadata insert (``stage="metadata_insert"``) or the bulk
            section insert (``stage="bulk_insert"``) failed.
        EmbeddingError
            A section could not be embedded; ``chunk_index`` names it.
        """
        start = time.monotonic()

        # Stage 1: metadata insert.  No document row exists if this fails.
        document_id = await self._vector_store.insert_document(name, content)

        try:
            # Stage 2: split.
            chunks = self._splitter.split(content)
            logger.info(
                "document_split",
                document_id=document_id,
                name=name,
                sections=len(chunks),
            )
            if not chunks:
                return self._result(document_id, name, 0, start)

            # Stage 3: embed, one section at a time.
            sections = await self._embed_sections(document_id, chunks)

            # Stage 4: bulk insert.
            await self._insert_sections(document_id, sections)
        except RagChatError as exc:
            logger.error(
                "ingestion_failed",
                document_id=document_id,
                name=name,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            if self._rollback_on_failure:
                await self._rollback(document_id)
            raise

        return self._result(document_id, name, len(sections), start)

    async def ingest_file(self, path: str | Path) -> IngestionResult:
        """Read a UTF-8 text file and ingest it under its base name."""
        file_path = Path(path)
        content = file_path.read_text(encoding="utf-8")
        return await self.ingest(file_path.name, content)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _embed_sections(
        self, document_id: int, chunks: list[str]
    ) -> list[NewSection]:
        sections: list[NewSection] = []
        for index, chunk in enumerate(chunks):
            try:
                embedding = await self._embedding_provider.embed(chunk)
            except EmbeddingError as exc:
                raise EmbeddingError(
                    message=f"Failed to embed section {index}: {exc.message}",
                    provider_name=exc.provider_name,
                    chunk_index=index,
                    document_id=document_id,
                ) from exc
            sections.append(
                NewSection(document_id=document_id, content=chunk, embedding=embedding)
            )
            logger.debug(
                "section_embedded",
                document_id=document_id,
                chunk_index=index,
                dimension=len(embedding),
            )
        return sections

    async def _insert_sections(
        self, document_id: int, sections: list[NewSection]
    ) -> None:
        try:
            await self._vector_store.insert_sections(sections)
        except StoreWriteError as exc:
            if exc.stage == "bulk_insert" and exc.document_id == document_id:
                raise
            raise StoreWriteError(
                message=exc.message,
                provider_name=exc.provider_name,
                stage="bulk_insert",
                document_id=document_id,
            ) from exc

    async def _rollback(self, document_id: int) -> None:
        try:
            await self._vector_store.delete_document(document_id)
        except StoreWriteError as exc:
            logger.warning(
                "ingestion_rollback_failed",
                document_id=document_id,
                error=str(exc),
            )
            return
        logger.info("ingestion_rolled_back", document_id=document_id)

    @staticmethod
    def _result(
        document_id: int, name: str, sections_created: int, start: float
    ) -> IngestionResult:
        result = IngestionResult(
            document_id=document_id,
            document_name=name,
            sections_created=sections_created,
            ingestion_time=round(time.monotonic() - start, 2),
        )
        logger.info(
            "ingestion_complete",
            document_id=document_id,
            name=name,
            sections=sections_created,
            time_s=result.ingestion_time,
        )
        return result
