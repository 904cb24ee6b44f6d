"""Unit tests for IngestionService - insert -> split -> embed -> bulk insert."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from ragchat.providers.vector_store.sqlite_vector_store import SQLiteVectorStore
from ragchat.services.ingestion.ingestion_service import IngestionService
from ragchat.services.ingestion.splitter import SectionSplitter
from ragchat.utils.errors import EmbeddingError, StoreWriteError
from tests.conftest import MockEmbeddingProvider


def _service(
    store: SQLiteVectorStore,
    embedding: MockEmbeddingProvider | None = None,
    rollback_on_failure: bool = False,
) -> IngestionService:
    return IngestionService(
        splitter=SectionSplitter(),
        embedding_provider=embedding or MockEmbeddingProvider(),
        vector_store=store,
        rollback_on_failure=rollback_on_failure,
    )


class TestIngest:
    @pytest.mark.asyncio
    async def test_sections_stored(self, store: SQLiteVectorStore) -> None:
        embedding = MockEmbeddingProvider()
        result = await _service(store, embedding).ingest("notes.txt", "Alpha fact.\n\nBeta fact.")

        assert result.document_name == "notes.txt"
        assert result.sections_created == 2
        assert embedding.calls == ["Alpha fact.", "Beta fact."]

        docs = await store.list_documents()
        assert [(d.id, d.section_count) for d in docs] == [(result.document_id, 2)]

    @pytest.mark.asyncio
    async def test_document_keeps_original_content(self, store: SQLiteVectorStore) -> None:
        content = "  Alpha fact.\n\n\n Beta fact.  \n"
        result = await _service(store).ingest("raw.txt", content)
        assert (await store.get_document(result.document_id)).content == content

    @pytest.mark.asyncio
    async def test_blank_content_gives_zero_sections(self, store: SQLiteVectorStore) -> None:
        embedding = MockEmbeddingProvider()
        result = await _service(store, embedding).ingest("blank.txt", " \n\n \t\n")

        assert result.sections_created == 0
        assert embedding.calls == []
        docs = await store.list_documents()
        assert docs[0].id == result.document_id
        assert docs[0].section_count == 0

    @pytest.mark.asyncio
    async def test_embedding_failure_reports_chunk_index(self, store: SQLiteVectorStore) -> None:
        embedding = MockEmbeddingProvider(fail_on={"B"})
        service = _service(store, embedding)

        with pytest.raises(EmbeddingError) as exc_info:
            await service.ingest("abc.txt", "A\n\nB\n\nC")

        assert exc_info.value.chunk_index == 1
        # Fail fast: the third section is never embedded.
        assert embedding.calls == ["A", "B"]
        # The document row stays as an orphan with no sections.
        docs = await store.list_documents()
        assert len(docs) == 1
        assert docs[0].section_count == 0
        assert exc_info.value.document_id == docs[0].id

    @pytest.mark.asyncio
    async def test_embedding_failure_rolls_back_when_enabled(
        self, store: SQLiteVectorStore
    ) -> None:
        service = _service(store, MockEmbeddingProvider(fail_on={"B"}), rollback_on_failure=True)

        with pytest.raises(EmbeddingError):
            await service.ingest("abc.txt", "A\n\nB\n\nC")

        assert await store.list_documents() == []

    @pytest.mark.asyncio
    async def test_bulk_insert_failure_is_tagged(self, store: SQLiteVectorStore) -> None:
        # Stored sections are 8-dim; a 4-dim provider cannot add more.
        await _service(store).ingest("first.txt", "x")
        service = _service(store, MockEmbeddingProvider(dim=4))

        with pytest.raises(StoreWriteError) as exc_info:
            await service.ingest("second.txt", "y\n\nz")

        assert exc_info.value.stage == "bulk_insert"
        second = [d for d in await store.list_documents() if d.name == "second.txt"]
        assert exc_info.value.document_id == second[0].id
        assert second[0].section_count == 0

    @pytest.mark.asyncio
    async def test_metadata_insert_failure_stores_nothing(self) -> None:
        vector_store = AsyncMock()
        vector_store.insert_document.side_effect = StoreWriteError(
            message="down", stage="metadata_insert"
        )
        embedding = MockEmbeddingProvider()
        service = IngestionService(SectionSplitter(), embedding, vector_store)

        with pytest.raises(StoreWriteError) as exc_info:
            await service.ingest("a.txt", "A")

        assert exc_info.value.stage == "metadata_insert"
        assert embedding.calls == []
        vector_store.insert_sections.assert_not_awaited()
        vector_store.delete_document.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_store_errors_wrapped_with_document_id(self) -> None:
        vector_store = AsyncMock()
        vector_store.insert_document.return_value = 5
        vector_store.insert_sections.side_effect = StoreWriteError(message="disk full")
        service = IngestionService(SectionSplitter(), MockEmbeddingProvider(), vector_store)

        with pytest.raises(StoreWriteError) as exc_info:
            await service.ingest("a.txt", "A")

        assert exc_info.value.stage == "bulk_insert"
        assert exc_info.value.document_id == 5
        vector_store.insert_sections.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_rollback_failure_keeps_original_error(self) -> None:
        vector_store = AsyncMock()
        vector_store.insert_document.return_value = 5
        vector_store.delete_document.side_effect = StoreWriteError(message="locked")
        service = IngestionService(
            SectionSplitter(),
            MockEmbeddingProvider(fail_on={"A"}),
            vector_store,
            rollback_on_failure=True,
        )

        with pytest.raises(EmbeddingError):
            await service.ingest("a.txt", "A")
        vector_store.delete_document.assert_awaited_once_with(5)


class TestIngestFile:
    @pytest.mark.asyncio
    async def test_uses_base_name(self, store: SQLiteVectorStore, tmp_path: Path) -> None:
        path = tmp_path / "notes.txt"
        path.write_text("Alpha fact.\n\nBeta fact.", encoding="utf-8")

        result = await _service(store).ingest_file(path)

        assert result.document_name == "notes.txt"
        assert result.sections_created == 2

    @pytest.mark.asyncio
    async def test_missing_file(self, store: SQLiteVectorStore, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            await _service(store).ingest_file(tmp_path / "missing.txt")
        assert await store.list_documents() == []
