"""Unit tests for ContextAssembler - labelling matches with document names."""

from __future__ import annotations

import asyncio

import pytest

from ragchat.models.rag import Document, QueryMatch
from ragchat.services.context_assembler import (
    CONTEXT_HEADER,
    NO_CONTEXT_PLACEHOLDER,
    ContextAssembler,
)
from ragchat.utils.errors import NotFoundError, StoreReadError
from tests.conftest import MockDocumentLookup


def _match(document_id: int, content: str, similarity: float = 0.9) -> QueryMatch:
    return QueryMatch(document_id=document_id, content=content, similarity=similarity)


class TestContextAssembler:
    @pytest.mark.asyncio
    async def test_zero_matches_gives_placeholder(self) -> None:
        lookup = MockDocumentLookup({})
        context = await ContextAssembler(lookup).assemble("q", [])
        assert context == NO_CONTEXT_PLACEHOLDER
        assert lookup.calls == []

    @pytest.mark.asyncio
    async def test_labels_with_document_names(self) -> None:
        lookup = MockDocumentLookup({1: "notes.txt", 2: "other.txt"})
        matches = [_match(1, "Alpha fact."), _match(2, "Gamma fact.", 0.8)]

        context = await ContextAssembler(lookup).assemble("q", matches)

        assert context == (
            CONTEXT_HEADER
            + 'From document "notes.txt": Alpha fact.\n\n'
            + 'From document "other.txt": Gamma fact.\n\n'
        )

    @pytest.mark.asyncio
    async def test_one_failed_lookup_degrades_only_its_snippet(self) -> None:
        lookup = MockDocumentLookup(
            {1: "a.txt", 3: "c.txt"},
            errors={2: StoreReadError(message="connection reset")},
        )
        matches = [_match(1, "first"), _match(2, "second"), _match(3, "third")]

        context = await ContextAssembler(lookup).assemble("q", matches)

        assert 'From document "a.txt": first' in context
        assert "From document ID 2 (details unavailable): second" in context
        assert 'From document "c.txt": third' in context
        assert sorted(lookup.calls) == [1, 2, 3]

    @pytest.mark.asyncio
    async def test_cancelled_lookup_uses_fallback(self) -> None:
        lookup = MockDocumentLookup({1: "a.txt"}, errors={2: asyncio.CancelledError()})
        matches = [_match(1, "first"), _match(2, "second")]

        context = await ContextAssembler(lookup).assemble("q", matches)

        assert 'From document "a.txt": first' in context
        assert "From document ID 2 (details unavailable): second" in context

    @pytest.mark.asyncio
    async def test_missing_document_uses_fallback(self) -> None:
        lookup = MockDocumentLookup({}, errors={9: NotFoundError(9)})
        context = await ContextAssembler(lookup).assemble("q", [_match(9, "orphan")])
        assert "From document ID 9 (details unavailable): orphan" in context

    @pytest.mark.asyncio
    async def test_keeps_match_order_regardless_of_completion(self) -> None:
        class SlowFirstLookup(MockDocumentLookup):
            async def get_document(self, document_id: int) -> Document:
                if document_id == 1:
                    await asyncio.sleep(0.05)
                return await super().get_document(document_id)

        lookup = SlowFirstLookup({1: "slow.txt", 2: "fast.txt"})
        matches = [_match(1, "one"), _match(2, "two")]

        context = await ContextAssembler(lookup, concurrency=2).assemble("q", matches)

        assert context.index("slow.txt") < context.index("fast.txt")

    @pytest.mark.asyncio
    async def test_lookups_run_concurrently_within_bound(self) -> None:
        in_flight = 0
        peak = 0

        class CountingLookup(MockDocumentLookup):
            async def get_document(self, document_id: int) -> Document:
                nonlocal in_flight, peak
                in_flight += 1
                peak = max(peak, in_flight)
                await asyncio.sleep(0.01)
                in_flight -= 1
                return await super().get_document(document_id)

        lookup = CountingLookup({i: f"{i}.txt" for i in range(6)})
        matches = [_match(i, f"c{i}") for i in range(6)]

        await ContextAssembler(lookup, concurrency=3).assemble("q", matches)

        assert peak == 3

    @pytest.mark.asyncio
    async def test_same_document_looked_up_per_match(self) -> None:
        lookup = MockDocumentLookup({1: "notes.txt"})
        matches = [_match(1, "Alpha fact."), _match(1, "Beta fact.", 0.8)]

        context = await ContextAssembler(lookup).assemble("q", matches)

        assert context.count('From document "notes.txt"') == 2
