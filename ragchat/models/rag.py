"""Data models for the ragchat document store and retrieval pipeline.

Defines Pydantic v2 models for stored documents, sections awaiting
insertion, search matches, ingestion results and the store setup check.
All models use frozen config so nothing downstream can mutate a record
after the store or a pipeline stage produced it.

Lifecycle overview:

    1. INGESTION: a document row is inserted, its content is split into
       sections, each section is embedded, then all sections are inserted
       in one bulk call (see ragchat/services/ingestion/).
    2. RETRIEVAL: a question is embedded and the store returns the most
       similar sections as :class:`QueryMatch` records.
    3. GENERATION: matches are labelled with their document names and sent
       to the language model as context.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Document: one ingested text, owned by the store.
# ---------------------------------------------------------------------------
class Document(BaseModel):
    """A stored document.  Identity is the store-generated ``id``."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(description="Store-generated document identifier.")
    name: str = Field(min_length=1, description="Display name; not necessarily unique.")
    content: str = Field(description="Full original text of the document.")
    created_at: datetime | None = Field(
        default=None, description="Insertion timestamp assigned by the store."
    )


class DocumentSummary(BaseModel):
    """A row of the document listing.

    ``section_count`` is zero both for blank documents and for documents
    whose ingestion failed after the metadata insert, so operators can find
    and delete orphans.
    """

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    created_at: datetime | None = None
    section_count: int = Field(default=0, ge=0)


# ---------------------------------------------------------------------------
# Sections
# ---------------------------------------------------------------------------
class NewSection(BaseModel):
    """An embedded section ready for the bulk insert."""

    model_config = ConfigDict(frozen=True)

    document_id: int = Field(description="Owning document; must exist at insert time.")
    content: str = Field(min_length=1, description="Trimmed chunk text.")
    embedding: list[float] = Field(
        min_length=1, description="Embedding vector; fixed length per model."
    )


class QueryMatch(BaseModel):
    """A section returned by similarity search.  Ephemeral, never persisted."""

    model_config = ConfigDict(frozen=True)

    document_id: int
    content: str
    similarity: float = Field(description="Cosine similarity between query and section.")


# ---------------------------------------------------------------------------
# Pipeline results
# ---------------------------------------------------------------------------
class IngestionResult(BaseModel):
    """Summary of a single ingestion run, returned to the CLI."""

    model_config = ConfigDict(frozen=True)

    document_id: int
    document_name: str
    sections_created: int = Field(default=0, ge=0)
    ingestion_time: float = Field(
        default=0.0, ge=0.0, description="Wall-clock seconds for the run."
    )


class SetupStatus(BaseModel):
    """Result of the store's setup check."""

    model_config = ConfigDict(frozen=True)

    missing: list[str] = Field(default_factory=list)

    @property
    def all_exist(self) -> bool:
        return not self.missing


class ChatAnswer(BaseModel):
    """Final answer for one question, with the context it was built from."""

    model_config = ConfigDict(frozen=True)

    answer: str
    context: str
    matches: list[QueryMatch] = Field(default_factory=list)
