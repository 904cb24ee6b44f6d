"""Pydantic data models shared across providers, services and the CLI."""

from ragchat.models.rag import (
    ChatAnswer,
    Document,
    DocumentSummary,
    IngestionResult,
    NewSection,
    QueryMatch,
    SetupStatus,
)

__all__ = [
    "ChatAnswer",
    "Document",
    "DocumentSummary",
    "IngestionResult",
    "NewSection",
    "QueryMatch",
    "SetupStatus",
]
