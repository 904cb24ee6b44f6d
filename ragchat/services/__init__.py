"""Pipelines built on the provider interfaces.

- **ingestion** -- split -> embed -> store for one document.
- **retrieval_service** -- embed a question and search the store.
- **context_assembler** -- label matches with document names.
- **response_generator** -- one model call over the context.
- **chat_service** -- the three read-path steps in order.
"""

from ragchat.services.chat_service import ChatService
from ragchat.services.context_assembler import ContextAssembler
from ragchat.services.ingestion import IngestionService, SectionSplitter
from ragchat.services.response_generator import ResponseGenerator
from ragchat.services.retrieval_service import RetrievalService

__all__ = [
    "ChatService",
    "ContextAssembler",
    "IngestionService",
    "ResponseGenerator",
    "RetrievalService",
    "SectionSplitter",
]
