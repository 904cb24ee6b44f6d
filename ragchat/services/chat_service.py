"""Read path in one call: retrieve -> assemble context -> generate answer."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from ragchat.models.rag import ChatAnswer

if TYPE_CHECKING:
    from ragchat.services.context_assembler import ContextAssembler
    from ragchat.services.response_generator import ResponseGenerator
    from ragchat.services.retrieval_service import RetrievalService

logger = structlog.get_logger(logger_name=__name__)


class ChatService:
    """Answers questions against the ingested documents.

    Any typed error from retrieval or generation propagates; a failed
    document-name lookup only degrades that match's label in the context.
    """

    def __init__(
        self,
        retrieval: RetrievalService,
        assembler: ContextAssembler,
        generator: ResponseGenerator,
    ) -> None:
        self._retrieval = retrieval
        self._assembler = assembler
        self._generator = generator

    async def ask(
        self,
        query: str,
        threshold: float | None = None,
        limit: int | None = None,
    ) -> ChatAnswer:
        matches = await self._retrieval.retrieve(query, threshold=threshold, limit=limit)
        context = await self._assembler.assemble(query, matches)
        answer = await self._generator.generate(query, context)
        logger.info("question_answered", matches=len(matches))
        return ChatAnswer(answer=answer, context=context, matches=matches)
