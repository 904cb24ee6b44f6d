"""Component factory: wires every provider and service from :class:`Settings`.

All construction happens here via constructor injection, so the CLI (and
tests) receive a flat dict of ready components and never build providers
themselves.  Nothing in this module performs I/O; the store connection is
opened lazily on first use.
"""

from __future__ import annotations

from typing import Any

import structlog

from ragchat.config.settings import Settings
from ragchat.interfaces.vector_store_provider import IVectorStoreProvider
from ragchat.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider
from ragchat.providers.llm.openai_provider import OpenAILLMProvider
from ragchat.providers.vector_store.sqlite_vector_store import SQLiteVectorStore
from ragchat.services.chat_service import ChatService
from ragchat.services.context_assembler import ContextAssembler
from ragchat.services.ingestion.ingestion_service import IngestionService
from ragchat.services.ingestion.splitter import SectionSplitter
from ragchat.services.response_generator import ResponseGenerator
from ragchat.services.retrieval_service import RetrievalService
from ragchat.utils.errors import StoreSetupError

logger = structlog.get_logger(logger_name=__name__)


def build_components(app_settings: Settings) -> dict[str, Any]:
    """Construct every provider and service instance for the application.

    Returns a flat dict of named components.
    """
    # -- Providers --
    vector_store = SQLiteVectorStore(db_path=app_settings.sqlite_db_path)
    embedding_provider = OpenAIEmbeddingProvider(settings=app_settings)
    llm_provider = OpenAILLMProvider(settings=app_settings)

    # -- Write path --
    ingestion_service = IngestionService(
        splitter=SectionSplitter(),
        embedding_provider=embedding_provider,
        vector_store=vector_store,
        rollback_on_failure=app_settings.ingest_rollback_on_failure,
    )

    # -- Read path --
    retrieval_service = RetrievalService(
        embedding_provider=embedding_provider,
        vector_store=vector_store,
        match_threshold=app_settings.match_threshold,
        match_count=app_settings.match_count,
    )
    context_assembler = ContextAssembler(
        lookup=vector_store,
        concurrency=app_settings.context_lookup_concurrency,
    )
    response_generator = ResponseGenerator(
        llm_provider=llm_provider,
        max_tokens=app_settings.max_response_tokens,
    )
    chat_service = ChatService(
        retrieval=retrieval_service,
        assembler=context_assembler,
        generator=response_generator,
    )

    logger.debug(
        "components_built",
        vector_store=vector_store.get_provider_name(),
        embedding=embedding_provider.get_provider_name(),
        llm=llm_provider.get_provider_name(),
    )

    return {
        "vector_store": vector_store,
        "embedding_provider": embedding_provider,
        "llm_provider": llm_provider,
        "ingestion_service": ingestion_service,
        "retrieval_service": retrieval_service,
        "context_assembler": context_assembler,
        "response_generator": response_generator,
        "chat_service": chat_service,
    }


async def require_setup(vector_store: IVectorStoreProvider) -> None:
    """Raise :class:`StoreSetupError` unless every store component exists."""
    status = await vector_store.check_setup()
    if not status.all_exist:
        raise StoreSetupError(
            missing=status.missing,
            provider_name=vector_store.get_provider_name(),
        )
