"""Final answer generation: one language-model call over the assembled context."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from ragchat.interfaces.llm_provider import ILLMProvider

logger = structlog.get_logger(logger_name=__name__)

SYSTEM_PROMPT = (
    "You are a helpful assistant. Answer the user's question based on the "
    "provided context. If the context doesn't contain relevant information, "
    "say so and provide a general response based on your knowledge."
)

_DEFAULT_MAX_TOKENS = 1000


def build_user_prompt(query: str, context: str) -> str:
    return f"Context:\n{context}\nQuestion: {query}"


class ResponseGenerator:
    """Asks the language model to answer *query* from *context*.

    Failures surface as :class:`~ragchat.utils.errors.GenerationError` from
    the provider; there is no retry.
    """

    def __init__(
        self,
        llm_provider: ILLMProvider,
        max_tokens: int = _DEFAULT_MAX_TOKENS,
    ) -> None:
        self._llm = llm_provider
        self._max_tokens = max_tokens

    async def generate(self, query: str, context: str) -> str:
        answer = await self._llm.complete(
            system_prompt=SYSTEM_PROMPT,
            user_prompt=build_user_prompt(query, context),
            max_tokens=self._max_tokens,
        )
        logger.info(
            "response_generated",
            provider=self._llm.get_provider_name(),
            answer_length=len(answer),
        )
        return answer
