"""OpenAI-compatible LLM provider adapter.

Wraps the ``openai`` async client to implement :class:`ILLMProvider`.
When a custom ``openai_base_url`` is configured (e.g. TogetherAI, Anyscale,
Fireworks), the client points at that URL instead of the default OpenAI
endpoint, so this single adapter covers any OpenAI-compatible chat API.
"""

from __future__ import annotations

import openai
import structlog

from ragchat.config.settings import Settings
from ragchat.interfaces.llm_provider import ILLMProvider
from ragchat.utils.errors import ConfigurationError, GenerationError

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_MODEL = "gpt-4o"


class OpenAILLMProvider(ILLMProvider):
    """LLM provider backed by an OpenAI-compatible chat completions API.

    Uses ``gpt-4o`` by default; override with ``OPENAI_CHAT_MODEL``.
    """

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._api_key = settings.openai_api_key
        self._client: openai.AsyncOpenAI | None = None
        self._model = settings.openai_chat_model or _DEFAULT_MODEL
        self._provider_label = (
            "openai-compatible" if settings.openai_base_url else "openai"
        )

    def _get_client(self) -> openai.AsyncOpenAI:
        # Built on first use; the client refuses an empty key.
        if self._client is None:
            if not self._api_key:
                raise ConfigurationError(
                    message="Missing required configuration: OPENAI_API_KEY.",
                    provider_name=self.get_provider_name(),
                )
            client_kwargs: dict = {
                "api_key": self._api_key,
                "timeout": openai.Timeout(60.0, connect=5.0),
            }
            if self._settings.openai_base_url:
                client_kwargs["base_url"] = self._settings.openai_base_url
            self._client = openai.AsyncOpenAI(**client_kwargs)
        return self._client

    # ------------------------------------------------------------------
    # ILLMProvider implementation
    # ------------------------------------------------------------------

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.3,
        max_tokens: int = 1000,
    ) -> str:
        """Generate a text completion via the chat completions API."""
        client = self._get_client()
        try:
            response = await client.chat.completions.create(
                model=self._model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except openai.APITimeoutError as exc:
            raise GenerationError(
                message=f"{self._provider_label} timed out",
                provider_name=self.get_provider_name(),
            ) from exc
        except openai.APIError as exc:
            raise GenerationError(
                message=f"{self._provider_label} API error: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        if not response.choices:
            raise GenerationError(
                message=f"{self._provider_label} returned no choices",
                provider_name=self.get_provider_name(),
            )
        content = response.choices[0].message.content
        if not content or not content.strip():
            raise GenerationError(
                message=f"{self._provider_label} returned empty response",
                provider_name=self.get_provider_name(),
            )

        logger.info(
            "openai_completion",
            model=self._model,
            provider=self._provider_label,
            tokens=response.usage.total_tokens if response.usage else None,
        )
        return content

    def is_available(self) -> bool:
        """Return ``True`` if an API key is configured (doesn't verify it works)."""
        return bool(self._api_key)

    def get_provider_name(self) -> str:
        """Return 'openai' or 'openai-compatible' depending on configuration."""
        return self._provider_label
