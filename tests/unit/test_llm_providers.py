"""Unit tests for the OpenAI LLM provider adapter."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import openai
import pytest

from ragchat.config.settings import Settings
from ragchat.providers.llm.openai_provider import OpenAILLMProvider
from ragchat.utils.errors import ConfigurationError, GenerationError

_PATCH_TARGET = "ragchat.providers.llm.openai_provider.openai.AsyncOpenAI"


def _settings(**overrides) -> Settings:
    defaults = {
        "openai_api_key": "sk-test",
        "openai_base_url": "",
        "openai_chat_model": "",
    }
    defaults.update(overrides)
    return Settings(_env_file=None, **defaults)


def _completion(content: str | None) -> MagicMock:
    message = MagicMock()
    message.content = content
    choice = MagicMock()
    choice.message = message
    response = MagicMock()
    response.choices = [choice]
    response.usage = MagicMock(total_tokens=42)
    return response


def _provider_with(mock_client: AsyncMock, **overrides) -> OpenAILLMProvider:
    provider = OpenAILLMProvider(_settings(**overrides))
    with patch(_PATCH_TARGET, return_value=mock_client):
        provider._get_client()
    return provider


class TestOpenAILLMProvider:
    def test_get_provider_name(self) -> None:
        assert OpenAILLMProvider(_settings()).get_provider_name() == "openai"

    def test_get_provider_name_compatible(self) -> None:
        provider = OpenAILLMProvider(_settings(openai_base_url="http://localhost:9000/v1"))
        assert provider.get_provider_name() == "openai-compatible"

    def test_is_available_without_key(self) -> None:
        assert OpenAILLMProvider(_settings(openai_api_key="")).is_available() is False

    @pytest.mark.asyncio
    async def test_complete_without_key_raises_configuration_error(self) -> None:
        provider = OpenAILLMProvider(_settings(openai_api_key=""))

        with patch(_PATCH_TARGET) as mock_cls:
            with pytest.raises(ConfigurationError, match="OPENAI_API_KEY"):
                await provider.complete("s", "u")
        mock_cls.assert_not_called()

    @pytest.mark.asyncio
    async def test_complete_success(self) -> None:
        mock_client = AsyncMock()
        mock_client.chat.completions.create = AsyncMock(return_value=_completion("Answer."))
        provider = _provider_with(mock_client)

        result = await provider.complete("system", "user", max_tokens=1000)

        assert result == "Answer."
        kwargs = mock_client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-4o"
        assert kwargs["max_tokens"] == 1000
        assert kwargs["messages"] == [
            {"role": "system", "content": "system"},
            {"role": "user", "content": "user"},
        ]

    @pytest.mark.asyncio
    async def test_custom_model(self) -> None:
        mock_client = AsyncMock()
        mock_client.chat.completions.create = AsyncMock(return_value=_completion("ok"))
        provider = _provider_with(mock_client, openai_chat_model="gpt-4o-mini")

        await provider.complete("s", "u")

        assert mock_client.chat.completions.create.call_args.kwargs["model"] == "gpt-4o-mini"

    @pytest.mark.asyncio
    async def test_api_error_wrapped(self) -> None:
        mock_client = AsyncMock()
        mock_client.chat.completions.create = AsyncMock(
            side_effect=openai.APIError(
                message="Server error",
                request=MagicMock(),
                body=None,
            )
        )
        provider = _provider_with(mock_client)

        with pytest.raises(GenerationError) as exc_info:
            await provider.complete("s", "u")
        assert exc_info.value.provider_name == "openai"

    @pytest.mark.asyncio
    async def test_timeout_wrapped(self) -> None:
        mock_client = AsyncMock()
        mock_client.chat.completions.create = AsyncMock(
            side_effect=openai.APITimeoutError(request=MagicMock())
        )
        provider = _provider_with(mock_client)

        with pytest.raises(GenerationError, match="timed out"):
            await provider.complete("s", "u")

    @pytest.mark.asyncio
    async def test_no_choices_raises(self) -> None:
        response = _completion("unused")
        response.choices = []
        mock_client = AsyncMock()
        mock_client.chat.completions.create = AsyncMock(return_value=response)
        provider = _provider_with(mock_client)

        with pytest.raises(GenerationError, match="no choices"):
            await provider.complete("s", "u")

    @pytest.mark.asyncio
    async def test_none_content_raises(self) -> None:
        mock_client = AsyncMock()
        mock_client.chat.completions.create = AsyncMock(return_value=_completion(None))
        provider = _provider_with(mock_client)

        with pytest.raises(GenerationError, match="empty response"):
            await provider.complete("s", "u")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("content", ["", "   \n"])
    async def test_blank_content_raises(self, content: str) -> None:
        mock_client = AsyncMock()
        mock_client.chat.completions.create = AsyncMock(return_value=_completion(content))
        provider = _provider_with(mock_client)

        with pytest.raises(GenerationError, match="empty response"):
            await provider.complete("s", "u")
