"""LLM provider adapters.

OpenAILLMProvider implements ILLMProvider (ragchat/interfaces/llm_provider.py)
for gpt-4o or any OpenAI-compatible chat model.
"""

from ragchat.providers.llm.openai_provider import OpenAILLMProvider

__all__ = ["OpenAILLMProvider"]
