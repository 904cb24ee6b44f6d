"""Utility modules for ragchat.

- **errors** -- Closed exception hierarchy rooted at RagChatError; each
  pipeline boundary raises its own subclass so callers handle failures by
  type rather than by message text.
- **logging** -- structlog setup with a dual-renderer pattern: coloured
  console output in development, structured JSON in production.
- **concurrency** -- semaphore-bounded ``asyncio.gather`` used for the
  concurrent document-name lookups during context assembly.
"""

from ragchat.utils.concurrency import throttled_gather
from ragchat.utils.errors import (
    AmbiguousNameError,
    ConfigurationError,
    EmbeddingError,
    GenerationError,
    NotFoundError,
    RagChatError,
    StoreReadError,
    StoreSearchError,
    StoreSetupError,
    StoreWriteError,
)
from ragchat.utils.logging import configure_logging

__all__ = [
    "AmbiguousNameError",
    "ConfigurationError",
    "EmbeddingError",
    "GenerationError",
    "NotFoundError",
    "RagChatError",
    "StoreReadError",
    "StoreSearchError",
    "StoreSetupError",
    "StoreWriteError",
    "configure_logging",
    "throttled_gather",
]
