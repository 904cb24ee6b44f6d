"""Configuration module: exports the pydantic-settings ``Settings`` class."""

from ragchat.config.settings import Settings

__all__ = ["Settings"]
