"""Concrete adapters for the interfaces in ``ragchat.interfaces``."""
