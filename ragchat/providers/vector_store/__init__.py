"""Vector store gateway adapters.

SQLiteVectorStore implements IVectorStoreProvider
(ragchat/interfaces/vector_store_provider.py) with aiosqlite and a
registered cosine-similarity SQL function.
"""

from ragchat.providers.vector_store.sqlite_vector_store import SQLiteVectorStore

__all__ = ["SQLiteVectorStore"]
