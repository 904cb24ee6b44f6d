"""Public interface definitions for all external service providers.

Every external service in ragchat is reached only through the abstract
base classes in this package.  Concrete adapters in ``ragchat/providers/``
implement them and are injected by ``ragchat.main.build_components``, so
unit tests can substitute fakes without real API or database calls.

    Interface              ->  Concrete implementation
    -----------------------------------------------------------
    IEmbeddingProvider     ->  OpenAIEmbeddingProvider
    ILLMProvider           ->  OpenAILLMProvider
    IVectorStoreProvider   ->  SQLiteVectorStore
    IDocumentLookup        ->  SQLiteVectorStore (via IVectorStoreProvider)
"""

from ragchat.interfaces.document_lookup import IDocumentLookup
from ragchat.interfaces.embedding_provider import IEmbeddingProvider
from ragchat.interfaces.llm_provider import ILLMProvider
from ragchat.interfaces.vector_store_provider import IVectorStoreProvider

__all__ = [
    "IDocumentLookup",
    "IEmbeddingProvider",
    "ILLMProvider",
    "IVectorStoreProvider",
]
