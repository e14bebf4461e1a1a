"""
Retrieval — vector-store gateways and the models they exchange.

This module wraps the vector store behind a clean interface so that the
pipelines never need to know which service is backing retrieval.

Public surface
--------------
- :class:`VectorStoreBase` — abstract gateway (collection bootstrap, batched upsert, top-K query).
- :class:`PineconeVectorStore` — default hosted backend.
- :class:`ChromaVectorStore` — self-hosted backend.
- :func:`create_vector_store` — build the backend selected in settings.
"""

from __future__ import annotations

from typing import Any

from firesafety_rag.config import settings
from firesafety_rag.errors import ConfigurationError
from firesafety_rag.retrieval.base import VectorStoreBase
from firesafety_rag.retrieval.models import (
    Answer,
    Chunk,
    IngestionReport,
    QueryMatch,
    SourceDocument,
    VectorRecord,
)

__all__ = [
    "Answer",
    "ChromaVectorStore",
    "Chunk",
    "IngestionReport",
    "PineconeVectorStore",
    "QueryMatch",
    "SourceDocument",
    "VectorRecord",
    "VectorStoreBase",
    "create_vector_store",
]


def create_vector_store(backend: str | None = None, **kwargs: Any) -> VectorStoreBase:
    """Construct (but do not initialize) the configured vector-store backend."""
    backend = (backend or settings.vector_store_backend).lower()
    if backend == "pinecone":
        from firesafety_rag.retrieval.pinecone_store import PineconeVectorStore

        return PineconeVectorStore(**kwargs)
    if backend == "chroma":
        from firesafety_rag.retrieval.chroma_store import ChromaVectorStore

        return ChromaVectorStore(**kwargs)
    raise ConfigurationError(f"Unsupported vector_store_backend: {backend!r}")


def __getattr__(name: str):  # noqa: ANN001
    """Lazy-import backends so that only the configured SDK is loaded."""
    if name == "PineconeVectorStore":
        from firesafety_rag.retrieval.pinecone_store import PineconeVectorStore

        return PineconeVectorStore
    if name == "ChromaVectorStore":
        from firesafety_rag.retrieval.chroma_store import ChromaVectorStore

        return ChromaVectorStore
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
