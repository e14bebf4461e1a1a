"""Text → vector conversion through a remote embedding API."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from langchain_openai import OpenAIEmbeddings

from firesafety_rag.config import settings
from firesafety_rag.errors import ConfigurationError, EmbeddingError, translate_openai_errors

if TYPE_CHECKING:
    from langchain_core.embeddings import Embeddings

logger = logging.getLogger(__name__)


def get_embedding_function(provider: str | None = None) -> Embeddings:
    """Return the configured LangChain embedding function."""
    provider = (provider or settings.embedding_provider).lower()
    if provider == "openai":
        kwargs: dict = {"model": settings.embedding_model}
        if settings.openai_api_key:
            kwargs["api_key"] = settings.openai_api_key
        return OpenAIEmbeddings(**kwargs)
    if provider == "huggingface":
        from langchain_huggingface import HuggingFaceEmbeddings

        return HuggingFaceEmbeddings(model_name=settings.embedding_model)
    raise ConfigurationError(f"Unsupported embedding_provider: {provider!r}")


class Embedder:
    """Thin facade over a LangChain ``Embeddings`` implementation.

    Translates provider errors into the package taxonomy and performs no
    retries; retry policy belongs to the pipelines.

    Parameters
    ----------
    embeddings:
        Embedding function.  When *None*, :func:`get_embedding_function`
        builds one from settings.
    """

    def __init__(self, embeddings: Embeddings | None = None) -> None:
        self._embeddings = embeddings if embeddings is not None else get_embedding_function()

    def embed(self, text: str) -> list[float]:
        """Embed a single query text."""
        with translate_openai_errors("embedding"):
            return list(self._embeddings.embed_query(text))

    def embed_many(self, texts: Sequence[str]) -> list[list[float]]:
        """Embed *texts*; ``result[i]`` is the vector of ``texts[i]``."""
        if not texts:
            return []
        logger.info("Calling embedding endpoint with %d text chunks ...", len(texts))
        with translate_openai_errors("embedding"):
            vectors = self._embeddings.embed_documents(list(texts))
        if len(vectors) != len(texts):
            raise EmbeddingError(f"Expected {len(texts)} embeddings, provider returned {len(vectors)}")
        logger.info("Finished embedding documents")
        return [list(v) for v in vectors]
