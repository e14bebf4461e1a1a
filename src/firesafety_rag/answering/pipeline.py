"""Query pipeline — question in, grounded answer out.

Usage::

    with create_vector_store() as store:
        pipeline = QueryPipeline(store)
        answer = pipeline.answer("What is the required fire resistance of a stair core?")
        print(answer.text)
"""

from __future__ import annotations

import logging

from tenacity import Retrying

from firesafety_rag.answering.generator import AnswerGenerator
from firesafety_rag.answering.prompts import compose
from firesafety_rag.config import settings
from firesafety_rag.errors import NoResultError
from firesafety_rag.ingestion.embedder import Embedder
from firesafety_rag.retrieval.base import VectorStoreBase
from firesafety_rag.retrieval.models import Answer
from firesafety_rag.retry import build_retrying

logger = logging.getLogger(__name__)


class QueryPipeline:
    """Embed a question, retrieve context, and generate an answer.

    Parameters
    ----------
    store:
        An initialized vector-store gateway, owned by the caller.
    embedder / generator:
        Remote facades (built from settings when *None*).
    collection_name:
        Collection to search.
    top_k:
        Number of matches used as context.
    retrying:
        Retry policy applied to every remote call.
    """

    def __init__(
        self,
        store: VectorStoreBase,
        embedder: Embedder | None = None,
        generator: AnswerGenerator | None = None,
        *,
        collection_name: str = settings.collection_name,
        top_k: int = settings.top_k,
        retrying: Retrying | None = None,
    ) -> None:
        self._store = store
        self._embedder = embedder if embedder is not None else Embedder()
        self._generator = generator if generator is not None else AnswerGenerator()
        self.collection_name = collection_name
        self.top_k = top_k
        self._retry = retrying if retrying is not None else build_retrying()

    def answer(self, question: str) -> Answer:
        """Answer *question* from the top-K matching chunks.

        Raises
        ------
        NoResultError
            If the collection returned no matches; the model is not called.
        """
        logger.info("Querying vector store %r...", self.collection_name)
        query_vector = self._retry(self._embedder.embed, question)
        matches = self._retry(self._store.query, self.collection_name, query_vector, self.top_k)
        logger.info("Found %d matches...", len(matches))
        if not matches:
            raise NoResultError(f"No matches in {self.collection_name!r} for the question")

        context = " ".join(match.text for match in matches)
        prompt = compose(context, question)
        logger.debug("Formatted prompt: %s", prompt)

        text = self._retry(self._generator.generate, prompt)
        return Answer(text=text, supporting_context=context, matches=matches)
