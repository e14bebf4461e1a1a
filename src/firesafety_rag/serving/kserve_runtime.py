"""KServe custom model runtime for the query pipeline."""

from __future__ import annotations

import logging
from typing import Any

import kserve

from firesafety_rag.answering.generator import AnswerGenerator
from firesafety_rag.answering.pipeline import QueryPipeline
from firesafety_rag.config import settings
from firesafety_rag.errors import ConfigurationError
from firesafety_rag.ingestion.embedder import Embedder
from firesafety_rag.retrieval import create_vector_store
from firesafety_rag.retrieval.base import VectorStoreBase


class FireSafetyRAGModel(kserve.Model):
    """KServe-compatible model that wraps :class:`QueryPipeline`.

    This class implements the ``predict`` interface expected by KServe
    so the service can be deployed as an ``InferenceService``.
    """

    def __init__(
        self,
        name: str = "firesafety-rag",
        store: VectorStoreBase | None = None,
        embedder: Embedder | None = None,
        generator: AnswerGenerator | None = None,
    ) -> None:
        super().__init__(name)
        self.store = store
        self.embedder = embedder
        self.generator = generator
        self.pipeline: QueryPipeline | None = None
        self.ready = False

    def load(self) -> bool:
        """Open the vector store and build the pipeline (called once at startup)."""
        if self.store is None:
            self.store = create_vector_store()
        self.store.initialize()
        self.pipeline = QueryPipeline(self.store, self.embedder, self.generator)
        self.ready = True
        return self.ready

    def predict(self, payload: dict[str, Any], headers: dict[str, str] | None = None) -> dict:
        """Run inference, called on every request.

        Parameters
        ----------
        payload:
            ``{"instances": [{"question": "..."}]}``.
        headers:
            Optional HTTP headers.

        Returns
        -------
        dict
            ``{"predictions": [{"data": "...", "context": "..."}]}``

        Raises
        ------
        ConfigurationError
            If an instance has a missing or blank question.
        """
        if self.pipeline is None:
            raise RuntimeError("Model is not loaded; call load() first")

        predictions = []
        for instance in payload.get("instances", []):
            question = instance.get("question", "")
            if not question.strip():
                raise ConfigurationError("question must not be empty")
            answer = self.pipeline.answer(question)
            predictions.append({"data": answer.text, "context": answer.supporting_context})

        return {"predictions": predictions}


if __name__ == "__main__":
    logging.basicConfig(level=settings.log_level)
    model = FireSafetyRAGModel()
    model.load()
    kserve.ModelServer().start([model])
