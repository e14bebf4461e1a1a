"""Shared pytest configuration and fixtures."""

from __future__ import annotations

import math
from collections.abc import Sequence

import pytest
from langchain_core.embeddings import DeterministicFakeEmbedding
from langchain_core.language_models import FakeListChatModel

from firesafety_rag.answering.generator import AnswerGenerator
from firesafety_rag.errors import TransientNetworkError
from firesafety_rag.ingestion.embedder import Embedder
from firesafety_rag.retrieval.base import VectorStoreBase
from firesafety_rag.retrieval.models import QueryMatch, VectorRecord
from firesafety_rag.retry import build_retrying

DIM = 8


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: marks tests requiring external services")


# ── In-memory vector store for deterministic testing ────────────────────


class InMemoryVectorStore(VectorStoreBase):
    """Fake backend that keeps collections in dicts and records every call."""

    def __init__(self, **kwargs) -> None:
        kwargs.setdefault("settle_seconds", 5.0)
        self.sleeps: list[float] = []
        super().__init__(sleep=self.sleeps.append, **kwargs)
        self.collections: dict[str, dict[str, VectorRecord]] = {}
        self.collection_dims: dict[str, int] = {}
        self.create_calls: list[tuple[str, int]] = []
        self.batches: list[list[VectorRecord]] = []
        self.deleted: list[str] = []

    def list_collections(self) -> list[str]:
        return list(self.collections)

    def delete(self, name: str, ids: Sequence[str]) -> None:
        for record_id in ids:
            self.collections[name].pop(record_id, None)
            self.deleted.append(record_id)

    def list_record_ids(self, name: str, source: str) -> list[str]:
        return [r.id for r in self.collections[name].values() if r.metadata.get("source") == source]

    def health_check(self) -> bool:
        return True

    def _create_collection(self, name: str, dimension: int) -> None:
        self.create_calls.append((name, dimension))
        self.collections[name] = {}
        self.collection_dims[name] = dimension

    def _collection_dimension(self, name: str) -> int | None:
        return self.collection_dims.get(name)

    def _upsert_batch(self, name: str, batch: list[VectorRecord]) -> None:
        self.batches.append(batch)
        for record in batch:
            self.collections[name][record.id] = record

    def _query(self, name: str, vector: list[float], top_k: int) -> list[QueryMatch]:
        scored = [
            QueryMatch(id=r.id, score=_cosine(vector, r.values), values=r.values, metadata=r.metadata)
            for r in self.collections.get(name, {}).values()
        ]
        return sorted(scored, key=lambda m: m.score, reverse=True)[:top_k]


class ProbedStore(InMemoryVectorStore):
    """Fake backend with a readiness probe.

    Turns ready after *polls_needed* polls; the first *failing_polls* polls
    raise :class:`TransientNetworkError`.  Upserts made while not ready are
    counted in ``unready_upserts``.
    """

    supports_readiness_probe = True

    def __init__(self, polls_needed: int, failing_polls: int = 0, **kwargs) -> None:
        super().__init__(**kwargs)
        self.polls_needed = polls_needed
        self.failing_polls = failing_polls
        self.polls = 0
        self.unready_upserts = 0

    def _collection_ready(self, name: str) -> bool:
        self.polls += 1
        if self.polls <= self.failing_polls:
            raise TransientNetworkError("describe timed out")
        return self.polls >= self.polls_needed

    def _upsert_batch(self, name: str, batch: list[VectorRecord]) -> None:
        if self.polls < self.polls_needed:
            self.unready_upserts += 1
        super()._upsert_batch(name, batch)


def _cosine(a: list[float], b: list[float]) -> float:
    dot = sum(x * y for x, y in zip(a, b))
    norm = math.sqrt(sum(x * x for x in a)) * math.sqrt(sum(y * y for y in b))
    return dot / norm if norm else 0.0


# ── Fixtures ────────────────────────────────────────────────────────────


@pytest.fixture()
def store() -> InMemoryVectorStore:
    return InMemoryVectorStore()


@pytest.fixture()
def embedder() -> Embedder:
    return Embedder(DeterministicFakeEmbedding(size=DIM))


@pytest.fixture()
def generator() -> AnswerGenerator:
    return AnswerGenerator(FakeListChatModel(responses=["Use a 60 minute fire-rated door."]))


@pytest.fixture()
def no_wait_retrying():
    return build_retrying(max_attempts=3, initial_wait=0, max_wait=0, sleep=lambda _: None)
