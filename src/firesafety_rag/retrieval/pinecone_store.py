"""Pinecone implementation of the vector-store abstraction."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from typing import Any

from pinecone import (
    ApiError,
    Pinecone,
    PineconeConnectionError,
    PineconeTimeoutError,
    PodSpec,
    ServerlessSpec,
)

from firesafety_rag.config import settings
from firesafety_rag.errors import AuthenticationError, RateLimitError, TransientNetworkError
from firesafety_rag.retrieval.base import VectorStoreBase
from firesafety_rag.retrieval.models import QueryMatch, VectorRecord

logger = logging.getLogger(__name__)

_SERVICE = "pinecone"


@contextmanager
def _translate_pinecone_errors() -> Iterator[None]:
    """Map Pinecone HTTP failures onto the shared error taxonomy."""
    try:
        yield
    except ApiError as exc:
        status = exc.status_code or 0
        if status in (401, 403):
            raise AuthenticationError(f"{_SERVICE}: {exc}", service=_SERVICE) from exc
        if status == 429:
            raise RateLimitError(f"{_SERVICE}: {exc}", service=_SERVICE) from exc
        if status >= 500:
            raise TransientNetworkError(f"{_SERVICE}: {exc}", service=_SERVICE) from exc
        raise
    except (PineconeConnectionError, PineconeTimeoutError) as exc:
        raise TransientNetworkError(f"{_SERVICE}: {exc}", service=_SERVICE) from exc


class PineconeVectorStore(VectorStoreBase):
    """Pinecone-backed vector store.

    A Pinecone *index* plays the role of a collection.

    Parameters
    ----------
    api_key:
        Pinecone API key.
    environment:
        Pod environment.  When empty, indexes are created serverless in
        *cloud* / *region*.
    client:
        Pre-built ``Pinecone`` client (tests inject a mock).
    """

    supports_readiness_probe = True

    def __init__(
        self,
        *,
        api_key: str = settings.pinecone_api_key,
        environment: str = settings.pinecone_environment,
        cloud: str = settings.pinecone_cloud,
        region: str = settings.pinecone_region,
        client: Any = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self._api_key = api_key
        self._environment = environment
        self._cloud = cloud
        self._region = region
        self._client = client
        self._indexes: dict[str, Any] = {}

    # -- lifecycle ------------------------------------------------------------

    def initialize(self) -> None:
        if self._client is None:
            self._client = Pinecone(api_key=self._api_key)

    def close(self) -> None:
        super().close()
        self._indexes.clear()
        self._client = None

    @property
    def client(self) -> Any:
        if self._client is None:
            raise RuntimeError("PineconeVectorStore is not initialized; call initialize() first")
        return self._client

    def _index(self, name: str) -> Any:
        if name not in self._indexes:
            logger.debug("Retrieving Pinecone index %r", name)
            self._indexes[name] = self.client.Index(name)
        return self._indexes[name]

    # -- VectorStoreBase overrides --------------------------------------------

    def list_collections(self) -> list[str]:
        with _translate_pinecone_errors():
            return list(self.client.list_indexes().names())

    def delete(self, name: str, ids: Sequence[str]) -> None:
        if not ids:
            return
        with _translate_pinecone_errors():
            self._index(name).delete(ids=list(ids))

    def list_record_ids(self, name: str, source: str) -> list[str]:
        # Prefix listing also returns ids of sources that merely share the
        # prefix (``doc1_`` vs ``doc1_extra_0``), so filter to <source>_<n>.
        prefix = f"{source}_"
        ids: list[str] = []
        with _translate_pinecone_errors():
            for page in self._index(name).list(prefix=prefix):
                ids.extend(item.id for item in page)
        return [i for i in ids if i[len(prefix) :].isdigit()]

    def health_check(self) -> bool:
        try:
            self.client.list_indexes()
            return True
        except Exception:
            logger.warning("Pinecone health-check failed", exc_info=True)
            return False

    def _create_collection(self, name: str, dimension: int) -> None:
        if self._environment:
            spec: Any = PodSpec(environment=self._environment)
        else:
            spec = ServerlessSpec(cloud=self._cloud, region=self._region)
        with _translate_pinecone_errors():
            # timeout=-1: return immediately, readiness is polled by the base class.
            self.client.create_index(
                name=name,
                dimension=dimension,
                metric="cosine",
                spec=spec,
                timeout=-1,
            )

    def _collection_ready(self, name: str) -> bool:
        with _translate_pinecone_errors():
            status = self.client.describe_index(name).status
        return bool(status["ready"])

    def _collection_dimension(self, name: str) -> int | None:
        with _translate_pinecone_errors():
            description = self.client.describe_index(name)
        dimension = getattr(description, "dimension", None)
        return int(dimension) if dimension is not None else None

    def _upsert_batch(self, name: str, batch: list[VectorRecord]) -> None:
        vectors = [
            {"id": record.id, "values": record.values, "metadata": record.metadata}
            for record in batch
        ]
        with _translate_pinecone_errors():
            self._index(name).upsert(vectors=vectors)

    def _query(self, name: str, vector: list[float], top_k: int) -> list[QueryMatch]:
        with _translate_pinecone_errors():
            response = self._index(name).query(
                vector=vector,
                top_k=top_k,
                include_metadata=True,
                include_values=True,
            )
        return [
            QueryMatch(
                id=match.id,
                score=match.score,
                values=list(match.values or []),
                metadata=dict(match.metadata or {}),
            )
            for match in response.matches
        ]
