"""Chroma implementation of the vector-store abstraction."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from typing import Any

import chromadb
import httpx
from chromadb.errors import ChromaError

from firesafety_rag.config import settings
from firesafety_rag.errors import AuthenticationError, RateLimitError, TransientNetworkError
from firesafety_rag.retrieval.base import VectorStoreBase
from firesafety_rag.retrieval.models import QueryMatch, VectorRecord

logger = logging.getLogger(__name__)

_SERVICE = "chroma"


@contextmanager
def _translate_chroma_errors() -> Iterator[None]:
    """Map Chroma server and transport failures onto the shared error taxonomy."""
    try:
        yield
    except ChromaError as exc:
        status = exc.code()
        if status in (401, 403):
            raise AuthenticationError(f"{_SERVICE}: {exc}", service=_SERVICE) from exc
        if status == 429:
            raise RateLimitError(f"{_SERVICE}: {exc}", service=_SERVICE) from exc
        if status >= 500:
            raise TransientNetworkError(f"{_SERVICE}: {exc}", service=_SERVICE) from exc
        raise
    except httpx.TransportError as exc:
        raise TransientNetworkError(f"{_SERVICE}: {exc}", service=_SERVICE) from exc


class ChromaVectorStore(VectorStoreBase):
    """Chroma-backed vector store.

    Chroma does not record a dimension for a collection, so it is kept in
    the collection metadata next to the ``hnsw:space`` distance setting.

    Parameters
    ----------
    host:
        Chroma server hostname.
    port:
        Chroma server port.
    client:
        Pre-built Chroma client (tests inject a mock).
    """

    # Creation is synchronous, the collection is usable as soon as it exists.
    supports_readiness_probe = True

    def __init__(
        self,
        *,
        host: str = settings.chroma_host,
        port: int = settings.chroma_port,
        client: Any = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self._host = host
        self._port = port
        self._client = client

    # -- lifecycle ------------------------------------------------------------

    def initialize(self) -> None:
        if self._client is None:
            self._client = chromadb.HttpClient(host=self._host, port=self._port)

    def close(self) -> None:
        super().close()
        self._client = None

    @property
    def client(self) -> Any:
        if self._client is None:
            raise RuntimeError("ChromaVectorStore is not initialized; call initialize() first")
        return self._client

    def _collection(self, name: str) -> Any:
        return self.client.get_collection(name)

    # -- VectorStoreBase overrides --------------------------------------------

    def list_collections(self) -> list[str]:
        with _translate_chroma_errors():
            collections = self.client.list_collections()
        # chromadb >= 0.6 returns names, older releases return Collection objects.
        return [c if isinstance(c, str) else c.name for c in collections]

    def delete(self, name: str, ids: Sequence[str]) -> None:
        if not ids:
            return
        with _translate_chroma_errors():
            self._collection(name).delete(ids=list(ids))

    def list_record_ids(self, name: str, source: str) -> list[str]:
        with _translate_chroma_errors():
            result = self._collection(name).get(where={"source": source}, include=[])
        return list(result.get("ids", []))

    def health_check(self) -> bool:
        try:
            self.client.heartbeat()
            return True
        except Exception:
            logger.warning("Chroma health-check failed", exc_info=True)
            return False

    def _create_collection(self, name: str, dimension: int) -> None:
        with _translate_chroma_errors():
            self.client.create_collection(
                name=name,
                metadata={"hnsw:space": "cosine", "dimension": dimension},
            )

    def _collection_dimension(self, name: str) -> int | None:
        with _translate_chroma_errors():
            metadata = self._collection(name).metadata or {}
        dimension = metadata.get("dimension")
        return int(dimension) if dimension is not None else None

    def _upsert_batch(self, name: str, batch: list[VectorRecord]) -> None:
        with _translate_chroma_errors():
            self._collection(name).upsert(
                ids=[record.id for record in batch],
                embeddings=[record.values for record in batch],
                documents=[record.metadata.get("text", "") for record in batch],
                metadatas=[record.metadata for record in batch],
            )

    def _query(self, name: str, vector: list[float], top_k: int) -> list[QueryMatch]:
        with _translate_chroma_errors():
            results = self._collection(name).query(
                query_embeddings=[vector],
                n_results=top_k,
                include=["metadatas", "distances", "embeddings"],
            )

        ids = results.get("ids", [[]])[0]
        metas = results.get("metadatas", [[]])[0]
        distances = results.get("distances", [[]])[0]
        embeddings = results.get("embeddings")
        vectors = embeddings[0] if embeddings is not None else [[] for _ in ids]

        matches: list[QueryMatch] = []
        for doc_id, meta, dist, values in zip(ids, metas, distances, vectors):
            # Cosine space returns 1 - cos_sim as the distance.
            matches.append(
                QueryMatch(
                    id=doc_id,
                    score=1.0 - float(dist),
                    values=[float(v) for v in values],
                    metadata=dict(meta or {}),
                )
            )
        return matches
