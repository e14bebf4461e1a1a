"""Ingestion pipeline — documents in, vector records out.

For each document, in order::

    split → embed (one batched call) → build VectorRecords → upsert (batched)

The collection is ensured once before the first document.  Ingestion is
not transactional: an error aborts the call, records of documents that
were already processed stay written.  Record ids are ``<source>_<index>``
so re-ingesting a document overwrites its records instead of duplicating
them.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from tenacity import Retrying

from firesafety_rag.config import settings
from firesafety_rag.ingestion.chunker import split_document
from firesafety_rag.ingestion.embedder import Embedder
from firesafety_rag.retrieval.base import VectorStoreBase
from firesafety_rag.retrieval.models import IngestionReport, SourceDocument, VectorRecord
from firesafety_rag.retry import build_retrying

logger = logging.getLogger(__name__)


class IngestionPipeline:
    """Chunk, embed and store documents in one collection.

    Parameters
    ----------
    store:
        An initialized vector-store gateway, owned by the caller.
    embedder:
        Embedding facade (built from settings when *None*).
    collection_name / dimension:
        Target collection and its vector dimension.
    chunk_size:
        Maximum characters per chunk.
    prune_stale_records:
        After writing a document, delete its records whose index is
        beyond the new chunk count (left over from a longer version).
    retrying:
        Retry policy applied to every remote call.
    """

    def __init__(
        self,
        store: VectorStoreBase,
        embedder: Embedder | None = None,
        *,
        collection_name: str = settings.collection_name,
        dimension: int = settings.embedding_dimension,
        chunk_size: int = settings.chunk_size,
        prune_stale_records: bool = settings.prune_stale_records,
        retrying: Retrying | None = None,
    ) -> None:
        self._store = store
        self._embedder = embedder if embedder is not None else Embedder()
        self.collection_name = collection_name
        self.dimension = dimension
        self.chunk_size = chunk_size
        self.prune_stale_records = prune_stale_records
        self._retry = retrying if retrying is not None else build_retrying()

    def ingest(self, documents: Iterable[SourceDocument]) -> IngestionReport:
        """Ingest *documents* sequentially and return what was written."""
        report = IngestionReport()
        self._retry(self._store.ensure_collection, self.collection_name, self.dimension)

        for document in documents:
            written, pruned = self._ingest_one(document)
            report.documents += 1
            report.chunks += written
            report.records_pruned += pruned

        logger.info(
            "Ingested %d documents (%d chunks, %d stale records pruned) into %r",
            report.documents,
            report.chunks,
            report.records_pruned,
            self.collection_name,
        )
        return report

    def _ingest_one(self, document: SourceDocument) -> tuple[int, int]:
        logger.info("Processing document: %s", document.source)
        chunks = split_document(document, self.chunk_size)
        logger.info("Text split into %d chunks", len(chunks))
        if not chunks:
            logger.warning("Skipping %s: no text to embed", document.source)
            return 0, 0

        vectors = self._retry(
            self._embedder.embed_many,
            [chunk.text.replace("\n", " ") for chunk in chunks],
        )
        records = [VectorRecord.from_chunk(chunk, values) for chunk, values in zip(chunks, vectors)]
        self._retry(self._store.upsert, self.collection_name, records)
        logger.info("Vector store updated with %d vectors for %s", len(records), document.source)

        pruned = self._prune(document.source, {r.id for r in records}) if self.prune_stale_records else 0
        return len(records), pruned

    def _prune(self, source: str, current_ids: set[str]) -> int:
        existing = self._retry(self._store.list_record_ids, self.collection_name, source)
        stale = sorted(set(existing) - current_ids)
        if stale:
            self._retry(self._store.delete, self.collection_name, stale)
            logger.info("Pruned %d stale records of %s", len(stale), source)
        return len(stale)
