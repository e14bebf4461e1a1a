"""Abstract base class for vector-store backends.

The base class owns everything that is the same for every backend:
collection bootstrap (create-if-absent, wait until ready), dimension
checks, batching of upserts and ordering of query results.  A new
backend (Weaviate, Qdrant …) only implements the small set of
``_``-prefixed primitives that talk to the remote service.

Handles are constructed explicitly and owned by their caller::

    with PineconeVectorStore(api_key=...) as store:
        store.ensure_collection("firesafety-index", 1536)
        store.upsert("firesafety-index", records)
"""

from __future__ import annotations

import logging
import math
import time
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence

from tenacity import (
    RetryError,
    Retrying,
    retry_if_exception_type,
    retry_if_result,
    stop_after_attempt,
    stop_after_delay,
    wait_exponential,
)

from firesafety_rag.config import settings
from firesafety_rag.errors import (
    CollectionNotReadyError,
    ConfigurationError,
    DimensionMismatchError,
)
from firesafety_rag.retrieval.models import QueryMatch, VectorRecord
from firesafety_rag.retry import RETRYABLE_ERRORS

logger = logging.getLogger(__name__)


class VectorStoreBase(ABC):
    """Backend-agnostic vector-store gateway.

    Parameters
    ----------
    upsert_batch_size:
        Maximum number of records per upsert request.
    settle_seconds:
        Fixed wait after creating a collection, used only when the
        backend has no readiness probe.
    ready_timeout / ready_poll_interval / ready_max_polls:
        Bounds of the poll-until-ready loop for backends that do.
    sleep:
        Replacement for ``time.sleep`` (tests pass a recorder).
    """

    #: Whether :meth:`_collection_ready` reports real readiness.
    supports_readiness_probe: bool = False

    def __init__(
        self,
        *,
        upsert_batch_size: int = settings.upsert_batch_size,
        settle_seconds: float = settings.collection_settle_seconds,
        ready_timeout: float = settings.collection_ready_timeout,
        ready_poll_interval: float = settings.collection_ready_poll_interval,
        ready_max_polls: int = settings.collection_ready_max_polls,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if upsert_batch_size <= 0:
            raise ConfigurationError(f"upsert_batch_size must be positive, got {upsert_batch_size}")
        self.upsert_batch_size = upsert_batch_size
        self.settle_seconds = settle_seconds
        self.ready_timeout = ready_timeout
        self.ready_poll_interval = ready_poll_interval
        self.ready_max_polls = ready_max_polls
        self._sleep = sleep
        self._dimensions: dict[str, int] = {}

    # -- lifecycle ------------------------------------------------------------

    def initialize(self) -> None:
        """Open the connection to the backend.  Subclasses override."""

    def close(self) -> None:
        """Release the connection.  Subclasses override."""
        self._dimensions.clear()

    def __enter__(self) -> VectorStoreBase:
        self.initialize()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # -- public API -----------------------------------------------------------

    def ensure_collection(self, name: str, dimension: int) -> None:
        """Create *name* with the cosine metric unless it already exists.

        Idempotent: when the collection is present this checks its
        dimension and, for backends with a readiness probe, that it is
        ready.  After a create the call blocks until the backend is ready
        (poll loop) or, for backends without a probe, for
        ``settle_seconds``.  Transient probe failures count as "not
        ready yet".
        """
        if dimension <= 0:
            raise ConfigurationError(f"dimension must be positive, got {dimension}")

        logger.info('Checking "%s"...', name)
        if name in self.list_collections():
            existing = self._collection_dimension(name)
            if existing is not None and existing != dimension:
                raise DimensionMismatchError(name, existing, dimension)
            self._dimensions[name] = dimension
            logger.info('"%s" already exists.', name)
            # A create interrupted after the request may have left it initializing.
            if self.supports_readiness_probe:
                self._wait_until_ready(name)
            return

        logger.info('Creating "%s" (dimension=%d, metric=cosine)...', name, dimension)
        self._create_collection(name, dimension)
        self._dimensions[name] = dimension
        self._wait_until_ready(name)

    def upsert(self, name: str, records: Sequence[VectorRecord]) -> None:
        """Write *records* in batches of at most ``upsert_batch_size``.

        A failing batch aborts the remaining ones; earlier batches stay
        written.
        """
        if not records:
            return
        for record in records:
            self._check_dimension(name, len(record.values))

        total_batches = math.ceil(len(records) / self.upsert_batch_size)
        for batch_no, start in enumerate(range(0, len(records), self.upsert_batch_size), 1):
            batch = list(records[start : start + self.upsert_batch_size])
            self._upsert_batch(name, batch)
            logger.debug(
                "  upserted batch %d/%d (%d-%d)",
                batch_no,
                total_batches,
                start,
                start + len(batch),
            )
        logger.info("Upserted %d vectors into %r in %d batches", len(records), name, total_batches)

    def query(self, name: str, vector: list[float], top_k: int = settings.top_k) -> list[QueryMatch]:
        """Return up to *top_k* nearest records, highest similarity first."""
        if top_k <= 0:
            raise ConfigurationError(f"top_k must be positive, got {top_k}")
        self._check_dimension(name, len(vector))
        matches = self._query(name, vector, top_k)
        return sorted(matches, key=lambda m: m.score, reverse=True)[:top_k]

    def dimension_of(self, name: str) -> int | None:
        """Return the known dimension of *name*, asking the backend if needed."""
        if name not in self._dimensions:
            dimension = self._collection_dimension(name)
            if dimension is None:
                return None
            self._dimensions[name] = dimension
        return self._dimensions[name]

    @abstractmethod
    def list_collections(self) -> list[str]:
        """Return the names of all collections on the backend."""
        ...

    @abstractmethod
    def delete(self, name: str, ids: Sequence[str]) -> None:
        """Delete records by id."""
        ...

    @abstractmethod
    def list_record_ids(self, name: str, source: str) -> list[str]:
        """Return the ids of every record stored for *source*."""
        ...

    @abstractmethod
    def health_check(self) -> bool:
        """Return ``True`` when the backend is reachable."""
        ...

    # -- backend primitives ---------------------------------------------------

    @abstractmethod
    def _create_collection(self, name: str, dimension: int) -> None:
        ...

    @abstractmethod
    def _collection_dimension(self, name: str) -> int | None:
        """Dimension stored on the backend, or ``None`` when unknown."""
        ...

    @abstractmethod
    def _upsert_batch(self, name: str, batch: list[VectorRecord]) -> None:
        ...

    @abstractmethod
    def _query(self, name: str, vector: list[float], top_k: int) -> list[QueryMatch]:
        ...

    def _collection_ready(self, name: str) -> bool:
        """Readiness probe; only consulted when ``supports_readiness_probe``."""
        return True

    # -- internals ------------------------------------------------------------

    def _check_dimension(self, name: str, length: int) -> None:
        expected = self.dimension_of(name)
        if expected is not None and expected != length:
            raise DimensionMismatchError(name, expected, length)

    def _wait_until_ready(self, name: str) -> None:
        if not self.supports_readiness_probe:
            logger.info(
                'Waiting %.1fs for "%s" to finish initializing...', self.settle_seconds, name
            )
            self._sleep(self.settle_seconds)
            return

        retrying = Retrying(
            retry=retry_if_result(lambda ready: not ready)
            | retry_if_exception_type(RETRYABLE_ERRORS),
            stop=stop_after_delay(self.ready_timeout) | stop_after_attempt(self.ready_max_polls),
            wait=wait_exponential(multiplier=self.ready_poll_interval, max=30),
            sleep=self._sleep,
        )
        try:
            retrying(self._collection_ready, name)
        except RetryError as exc:
            raise CollectionNotReadyError(
                f'"{name}" not ready after {exc.last_attempt.attempt_number} polls'
            ) from exc
        logger.info('"%s" is ready.', name)
