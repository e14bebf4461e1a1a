"""Exception taxonomy shared by the ingestion and query pipelines.

Provider SDKs (OpenAI, Pinecone, Chroma) each raise their own exception
types.  Adapters translate them into the classes below at the boundary
so that pipelines, the retry policy and the HTTP layer only ever reason
about one hierarchy.  The original SDK exception is always chained as
``__cause__``.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

import openai


class RagError(Exception):
    """Base class for every error raised by this package."""


class ConfigurationError(RagError, ValueError):
    """An invalid tunable, e.g. a non-positive chunk size."""


class RemoteServiceError(RagError):
    """A call to an external API failed."""

    def __init__(self, message: str, *, service: str = "remote") -> None:
        super().__init__(message)
        self.service = service


class TransientNetworkError(RemoteServiceError):
    """Connection failure, timeout or 5xx.  Safe to retry."""


class RateLimitError(RemoteServiceError):
    """The remote API throttled the caller.  Retry after backing off."""


class AuthenticationError(RemoteServiceError):
    """Credentials were rejected.  Never retried."""


class NoResultError(RagError):
    """A similarity query matched nothing, so no grounded answer exists."""


class DimensionMismatchError(RagError):
    """A vector's length disagrees with its collection's dimension."""

    def __init__(self, collection: str, expected: int, actual: int) -> None:
        super().__init__(
            f"Collection {collection!r} has dimension {expected}, got a vector of length {actual}"
        )
        self.collection = collection
        self.expected = expected
        self.actual = actual


class CollectionNotReadyError(RagError):
    """A freshly created collection did not become ready in time."""


class EmbeddingError(RagError):
    """The embedding provider returned a malformed response."""


@contextmanager
def translate_openai_errors(service: str) -> Iterator[None]:
    """Re-raise OpenAI SDK errors as :class:`RemoteServiceError` subclasses.

    Anything that is not an ``openai`` exception propagates untouched.
    """
    try:
        yield
    except (openai.AuthenticationError, openai.PermissionDeniedError) as exc:
        raise AuthenticationError(f"{service}: {exc}", service=service) from exc
    except openai.RateLimitError as exc:
        raise RateLimitError(f"{service}: {exc}", service=service) from exc
    except openai.APIConnectionError as exc:
        # Also covers APITimeoutError.
        raise TransientNetworkError(f"{service}: {exc}", service=service) from exc
    except openai.APIStatusError as exc:
        if exc.status_code >= 500:
            raise TransientNetworkError(f"{service}: {exc}", service=service) from exc
        raise
