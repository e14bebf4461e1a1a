"""Bounded retry policy for remote calls made by the pipelines."""

from __future__ import annotations

import logging
from collections.abc import Callable

from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from firesafety_rag.config import settings
from firesafety_rag.errors import RateLimitError, TransientNetworkError

logger = logging.getLogger(__name__)

RETRYABLE_ERRORS = (TransientNetworkError, RateLimitError)


def _log_before_sleep(retry_state: RetryCallState) -> None:
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    fn_name = getattr(retry_state.fn, "__qualname__", repr(retry_state.fn))
    logger.warning(
        "%s failed (attempt %d): %s; retrying in %.1fs",
        fn_name,
        retry_state.attempt_number,
        exc,
        retry_state.next_action.sleep if retry_state.next_action else 0.0,
    )


def build_retrying(
    *,
    max_attempts: int | None = None,
    initial_wait: float | None = None,
    max_wait: float | None = None,
    sleep: Callable[[float], None] | None = None,
) -> Retrying:
    """Return a ``tenacity.Retrying`` for transient and rate-limit failures.

    The returned object is callable: ``retrying(fn, *args, **kwargs)``.
    Authentication and all other errors propagate on the first attempt;
    once attempts are exhausted the last error is re-raised unchanged.

    Parameters
    ----------
    max_attempts:
        Total attempts including the first (defaults to ``settings.retry_max_attempts``).
    initial_wait / max_wait:
        Exponential backoff bounds in seconds.
    sleep:
        Replacement for ``time.sleep``; tests pass a no-op.
    """
    kwargs: dict = {
        "retry": retry_if_exception_type(RETRYABLE_ERRORS),
        "stop": stop_after_attempt(
            max_attempts if max_attempts is not None else settings.retry_max_attempts
        ),
        "wait": wait_exponential_jitter(
            multiplier=initial_wait if initial_wait is not None else settings.retry_initial_wait,
            max=max_wait if max_wait is not None else settings.retry_max_wait,
        ),
        "before_sleep": _log_before_sleep,
        "reraise": True,
    }
    if sleep is not None:
        kwargs["sleep"] = sleep
    return Retrying(**kwargs)
