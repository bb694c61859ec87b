"""Bounded retry of a whole unit of work on ConflictError.

ConflictError is the only retryable error: the unit is replayed from a
fresh read with exponential backoff.  Anything else propagates on the
first attempt.
"""

from __future__ import annotations

import logging

from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from stockflow.domain.exceptions import ConflictError

logger = logging.getLogger(__name__)


def conflict_retrying(max_attempts: int, backoff_seconds: float) -> Retrying:
    """Build a ``Retrying`` that re-raises the last ConflictError."""
    return Retrying(
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(multiplier=backoff_seconds, max=backoff_seconds * 8),
        retry=retry_if_exception_type(ConflictError),
        before_sleep=_log_retry,
        reraise=True,
    )


def _log_retry(retry_state: RetryCallState) -> None:
    logger.warning(
        "Write conflict, retrying (attempt %d): %s",
        retry_state.attempt_number,
        retry_state.outcome.exception() if retry_state.outcome else None,
    )
