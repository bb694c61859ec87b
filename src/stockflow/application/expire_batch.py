"""Application service: Expire Batch use case.

Takes a batch out of FEFO allocation.  Existing reservations on it are
left alone; only new allocations skip it.
"""

from __future__ import annotations

from typing import Callable

from stockflow.application.retry import conflict_retrying
from stockflow.domain.exceptions import EntityNotFoundError
from stockflow.domain.repository.unit_of_work import UnitOfWork


class ExpireBatchHandler:

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        max_attempts: int = 3,
        backoff_seconds: float = 0.05,
    ) -> None:
        self._uow_factory = uow_factory
        self._max_attempts = max_attempts
        self._backoff_seconds = backoff_seconds

    def handle(self, batch_id: int) -> None:
        retrying = conflict_retrying(self._max_attempts, self._backoff_seconds)
        retrying(self._attempt, batch_id)

    def _attempt(self, batch_id: int) -> None:
        with self._uow_factory() as uow:
            batch = uow.batches.get_by_id(batch_id)
            if batch is None:
                raise EntityNotFoundError(f"Batch #{batch_id} not found")
            batch.mark_expired()
            uow.batches.save(batch)
            uow.commit()
