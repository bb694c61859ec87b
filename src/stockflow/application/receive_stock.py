"""Application service: Receive Stock use case.

Entry point of the purchase-receiving workflow: new units land in the
batch's warehouse counter and an ``in`` movement is recorded.
"""

from __future__ import annotations

import logging
from typing import Callable

from stockflow.application.retry import conflict_retrying
from stockflow.domain.model.movement import MovementRecord
from stockflow.domain.repository.unit_of_work import UnitOfWork
from stockflow.domain.service.inventory_pool_store import InventoryPoolStore

logger = logging.getLogger(__name__)


class ReceiveStockHandler:

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        max_attempts: int = 3,
        backoff_seconds: float = 0.05,
    ) -> None:
        self._uow_factory = uow_factory
        self._max_attempts = max_attempts
        self._backoff_seconds = backoff_seconds

    def handle(
        self,
        batch_id: int,
        quantity: int,
        actor_id: str,
        purchase_id: str | None = None,
    ) -> MovementRecord:
        retrying = conflict_retrying(self._max_attempts, self._backoff_seconds)
        record = retrying(self._attempt, batch_id, quantity, actor_id, purchase_id)
        logger.info("Received %d unit(s) into batch #%d", quantity, batch_id)
        return record

    def _attempt(
        self,
        batch_id: int,
        quantity: int,
        actor_id: str,
        purchase_id: str | None,
    ) -> MovementRecord:
        with self._uow_factory() as uow:
            record = InventoryPoolStore(uow).receive(
                batch_id,
                quantity,
                actor_id=actor_id,
                purchase_id=purchase_id,
                reason="stock received",
            )
            uow.commit()
        return record
