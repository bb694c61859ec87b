"""Application service: Transfer Stock use case (warehouse <-> shelf)."""

from __future__ import annotations

import logging
from typing import Callable

from stockflow.application.retry import conflict_retrying
from stockflow.domain.exceptions import ValidationError
from stockflow.domain.model.inventory import TransferDirection
from stockflow.domain.model.movement import MovementRecord
from stockflow.domain.repository.unit_of_work import UnitOfWork
from stockflow.domain.service.inventory_pool_store import InventoryPoolStore

logger = logging.getLogger(__name__)


def parse_direction(value: str) -> TransferDirection:
    try:
        return TransferDirection(value.strip().lower().replace("-", "_"))
    except ValueError as exc:
        raise ValidationError(
            f"Unknown transfer direction '{value}' (expected to_shelf or to_warehouse)"
        ) from exc


class TransferStockHandler:

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
        direction: str | TransferDirection,
        actor_id: str,
    ) -> MovementRecord:
        if not isinstance(direction, TransferDirection):
            direction = parse_direction(direction)

        retrying = conflict_retrying(self._max_attempts, self._backoff_seconds)
        record = retrying(self._attempt, batch_id, quantity, direction, actor_id)
        logger.info(
            "Transferred %d unit(s) of batch #%d %s",
            quantity,
            batch_id,
            direction.value,
        )
        return record

    def _attempt(
        self,
        batch_id: int,
        quantity: int,
        direction: TransferDirection,
        actor_id: str,
    ) -> MovementRecord:
        with self._uow_factory() as uow:
            record = InventoryPoolStore(uow).transfer(
                batch_id,
                quantity,
                direction,
                actor_id=actor_id,
                reason=f"transfer {direction.value}",
            )
            uow.commit()
        return record
