"""Application service: Movement History use case (query)."""

from __future__ import annotations

from typing import Callable

from stockflow.application.dto import MovementDTO, movement_to_dto
from stockflow.domain.exceptions import EntityNotFoundError, ValidationError
from stockflow.domain.repository.unit_of_work import UnitOfWork
from stockflow.domain.service.movement_ledger import MovementLedger


class MovementHistoryHandler:

    def __init__(self, uow_factory: Callable[[], UnitOfWork]) -> None:
        self._uow_factory = uow_factory

    def handle(
        self,
        batch_id: int | None = None,
        order_id: int | None = None,
    ) -> list[MovementDTO]:
        """Ledger entries of one batch or of one order, oldest first."""
        if (batch_id is None) == (order_id is None):
            raise ValidationError("Specify exactly one of batch or order")

        with self._uow_factory() as uow:
            ledger = MovementLedger(uow)
            if batch_id is not None:
                if uow.batches.get_by_id(batch_id) is None:
                    raise EntityNotFoundError(f"Batch #{batch_id} not found")
                records = ledger.history(batch_id)
            else:
                records = ledger.for_order(order_id)
        return [movement_to_dto(r) for r in records]
