"""Application service: Allocate (preview) use case (query).

Returns the FEFO plan for a product without reserving anything.
"""

from __future__ import annotations

from typing import Callable

from stockflow.application.dto import AllocationDTO
from stockflow.domain.repository.unit_of_work import UnitOfWork
from stockflow.domain.service.fefo_allocator import FefoAllocator


class AllocateHandler:

    def __init__(self, uow_factory: Callable[[], UnitOfWork]) -> None:
        self._uow_factory = uow_factory

    def handle(self, product_id: str, quantity: int) -> list[AllocationDTO]:
        with self._uow_factory() as uow:
            plan = FefoAllocator(uow.batches, uow.pools).allocate(product_id, quantity)
        return [
            AllocationDTO(
                batch_id=pick.batch_id,
                quantity=pick.quantity,
                unit_price=str(pick.unit_price),
                expiry_date=pick.expiry_date.isoformat() if pick.expiry_date else None,
            )
            for pick in plan
        ]
