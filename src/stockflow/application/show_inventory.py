"""Application service: Show Inventory use case (query)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from stockflow.domain.repository.unit_of_work import UnitOfWork


@dataclass(frozen=True)
class InventoryLineDTO:
    batch_id: int
    batch_code: str
    product_id: str
    expiry_date: str | None
    status: str
    on_hand: int
    on_shelf: int
    reserved: int
    available: int


class ShowInventoryHandler:

    def __init__(self, uow_factory: Callable[[], UnitOfWork]) -> None:
        self._uow_factory = uow_factory

    def handle(self, product_id: str | None = None) -> list[InventoryLineDTO]:
        """One line per batch, FEFO order within each product."""
        with self._uow_factory() as uow:
            batches = sorted(
                (b for b in uow.batches.list_all() if product_id in (None, b.product_id)),
                key=lambda b: (b.product_id, b.fefo_key),
            )
            lines: list[InventoryLineDTO] = []
            for batch in batches:
                pool = uow.pools.get_by_batch_id(batch.id)
                if pool is None:
                    continue
                lines.append(
                    InventoryLineDTO(
                        batch_id=batch.id,
                        batch_code=batch.batch_code,
                        product_id=batch.product_id,
                        expiry_date=batch.expiry_date.isoformat() if batch.expiry_date else None,
                        status=batch.status.value,
                        on_hand=pool.quantity_on_hand,
                        on_shelf=pool.quantity_on_shelf,
                        reserved=pool.quantity_reserved,
                        available=pool.available_quantity,
                    )
                )
        return lines
