"""Domain service: FEFO (First-Expired-First-Out) allocator.

Plans which batches satisfy a requested quantity, soonest-expiring
first.  The allocator only reads: it takes no locks and writes nothing,
so a plan is advisory until the reservation at ``draft -> pending``
succeeds.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Mapping

from stockflow.domain.exceptions import InsufficientStockError, ValidationError
from stockflow.domain.model.value_objects import Money
from stockflow.domain.repository.batch_repository import BatchRepository
from stockflow.domain.repository.inventory_repository import InventoryRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Allocation:
    """One pick of a plan: take ``quantity`` units from ``batch_id``."""

    batch_id: int
    quantity: int
    unit_price: Money
    expiry_date: date | None


class FefoAllocator:

    def __init__(self, batches: BatchRepository, pools: InventoryRepository) -> None:
        self._batches = batches
        self._pools = pools

    def allocate(
        self,
        product_id: str,
        requested_quantity: int,
        held: Mapping[int, int] | None = None,
    ) -> list[Allocation]:
        """Plan ``requested_quantity`` units of a product across batches.

        Args:
            product_id: Product to allocate.
            requested_quantity: Units wanted; must be positive.
            held: Units per batch already promised by earlier picks of the
                same request (e.g. another line of the same order); they are
                treated as unavailable.

        Raises:
            InsufficientStockError: the active batches cannot cover the
                full quantity. Nothing is allocated in that case.
        """
        if requested_quantity <= 0:
            raise ValidationError("Requested quantity must be positive")
        held = held or {}

        batches = sorted(
            self._batches.list_active_by_product(product_id),
            key=lambda b: b.fefo_key,
        )

        plan: list[Allocation] = []
        remaining = requested_quantity
        for batch in batches:
            if remaining == 0:
                break
            pool = self._pools.get_by_batch_id(batch.id)
            if pool is None:
                continue
            available = pool.available_quantity - held.get(batch.id, 0)
            if available <= 0:
                continue
            take = min(available, remaining)
            plan.append(
                Allocation(
                    batch_id=batch.id,
                    quantity=take,
                    unit_price=batch.unit_price,
                    expiry_date=batch.expiry_date,
                )
            )
            remaining -= take

        if remaining > 0:
            raise InsufficientStockError(
                product_id, requested_quantity, requested_quantity - remaining
            )

        logger.debug(
            "FEFO plan for product %s x%d: %s",
            product_id,
            requested_quantity,
            [(a.batch_id, a.quantity) for a in plan],
        )
        return plan
