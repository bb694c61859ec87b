"""InventoryPool aggregate: the three stock counters of one batch.

Stock flow per batch:

1. Receive stock             -> ``quantity_on_hand`` (warehouse)
2. Move stock to the shelf   -> ``quantity_on_shelf``
3. Reserve for an order      -> ``quantity_reserved`` (earmark on shelf units)
4. Deliver                   -> reserved units leave the shelf for good

Reserved units stay physically on the shelf until consumed, so the
physical stock of a batch is ``on_hand + on_shelf``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from stockflow.domain.exceptions import (
    InsufficientReservedStockError,
    InsufficientShelfStockError,
    InsufficientWarehouseStockError,
    ValidationError,
)


class TransferDirection(Enum):
    TO_SHELF = "to_shelf"
    TO_WAREHOUSE = "to_warehouse"


@dataclass
class InventoryPool:
    """Aggregate root for per-batch stock.

    Invariants:
    - every counter is >= 0
    - ``quantity_reserved`` never exceeds ``quantity_on_shelf``
      (``available_quantity`` is always >= 0)

    ``version`` is the optimistic-concurrency token checked at commit.
    """

    id: int
    batch_id: int
    quantity_on_hand: int = 0
    quantity_on_shelf: int = 0
    quantity_reserved: int = 0
    version: int = 0

    def __post_init__(self) -> None:
        if min(self.quantity_on_hand, self.quantity_on_shelf, self.quantity_reserved) < 0:
            raise ValidationError(
                f"Pool for batch #{self.batch_id} cannot hold negative quantities"
            )
        if self.quantity_reserved > self.quantity_on_shelf:
            raise ValidationError(
                f"Pool for batch #{self.batch_id} reserves more than is on the shelf"
            )

    @property
    def available_quantity(self) -> int:
        return self.quantity_on_shelf - self.quantity_reserved

    @property
    def physical_quantity(self) -> int:
        return self.quantity_on_hand + self.quantity_on_shelf

    # --- Precondition checks (no mutation) ------------------------------------

    def check_reserve(self, quantity: int) -> None:
        _require_positive(quantity, "Reservation")
        if quantity > self.available_quantity:
            raise InsufficientShelfStockError(
                self.batch_id, quantity, self.available_quantity
            )

    def check_consume(self, quantity: int) -> None:
        _require_positive(quantity, "Consume")
        if quantity > self.quantity_reserved:
            raise InsufficientReservedStockError(
                self.batch_id, quantity, self.quantity_reserved
            )

    def check_transfer(self, quantity: int, direction: TransferDirection) -> None:
        _require_positive(quantity, "Transfer")
        if direction == TransferDirection.TO_SHELF:
            if quantity > self.quantity_on_hand:
                raise InsufficientWarehouseStockError(
                    self.batch_id, quantity, self.quantity_on_hand
                )
        elif quantity > self.available_quantity:
            # reserved units must stay on the shelf
            raise InsufficientShelfStockError(
                self.batch_id, quantity, self.available_quantity
            )

    # --- Mutations ------------------------------------------------------------

    def reserve(self, quantity: int) -> None:
        """Hold shelf stock for an order."""
        self.check_reserve(quantity)
        self.quantity_reserved += quantity

    def release(self, quantity: int) -> int:
        """Give reserved stock back to the shelf.

        Releasing more than is reserved is clamped; the amount actually
        released is returned so the caller can log the discrepancy.
        """
        _require_positive(quantity, "Release")
        released = min(quantity, self.quantity_reserved)
        self.quantity_reserved -= released
        return released

    def consume(self, quantity: int) -> None:
        """Finalize a sale: reserved units leave the shelf and the system."""
        self.check_consume(quantity)
        self.quantity_reserved -= quantity
        self.quantity_on_shelf -= quantity

    def receive(self, quantity: int) -> None:
        """New stock arrives in the warehouse."""
        _require_positive(quantity, "Receive")
        self.quantity_on_hand += quantity

    def return_stock(self, quantity: int) -> None:
        """Returned goods go back onto the shelf."""
        _require_positive(quantity, "Return")
        self.quantity_on_shelf += quantity

    def transfer(self, quantity: int, direction: TransferDirection) -> None:
        self.check_transfer(quantity, direction)
        if direction == TransferDirection.TO_SHELF:
            self.quantity_on_hand -= quantity
            self.quantity_on_shelf += quantity
        else:
            self.quantity_on_shelf -= quantity
            self.quantity_on_hand += quantity


def _require_positive(quantity: int, what: str) -> None:
    if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity <= 0:
        raise ValidationError(f"{what} quantity must be a positive integer")
