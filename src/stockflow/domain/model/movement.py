"""MovementRecord: one immutable entry of the movement ledger.

Every change to a pool's counters is written down as exactly one
record.  Records are never updated or deleted; a reversal is a new,
compensating record.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from stockflow.domain.exceptions import ValidationError


class MovementType(Enum):
    IN = "in"
    OUT = "out"
    ADJUSTMENT = "adjustment"
    TRANSFER = "transfer"
    AUDIT = "audit"  # written by the external stock-count process only


class PoolOperation(Enum):
    """The quantity operations an InventoryPool supports."""

    RECEIVE = "receive"
    RETURN = "return"
    RESERVE = "reserve"
    RELEASE = "release"
    CONSUME = "consume"
    TRANSFER = "transfer"

    @property
    def movement_type(self) -> MovementType:
        return _MOVEMENT_TYPES[self]


_MOVEMENT_TYPES = {
    PoolOperation.RECEIVE: MovementType.IN,
    PoolOperation.RETURN: MovementType.IN,
    PoolOperation.RESERVE: MovementType.ADJUSTMENT,
    PoolOperation.RELEASE: MovementType.ADJUSTMENT,
    PoolOperation.CONSUME: MovementType.OUT,
    PoolOperation.TRANSFER: MovementType.TRANSFER,
}


@dataclass(frozen=True)
class MovementRecord:
    """A signed quantity change on one batch pool.

    ``quantity_delta`` is negative when units leave the sellable side of
    the pool (reserve, consume, transfer to the warehouse) and positive
    when they come back or arrive.  ``id`` and ``movement_number`` are
    assigned by the ledger store when the unit of work commits.
    """

    batch_id: int
    pool_id: int
    operation: PoolOperation
    quantity_delta: int
    actor_id: str
    timestamp: datetime
    reason: str = ""
    linked_order_id: int | None = None
    linked_purchase_id: str | None = None
    id: int | None = None
    movement_number: str | None = None

    def __post_init__(self) -> None:
        if self.quantity_delta == 0:
            raise ValidationError("Movement quantity cannot be zero")
        if len(self.reason) > 200:
            raise ValidationError("Movement reason must be at most 200 characters")

    @property
    def type(self) -> MovementType:
        return self.operation.movement_type


def movement_number(year: int, sequence: int) -> str:
    """Format a ledger number such as ``BATCHMOV2025000001``."""
    return f"BATCHMOV{year}{sequence:06d}"
