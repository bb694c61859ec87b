"""Unit of work: the atomic boundary of every inventory change.

Repositories obtained from a unit of work stage their writes; nothing
becomes visible to other units until ``commit()``.  Leaving the
``with`` block without committing discards everything.

Implementations must compare the ``version`` of every staged pool and
order against the stored one at commit time and raise ConflictError
if another unit committed first.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from stockflow.domain.repository.batch_repository import BatchRepository
from stockflow.domain.repository.inventory_repository import InventoryRepository
from stockflow.domain.repository.movement_repository import MovementRepository
from stockflow.domain.repository.order_repository import OrderRepository


class UnitOfWork(ABC):
    orders: OrderRepository
    batches: BatchRepository
    pools: InventoryRepository
    movements: MovementRepository

    def __enter__(self) -> UnitOfWork:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.rollback()

    @abstractmethod
    def commit(self) -> None:
        """Apply every staged write atomically or raise ConflictError."""

    @abstractmethod
    def rollback(self) -> None:
        """Discard staged writes. A no-op after a successful commit."""
