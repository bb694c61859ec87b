"""Abstract repository for InventoryPool aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod

from stockflow.domain.model.inventory import InventoryPool


class InventoryRepository(ABC):

    @abstractmethod
    def next_id(self) -> int:
        """Generate the next unique pool ID."""

    @abstractmethod
    def get_by_batch_id(self, batch_id: int) -> InventoryPool | None:
        """Return the pool of a batch, or None."""

    @abstractmethod
    def list_all(self) -> list[InventoryPool]:
        """Return every pool."""

    @abstractmethod
    def save(self, pool: InventoryPool) -> None:
        """Stage a new or updated pool for the current unit of work."""
