"""Abstract repository for Batch entities."""

from __future__ import annotations

from abc import ABC, abstractmethod

from stockflow.domain.model.batch import Batch


class BatchRepository(ABC):

    @abstractmethod
    def next_id(self) -> int:
        """Generate the next unique batch ID."""

    @abstractmethod
    def get_by_id(self, batch_id: int) -> Batch | None:
        """Return a batch by its ID, or None if not found."""

    @abstractmethod
    def get_by_code(self, batch_code: str) -> Batch | None:
        """Return a batch by its (case-insensitive) code, or None."""

    @abstractmethod
    def list_active_by_product(self, product_id: str) -> list[Batch]:
        """Return every active batch of a product, in no particular order."""

    @abstractmethod
    def list_all(self) -> list[Batch]:
        """Return every batch."""

    @abstractmethod
    def save(self, batch: Batch) -> None:
        """Stage a new or updated batch for the current unit of work."""
