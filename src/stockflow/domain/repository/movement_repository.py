"""Abstract repository for the movement ledger.

Append-only: there is deliberately no update or delete.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from stockflow.domain.model.movement import MovementRecord


class MovementRepository(ABC):

    @abstractmethod
    def add(self, record: MovementRecord) -> None:
        """Stage a record; ``id`` and number are assigned on commit."""

    @abstractmethod
    def list_by_batch(self, batch_id: int) -> list[MovementRecord]:
        """Committed records of one batch, oldest first."""

    @abstractmethod
    def list_by_order(self, order_id: int) -> list[MovementRecord]:
        """Committed records linked to one order, oldest first."""

    @abstractmethod
    def list_all(self) -> list[MovementRecord]:
        """Every committed record, oldest first."""
