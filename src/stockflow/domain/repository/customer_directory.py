"""Port to the external customer directory."""

from __future__ import annotations

from abc import ABC, abstractmethod

from stockflow.domain.model.customer import Customer


class CustomerDirectory(ABC):

    @abstractmethod
    def get_by_id(self, customer_id: str) -> Customer | None:
        """Return a customer by its ID, or None if not found."""
