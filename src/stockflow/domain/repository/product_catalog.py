"""Port to the external product catalog.

Defined in the domain layer so the domain never depends on
infrastructure. Concrete implementations (JSON, HTTP, in-memory)
live in the infrastructure layer.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from stockflow.domain.model.product import Product


class ProductCatalog(ABC):

    @abstractmethod
    def get_by_id(self, product_id: str) -> Product | None:
        """Return a product by its ID, or None if not found."""

    @abstractmethod
    def list_all(self) -> list[Product]:
        """Return every product in the catalog."""
