"""Product as seen from the catalog service.

The catalog owns products; this package only reads them to validate
line items before allocation.
"""

from __future__ import annotations

from dataclasses import dataclass

from stockflow.domain.model.value_objects import Money


@dataclass(frozen=True)
class Product:
    """A catalog product.

    ``price`` is the list price.  Line items are priced from the batch
    they are allocated to, not from the product.
    """

    id: str
    name: str
    price: Money
    active: bool = True
