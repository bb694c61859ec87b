"""JSON-file-backed implementation of ProductCatalog.

The catalog itself is maintained elsewhere; this adapter only reads the
exported ``products.json``.
"""

from __future__ import annotations

import json
from decimal import Decimal
from pathlib import Path

from stockflow.domain.model.product import Product
from stockflow.domain.model.value_objects import Money
from stockflow.domain.repository.product_catalog import ProductCatalog


class JsonProductCatalog(ProductCatalog):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path

    # --- ProductCatalog interface ---------------------------------------------

    def get_by_id(self, product_id: str) -> Product | None:
        return self._load().get(product_id)

    def list_all(self) -> list[Product]:
        return list(self._load().values())

    # --- Serialization helpers ------------------------------------------------

    def _load(self) -> dict[str, Product]:
        if not self._file_path.exists():
            return {}
        raw = json.loads(self._file_path.read_text(encoding="utf-8"))
        return {
            str(item["id"]): Product(
                id=str(item["id"]),
                name=item["name"],
                price=Money(Decimal(str(item["price"])), item.get("currency", "USD")),
                active=item.get("active", True),
            )
            for item in raw
        }
