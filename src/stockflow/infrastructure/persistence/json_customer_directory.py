"""JSON-file-backed implementation of CustomerDirectory."""

from __future__ import annotations

import json
from pathlib import Path

from stockflow.domain.model.customer import Customer, CustomerType
from stockflow.domain.repository.customer_directory import CustomerDirectory


class JsonCustomerDirectory(CustomerDirectory):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path

    def get_by_id(self, customer_id: str) -> Customer | None:
        if not self._file_path.exists():
            return None
        for item in json.loads(self._file_path.read_text(encoding="utf-8")):
            if str(item["id"]) == customer_id:
                return Customer(
                    id=str(item["id"]),
                    name=item["name"],
                    customer_type=CustomerType(item.get("customer_type", "guest").lower()),
                    active=item.get("active", True),
                )
        return None
