"""Batch entity: one physical lot of a single product.

A batch is created when stock is received and carries the dates that
drive FEFO allocation.  Only its status and prices change afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum

from stockflow.domain.exceptions import ValidationError
from stockflow.domain.model.value_objects import Money


class BatchStatus(Enum):
    ACTIVE = "active"
    EXPIRED = "expired"


@dataclass
class Batch:
    id: int
    product_id: str
    batch_code: str
    unit_price: Money
    cost_price: Money
    expiry_date: date | None = None
    manufacture_date: date | None = None
    status: BatchStatus = BatchStatus.ACTIVE

    # --- Factory --------------------------------------------------------------

    @staticmethod
    def create(
        batch_id: int,
        product_id: str,
        batch_code: str,
        unit_price: Money,
        cost_price: Money,
        expiry_date: date | None = None,
        manufacture_date: date | None = None,
    ) -> Batch:
        """Register a new batch, enforcing its invariants."""
        if not product_id or not product_id.strip():
            raise ValidationError("Product ID is required")
        if not batch_code or not batch_code.strip():
            raise ValidationError("Batch code is required")
        if (
            expiry_date is not None
            and manufacture_date is not None
            and manufacture_date > expiry_date
        ):
            raise ValidationError(
                f"Manufacture date {manufacture_date} is after expiry date {expiry_date}"
            )
        return Batch(
            id=batch_id,
            product_id=product_id.strip(),
            batch_code=batch_code.strip().upper(),
            unit_price=unit_price,
            cost_price=cost_price,
            expiry_date=expiry_date,
            manufacture_date=manufacture_date,
        )

    # --- Behaviour ------------------------------------------------------------

    @property
    def is_active(self) -> bool:
        return self.status == BatchStatus.ACTIVE

    @property
    def fefo_key(self) -> tuple[bool, date, int]:
        """Sort key: earliest expiry first, no-expiry last, then lower id."""
        return (
            self.expiry_date is None,
            self.expiry_date or date.max,
            self.id,
        )

    def mark_expired(self) -> None:
        self.status = BatchStatus.EXPIRED

    def is_expired_on(self, day: date) -> bool:
        return self.expiry_date is not None and day > self.expiry_date

    def days_until_expiry(self, day: date) -> int | None:
        if self.expiry_date is None:
            return None
        return (self.expiry_date - day).days
