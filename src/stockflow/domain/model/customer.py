"""Customer as seen from the customer directory."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum


class CustomerType(Enum):
    GUEST = "guest"
    RETAIL = "retail"
    WHOLESALE = "wholesale"
    VIP = "vip"

    @property
    def discount_percentage(self) -> Decimal:
        """Default order discount for this tier."""
        return _DISCOUNT_TIERS[self]


_DISCOUNT_TIERS = {
    CustomerType.GUEST: Decimal("0"),
    CustomerType.RETAIL: Decimal("10"),
    CustomerType.WHOLESALE: Decimal("15"),
    CustomerType.VIP: Decimal("20"),
}


@dataclass(frozen=True)
class Customer:
    id: str
    name: str
    customer_type: CustomerType = CustomerType.GUEST
    active: bool = True
