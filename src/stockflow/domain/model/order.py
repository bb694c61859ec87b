"""Order aggregate: the core of the domain.

The Order is an aggregate root that owns its line items.  Its status
moves along a fixed transition table; each edge names the pool
operation that must be applied to every line item's batch.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum

from stockflow.domain.exceptions import InvalidTransitionError, ValidationError
from stockflow.domain.model.movement import PoolOperation
from stockflow.domain.model.value_objects import HUNDRED, Money, Quantity


class OrderStatus(Enum):
    DRAFT = "draft"
    PENDING = "pending"
    SHIPPING = "shipping"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


class PaymentStatus(Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"


# (old, new) -> pool operation applied to every line item, or None
TRANSITIONS: dict[tuple[OrderStatus, OrderStatus], PoolOperation | None] = {
    (OrderStatus.DRAFT, OrderStatus.PENDING): PoolOperation.RESERVE,
    (OrderStatus.DRAFT, OrderStatus.CANCELLED): None,
    (OrderStatus.PENDING, OrderStatus.SHIPPING): None,
    (OrderStatus.SHIPPING, OrderStatus.PENDING): None,
    (OrderStatus.PENDING, OrderStatus.DELIVERED): PoolOperation.CONSUME,
    (OrderStatus.SHIPPING, OrderStatus.DELIVERED): PoolOperation.CONSUME,
    (OrderStatus.PENDING, OrderStatus.CANCELLED): PoolOperation.RELEASE,
    (OrderStatus.SHIPPING, OrderStatus.CANCELLED): PoolOperation.RELEASE,
    (OrderStatus.DELIVERED, OrderStatus.REFUNDED): PoolOperation.RETURN,
}


def transition_action(current: OrderStatus, new: OrderStatus) -> PoolOperation | None:
    """Look up the pool operation for an edge, rejecting unknown edges."""
    key = (current, new)
    if key not in TRANSITIONS:
        raise InvalidTransitionError(current.value, new.value)
    return TRANSITIONS[key]


@dataclass(frozen=True)
class LineRequest:
    """What the caller asked for: a product, a quantity, maybe a batch."""

    product_id: str
    quantity: int
    pinned_batch_id: int | None = None


@dataclass(frozen=True)
class LineItem:
    """A quantity of one product bound to one batch at allocation time.

    Price is captured from the batch when the order is created and
    never changes afterwards.
    """

    product_id: str
    batch_id: int
    quantity: Quantity
    unit_price: Money

    @property
    def line_total(self) -> Money:
        return self.unit_price * self.quantity.value


# ---------------------------------------------------------------------------
# Constants for business rules
# ---------------------------------------------------------------------------
MAX_LINE_ITEMS = 50


@dataclass
class Order:
    """Aggregate root for customer orders.

    Use the ``Order.create()`` factory for new orders; it enforces all
    business rules.  The ``__init__`` is intentionally simple so the
    repository can reconstitute persisted orders without re-validating.
    """

    id: int
    order_number: str
    customer_id: str
    created_by: str
    line_items: list[LineItem]
    status: OrderStatus = OrderStatus.DRAFT
    payment_status: PaymentStatus = PaymentStatus.PENDING
    shipping_fee: Money = field(default_factory=Money.zero)
    discount_percentage: Decimal = Decimal("0")
    total: Money = field(default_factory=Money.zero)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    version: int = 0

    # --- Factory (used for NEW orders only) -----------------------------------

    @staticmethod
    def create(
        order_id: int,
        order_number: str,
        customer_id: str,
        created_by: str,
        line_items: list[LineItem],
        shipping_fee: Money | None = None,
        discount_percentage: Decimal = Decimal("0"),
    ) -> Order:
        """Create a new draft order, enforcing all invariants."""
        if not customer_id or not customer_id.strip():
            raise ValidationError("Customer is required")
        if not created_by or not created_by.strip():
            raise ValidationError("Creator is required")
        if not line_items:
            raise ValidationError("Order must contain at least one item")
        if len(line_items) > MAX_LINE_ITEMS:
            raise ValidationError(f"Maximum {MAX_LINE_ITEMS} items per order")
        if discount_percentage < 0 or discount_percentage > HUNDRED:
            raise ValidationError("Discount percentage must be between 0 and 100")

        currency = line_items[0].unit_price.currency
        mixed = sorted({item.unit_price.currency for item in line_items} - {currency})
        if mixed:
            raise ValidationError(
                f"Order lines mix currencies: {currency} and {', '.join(mixed)}"
            )
        if shipping_fee is None:
            shipping_fee = Money.zero(currency)
        elif shipping_fee.currency != currency:
            raise ValidationError(
                f"Shipping fee is in {shipping_fee.currency}, order is in {currency}"
            )

        order = Order(
            id=order_id,
            order_number=order_number,
            customer_id=customer_id.strip(),
            created_by=created_by.strip(),
            line_items=list(line_items),
            shipping_fee=shipping_fee,
            discount_percentage=discount_percentage,
        )
        order.recalculate_total()
        return order

    # --- State transitions ----------------------------------------------------

    def action_for(self, new_status: OrderStatus) -> PoolOperation | None:
        """Pool operation the move to ``new_status`` requires.

        Raises InvalidTransitionError for edges outside the table.
        """
        return transition_action(self.status, new_status)

    def transition_to(self, new_status: OrderStatus) -> None:
        """Move to ``new_status`` and keep the payment status consistent.

        Inventory changes must be applied *before* calling this
        (coordinated by the lifecycle engine).
        """
        transition_action(self.status, new_status)
        if new_status == OrderStatus.REFUNDED:
            self.payment_status = PaymentStatus.REFUNDED
        elif new_status == OrderStatus.CANCELLED and self.payment_status == PaymentStatus.PAID:
            self.payment_status = PaymentStatus.REFUNDED
        self.status = new_status
        self._touch()

    def update_payment_status(self, payment_status: PaymentStatus) -> None:
        """Record the outcome reported by the payment workflow."""
        if self.status in (OrderStatus.CANCELLED, OrderStatus.REFUNDED) and (
            payment_status == PaymentStatus.PAID
        ):
            raise ValidationError(
                f"Cannot mark a {self.status.value} order as paid"
            )
        self.payment_status = payment_status
        self._touch()

    # --- Draft-only edits -----------------------------------------------------

    def set_shipping_fee(self, shipping_fee: Money) -> None:
        self._require_draft()
        if shipping_fee.currency != self.currency:
            raise ValidationError(
                f"Shipping fee is in {shipping_fee.currency}, order is in {self.currency}"
            )
        self.shipping_fee = shipping_fee
        self.recalculate_total()

    def apply_discount(self, discount_percentage: Decimal) -> None:
        self._require_draft()
        if discount_percentage < 0 or discount_percentage > HUNDRED:
            raise ValidationError("Discount percentage must be between 0 and 100")
        self.discount_percentage = discount_percentage
        self.recalculate_total()

    # --- Computed properties --------------------------------------------------

    @property
    def currency(self) -> str:
        """Orders are priced in the currency of their line items."""
        if not self.line_items:
            return self.shipping_fee.currency
        return self.line_items[0].unit_price.currency

    @property
    def subtotal(self) -> Money:
        result = Money.zero(self.currency)
        for item in self.line_items:
            result = result + item.line_total
        return result

    @property
    def discount_amount(self) -> Money:
        return self.subtotal.percentage(self.discount_percentage)

    def recalculate_total(self) -> None:
        """total = subtotal * (1 - discount / 100) + shipping fee"""
        self.total = (self.subtotal - self.discount_amount + self.shipping_fee).rounded()
        self._touch()

    def quantities_by_batch(self) -> dict[int, int]:
        """Total quantity per batch across all line items."""
        result: dict[int, int] = {}
        for item in self.line_items:
            result[item.batch_id] = result.get(item.batch_id, 0) + item.quantity.value
        return result

    # --- Internal helpers -----------------------------------------------------

    def _require_draft(self) -> None:
        if self.status != OrderStatus.DRAFT:
            raise ValidationError(
                f"Order #{self.id} can only be modified while in draft "
                f"(current status is {self.status.value})"
            )

    def _touch(self) -> None:
        self.updated_at = datetime.now(timezone.utc)


def order_number(created_at: datetime, sequence: int) -> str:
    """Format an order number such as ``ORD250300042``."""
    return f"ORD{created_at:%y%m}{sequence:05d}"
