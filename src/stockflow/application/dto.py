"""Data Transfer Objects: plain containers that cross layer boundaries.

DTOs carry data between the CLI and application layers without
exposing domain internals to the outside world.
"""

from __future__ import annotations

from dataclasses import dataclass

from stockflow.domain.model.movement import MovementRecord
from stockflow.domain.model.order import Order


@dataclass(frozen=True)
class OrderItemSpec:
    """Input: what the customer asked for (product, quantity, optional batch)."""

    product_id: str
    quantity: int
    pinned_batch_id: int | None = None


@dataclass(frozen=True)
class OrderLineItemDTO:
    """Output: a single line item as displayed to the user."""

    product_id: str
    batch_id: int
    quantity: int
    unit_price: str  # formatted, e.g. "$15.00"
    line_total: str


@dataclass(frozen=True)
class OrderDTO:
    """Output: a complete order as displayed to the user."""

    id: int
    order_number: str
    customer_id: str
    created_by: str
    status: str
    payment_status: str
    items: list[OrderLineItemDTO]
    subtotal: str
    discount_percentage: str
    shipping_fee: str
    total: str
    created_at: str


@dataclass(frozen=True)
class AllocationDTO:
    batch_id: int
    quantity: int
    unit_price: str
    expiry_date: str | None


@dataclass(frozen=True)
class MovementDTO:
    movement_number: str
    batch_id: int
    type: str
    operation: str
    quantity_delta: int
    reason: str
    actor_id: str
    timestamp: str
    linked_order_id: int | None


# --- Mapping ------------------------------------------------------------------


def order_to_dto(order: Order) -> OrderDTO:
    return OrderDTO(
        id=order.id,
        order_number=order.order_number,
        customer_id=order.customer_id,
        created_by=order.created_by,
        status=order.status.value,
        payment_status=order.payment_status.value,
        items=[
            OrderLineItemDTO(
                product_id=item.product_id,
                batch_id=item.batch_id,
                quantity=item.quantity.value,
                unit_price=str(item.unit_price),
                line_total=str(item.line_total),
            )
            for item in order.line_items
        ],
        subtotal=str(order.subtotal),
        discount_percentage=f"{order.discount_percentage}%",
        shipping_fee=str(order.shipping_fee),
        total=str(order.total),
        created_at=order.created_at.strftime("%Y-%m-%d %H:%M UTC"),
    )


def movement_to_dto(record: MovementRecord) -> MovementDTO:
    return MovementDTO(
        movement_number=record.movement_number or "",
        batch_id=record.batch_id,
        type=record.type.value,
        operation=record.operation.value,
        quantity_delta=record.quantity_delta,
        reason=record.reason,
        actor_id=record.actor_id,
        timestamp=record.timestamp.strftime("%Y-%m-%d %H:%M:%S UTC"),
        linked_order_id=record.linked_order_id,
    )
