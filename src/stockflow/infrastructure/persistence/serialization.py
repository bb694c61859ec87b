"""Mapping between domain objects and their JSON records."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from stockflow.domain.model.batch import Batch, BatchStatus
from stockflow.domain.model.inventory import InventoryPool
from stockflow.domain.model.movement import MovementRecord, PoolOperation
from stockflow.domain.model.order import (
    LineItem,
    Order,
    OrderStatus,
    PaymentStatus,
)
from stockflow.domain.model.value_objects import Money, Quantity


def _money_to_raw(money: Money) -> dict:
    return {"amount": str(money.amount), "currency": money.currency}


def _money_to_domain(raw: dict) -> Money:
    return Money(Decimal(raw["amount"]), raw.get("currency", "USD"))


def _date_to_raw(value: date | None) -> str | None:
    return value.isoformat() if value is not None else None


def _date_to_domain(raw: str | None) -> date | None:
    return date.fromisoformat(raw) if raw else None


# --- Order --------------------------------------------------------------------


def order_to_raw(order: Order) -> dict:
    return {
        "id": order.id,
        "order_number": order.order_number,
        "customer_id": order.customer_id,
        "created_by": order.created_by,
        "status": order.status.value,
        "payment_status": order.payment_status.value,
        "shipping_fee": _money_to_raw(order.shipping_fee),
        "discount_percentage": str(order.discount_percentage),
        "total": _money_to_raw(order.total),
        "created_at": order.created_at.isoformat(),
        "updated_at": order.updated_at.isoformat(),
        "version": order.version,
        "line_items": [
            {
                "product_id": item.product_id,
                "batch_id": item.batch_id,
                "quantity": item.quantity.value,
                "unit_price": _money_to_raw(item.unit_price),
            }
            for item in order.line_items
        ],
    }


def order_to_domain(raw: dict) -> Order:
    items = [
        LineItem(
            product_id=i["product_id"],
            batch_id=i["batch_id"],
            quantity=Quantity(i["quantity"]),
            unit_price=_money_to_domain(i["unit_price"]),
        )
        for i in raw["line_items"]
    ]
    return Order(
        id=raw["id"],
        order_number=raw["order_number"],
        customer_id=raw["customer_id"],
        created_by=raw["created_by"],
        line_items=items,
        status=OrderStatus(raw["status"]),
        payment_status=PaymentStatus(raw["payment_status"]),
        shipping_fee=_money_to_domain(raw["shipping_fee"]),
        discount_percentage=Decimal(raw["discount_percentage"]),
        total=_money_to_domain(raw["total"]),
        created_at=datetime.fromisoformat(raw["created_at"]),
        updated_at=datetime.fromisoformat(raw["updated_at"]),
        version=raw.get("version", 0),
    )


# --- Batch --------------------------------------------------------------------


def batch_to_raw(batch: Batch) -> dict:
    return {
        "id": batch.id,
        "product_id": batch.product_id,
        "batch_code": batch.batch_code,
        "unit_price": _money_to_raw(batch.unit_price),
        "cost_price": _money_to_raw(batch.cost_price),
        "expiry_date": _date_to_raw(batch.expiry_date),
        "manufacture_date": _date_to_raw(batch.manufacture_date),
        "status": batch.status.value,
    }


def batch_to_domain(raw: dict) -> Batch:
    return Batch(
        id=raw["id"],
        product_id=raw["product_id"],
        batch_code=raw["batch_code"],
        unit_price=_money_to_domain(raw["unit_price"]),
        cost_price=_money_to_domain(raw["cost_price"]),
        expiry_date=_date_to_domain(raw.get("expiry_date")),
        manufacture_date=_date_to_domain(raw.get("manufacture_date")),
        status=BatchStatus(raw.get("status", "active")),
    )


# --- InventoryPool ------------------------------------------------------------


def pool_to_raw(pool: InventoryPool) -> dict:
    return {
        "id": pool.id,
        "batch_id": pool.batch_id,
        "quantity_on_hand": pool.quantity_on_hand,
        "quantity_on_shelf": pool.quantity_on_shelf,
        "quantity_reserved": pool.quantity_reserved,
        "version": pool.version,
    }


def pool_to_domain(raw: dict) -> InventoryPool:
    return InventoryPool(
        id=raw["id"],
        batch_id=raw["batch_id"],
        quantity_on_hand=raw.get("quantity_on_hand", 0),
        quantity_on_shelf=raw.get("quantity_on_shelf", 0),
        quantity_reserved=raw.get("quantity_reserved", 0),
        version=raw.get("version", 0),
    )


# --- MovementRecord -----------------------------------------------------------


def movement_to_raw(record: MovementRecord) -> dict:
    return {
        "id": record.id,
        "movement_number": record.movement_number,
        "batch_id": record.batch_id,
        "pool_id": record.pool_id,
        "type": record.type.value,
        "operation": record.operation.value,
        "quantity_delta": record.quantity_delta,
        "reason": record.reason,
        "actor_id": record.actor_id,
        "timestamp": record.timestamp.isoformat(),
        "linked_order_id": record.linked_order_id,
        "linked_purchase_id": record.linked_purchase_id,
    }


def movement_to_domain(raw: dict) -> MovementRecord:
    return MovementRecord(
        batch_id=raw["batch_id"],
        pool_id=raw["pool_id"],
        operation=PoolOperation(raw["operation"]),
        quantity_delta=raw["quantity_delta"],
        actor_id=raw["actor_id"],
        timestamp=datetime.fromisoformat(raw["timestamp"]),
        reason=raw.get("reason", ""),
        linked_order_id=raw.get("linked_order_id"),
        linked_purchase_id=raw.get("linked_purchase_id"),
        id=raw["id"],
        movement_number=raw["movement_number"],
    )
