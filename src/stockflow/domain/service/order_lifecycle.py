"""Domain service: Order Lifecycle Engine.

Creates draft orders (binding every line to a batch) and moves orders
along the status table, applying the matching pool operation to every
line item.

A transition runs in two phases inside the caller's unit of work:
  Phase 1: load every affected pool and validate the operation for the
            *whole* order (line items sharing a batch are summed).
  Phase 2: apply the operation per line item, writing one ledger
            record each, then update the order.
A failure in phase 1 leaves nothing staged, so the unit of work has
nothing partial to roll back.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import Decimal

from stockflow.domain.exceptions import (
    BatchMismatchError,
    EntityNotFoundError,
    ValidationError,
)
from stockflow.domain.model.movement import PoolOperation
from stockflow.domain.model.order import (
    LineItem,
    LineRequest,
    Order,
    OrderStatus,
    order_number,
)
from stockflow.domain.model.value_objects import Money, Quantity
from stockflow.domain.repository.unit_of_work import UnitOfWork
from stockflow.domain.service.fefo_allocator import FefoAllocator
from stockflow.domain.service.inventory_pool_store import InventoryPoolStore

logger = logging.getLogger(__name__)


class OrderLifecycleEngine:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow
        self._pools = InventoryPoolStore(uow)
        self._allocator = FefoAllocator(uow.batches, uow.pools)

    # --- Creation -------------------------------------------------------------

    def create_order(
        self,
        customer_id: str,
        created_by: str,
        requests: list[LineRequest],
        shipping_fee: str | Decimal | Money | None = None,
        discount_percentage: Decimal = Decimal("0"),
    ) -> Order:
        """Build and stage a draft order. No pool is touched.

        A plain ``shipping_fee`` amount is priced in the currency of the
        allocated line items.
        """
        if not requests:
            raise ValidationError("Order must contain at least one item")

        line_items: list[LineItem] = []
        held: dict[int, int] = {}
        for request in requests:
            Quantity(request.quantity)
            if request.pinned_batch_id is not None:
                items = [self._pin(request, held)]
            else:
                items = [
                    LineItem(
                        product_id=request.product_id,
                        batch_id=pick.batch_id,
                        quantity=Quantity(pick.quantity),
                        unit_price=pick.unit_price,
                    )
                    for pick in self._allocator.allocate(
                        request.product_id, request.quantity, held
                    )
                ]
            for item in items:
                held[item.batch_id] = held.get(item.batch_id, 0) + item.quantity.value
            line_items.extend(items)

        if shipping_fee is not None and not isinstance(shipping_fee, Money):
            shipping_fee = Money.of(shipping_fee, line_items[0].unit_price.currency)

        order = Order.create(
            order_id=self._uow.orders.next_id(),
            order_number=order_number(
                datetime.now(timezone.utc), self._uow.orders.count() + 1
            ),
            customer_id=customer_id,
            created_by=created_by,
            line_items=line_items,
            shipping_fee=shipping_fee,
            discount_percentage=discount_percentage,
        )
        self._uow.orders.save(order)
        logger.info(
            "Draft order #%d (%s) created with %d line item(s)",
            order.id,
            order.order_number,
            len(order.line_items),
        )
        return order

    def _pin(self, request: LineRequest, held: dict[int, int]) -> LineItem:
        """Bind a line to a caller-chosen batch, skipping FEFO."""
        batch_id = request.pinned_batch_id
        batch = self._uow.batches.get_by_id(batch_id)
        if batch is None:
            raise EntityNotFoundError(f"Batch #{batch_id} not found")
        if batch.product_id != request.product_id:
            raise BatchMismatchError(batch_id, request.product_id)
        if not batch.is_active:
            raise ValidationError(f"Batch #{batch_id} is {batch.status.value}")

        pool = self._pools.load(batch_id)
        self._pools.validate(
            PoolOperation.RESERVE, pool, request.quantity + held.get(batch_id, 0)
        )
        return LineItem(
            product_id=request.product_id,
            batch_id=batch_id,
            quantity=Quantity(request.quantity),
            unit_price=batch.unit_price,
        )

    # --- Transitions ----------------------------------------------------------

    def transition(
        self,
        order_id: int,
        new_status: OrderStatus,
        actor_id: str,
    ) -> Order:
        """Move an order to ``new_status``, applying pool operations.

        Moving to the current status is a no-op that stages nothing.
        """
        order = self._uow.orders.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundError(f"Order #{order_id} not found")

        previous = order.status
        if new_status == previous:
            return order

        operation = order.action_for(new_status)
        if operation is not None:
            # Phase 1: validate the whole order before touching anything
            for batch_id, quantity in order.quantities_by_batch().items():
                self._pools.validate(operation, self._pools.load(batch_id), quantity)

            # Phase 2: apply per line item
            reason = f"order {order.order_number}: {previous.value} -> {new_status.value}"
            for item in order.line_items:
                self._pools.apply(
                    operation,
                    item.batch_id,
                    item.quantity.value,
                    actor_id=actor_id,
                    reason=reason,
                    order_id=order.id,
                )

        order.transition_to(new_status)
        self._uow.orders.save(order)
        logger.info(
            "Order #%d moved %s -> %s", order.id, previous.value, new_status.value
        )
        return order
