"""Application service: Create Order use case.

Orchestrates the flow between the external catalog/customer services
and the lifecycle engine.  The draft order and its batch-bound line
items are written in one unit of work; no inventory is reserved yet.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Callable

from stockflow.application.dto import OrderDTO, OrderItemSpec, order_to_dto
from stockflow.application.retry import conflict_retrying
from stockflow.domain.exceptions import EntityNotFoundError, ValidationError
from stockflow.domain.model.order import LineRequest, Order
from stockflow.domain.model.value_objects import parse_percentage
from stockflow.domain.repository.customer_directory import CustomerDirectory
from stockflow.domain.repository.product_catalog import ProductCatalog
from stockflow.domain.repository.unit_of_work import UnitOfWork
from stockflow.domain.service.order_lifecycle import OrderLifecycleEngine


class CreateOrderHandler:

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        product_catalog: ProductCatalog,
        customer_directory: CustomerDirectory,
        max_attempts: int = 3,
        backoff_seconds: float = 0.05,
    ) -> None:
        self._uow_factory = uow_factory
        self._product_catalog = product_catalog
        self._customer_directory = customer_directory
        self._max_attempts = max_attempts
        self._backoff_seconds = backoff_seconds

    def handle(
        self,
        customer_id: str,
        created_by: str,
        item_specs: list[OrderItemSpec],
        shipping_fee: str | Decimal = "0",
        discount_percentage: str | Decimal | None = None,
    ) -> OrderDTO:
        """Create a new draft order.

        Steps:
        1. Resolve the customer (must exist and be active); its tier gives
           the discount unless one is passed explicitly.
        2. Check every product exists and is active in the catalog.
        3. Let the engine bind each line to batches (FEFO or pinned).
        4. Commit and return a DTO. A lost race on the order sequence
           replays steps 3 and 4 from a fresh read.
        """
        customer = self._customer_directory.get_by_id(customer_id)
        if customer is None:
            raise EntityNotFoundError(f"Customer not found: '{customer_id}'")
        if not customer.active:
            raise ValidationError(f"Customer '{customer_id}' is inactive")

        if discount_percentage is None:
            discount = customer.customer_type.discount_percentage
        else:
            discount = parse_percentage(discount_percentage)

        requests: list[LineRequest] = []
        for spec in item_specs:
            product = self._product_catalog.get_by_id(spec.product_id)
            if product is None:
                raise EntityNotFoundError(f"Product not found: '{spec.product_id}'")
            if not product.active:
                raise ValidationError(f"Product '{product.name}' is not available")
            requests.append(
                LineRequest(
                    product_id=product.id,
                    quantity=spec.quantity,
                    pinned_batch_id=spec.pinned_batch_id,
                )
            )

        retrying = conflict_retrying(self._max_attempts, self._backoff_seconds)
        order = retrying(
            self._attempt, customer.id, created_by, requests, shipping_fee, discount
        )
        return order_to_dto(order)

    def _attempt(
        self,
        customer_id: str,
        created_by: str,
        requests: list[LineRequest],
        shipping_fee: str | Decimal,
        discount: Decimal,
    ) -> Order:
        with self._uow_factory() as uow:
            order = OrderLifecycleEngine(uow).create_order(
                customer_id=customer_id,
                created_by=created_by,
                requests=requests,
                shipping_fee=shipping_fee,
                discount_percentage=discount,
            )
            uow.commit()
        return order
