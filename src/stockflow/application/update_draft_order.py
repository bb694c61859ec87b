"""Application service: Update Draft Order use case.

Shipping fee and discount may change while an order is still a draft;
the total is recomputed by the aggregate.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Callable

from stockflow.application.dto import OrderDTO, order_to_dto
from stockflow.application.retry import conflict_retrying
from stockflow.domain.exceptions import EntityNotFoundError
from stockflow.domain.model.order import Order
from stockflow.domain.model.value_objects import Money, parse_percentage
from stockflow.domain.repository.unit_of_work import UnitOfWork


class UpdateDraftOrderHandler:

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        max_attempts: int = 3,
        backoff_seconds: float = 0.05,
    ) -> None:
        self._uow_factory = uow_factory
        self._max_attempts = max_attempts
        self._backoff_seconds = backoff_seconds

    def handle(
        self,
        order_id: int,
        shipping_fee: str | Decimal | None = None,
        discount_percentage: str | Decimal | None = None,
    ) -> OrderDTO:
        retrying = conflict_retrying(self._max_attempts, self._backoff_seconds)
        order = retrying(self._attempt, order_id, shipping_fee, discount_percentage)
        return order_to_dto(order)

    def _attempt(
        self,
        order_id: int,
        shipping_fee: str | Decimal | None,
        discount_percentage: str | Decimal | None,
    ) -> Order:
        with self._uow_factory() as uow:
            order = uow.orders.get_by_id(order_id)
            if order is None:
                raise EntityNotFoundError(f"Order #{order_id} not found")
            if shipping_fee is not None:
                order.set_shipping_fee(Money.of(shipping_fee, order.currency))
            if discount_percentage is not None:
                order.apply_discount(parse_percentage(discount_percentage))
            uow.orders.save(order)
            uow.commit()
        return order
