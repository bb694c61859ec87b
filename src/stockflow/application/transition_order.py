"""Application service: Transition Order use case.

Runs one lifecycle transition per unit of work.  When the commit loses
a race (ConflictError) the whole transition is replayed from a fresh
read a bounded number of times.
"""

from __future__ import annotations

from typing import Callable

from stockflow.application.dto import OrderDTO, order_to_dto
from stockflow.application.retry import conflict_retrying
from stockflow.domain.exceptions import ValidationError
from stockflow.domain.model.order import Order, OrderStatus
from stockflow.domain.repository.unit_of_work import UnitOfWork
from stockflow.domain.service.order_lifecycle import OrderLifecycleEngine


def parse_status(value: str) -> OrderStatus:
    try:
        return OrderStatus(value.strip().lower())
    except ValueError as exc:
        allowed = ", ".join(s.value for s in OrderStatus)
        raise ValidationError(
            f"Unknown order status '{value}' (expected one of: {allowed})"
        ) from exc


class TransitionOrderHandler:

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
        new_status: str | OrderStatus,
        actor_id: str = "system",
    ) -> OrderDTO:
        """Move an order to ``new_status``.

        Raises:
            InvalidTransitionError: the edge is not in the status table.
            InsufficientShelfStockError / InsufficientReservedStockError:
                a line item's pool cannot take the operation.
            ConflictError: still losing the race after the last attempt.
        """
        if not isinstance(new_status, OrderStatus):
            new_status = parse_status(new_status)

        retrying = conflict_retrying(self._max_attempts, self._backoff_seconds)
        order = retrying(self._attempt, order_id, new_status, actor_id)
        return order_to_dto(order)

    def _attempt(self, order_id: int, status: OrderStatus, actor_id: str) -> Order:
        with self._uow_factory() as uow:
            order = OrderLifecycleEngine(uow).transition(order_id, status, actor_id)
            uow.commit()
        return order
