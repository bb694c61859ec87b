"""Application service: Update Payment Status use case.

Called by the payment confirmation workflow.  Only the payment status
changes; inventory is driven by order status transitions alone.
"""

from __future__ import annotations

from typing import Callable

from stockflow.application.dto import OrderDTO, order_to_dto
from stockflow.application.retry import conflict_retrying
from stockflow.domain.exceptions import EntityNotFoundError, ValidationError
from stockflow.domain.model.order import Order, PaymentStatus
from stockflow.domain.repository.unit_of_work import UnitOfWork


class UpdatePaymentStatusHandler:

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        max_attempts: int = 3,
        backoff_seconds: float = 0.05,
    ) -> None:
        self._uow_factory = uow_factory
        self._max_attempts = max_attempts
        self._backoff_seconds = backoff_seconds

    def handle(self, order_id: int, payment_status: str) -> OrderDTO:
        try:
            status = PaymentStatus(payment_status.strip().lower())
        except ValueError as exc:
            raise ValidationError(f"Invalid payment status '{payment_status}'") from exc

        retrying = conflict_retrying(self._max_attempts, self._backoff_seconds)
        return order_to_dto(retrying(self._attempt, order_id, status))

    def _attempt(self, order_id: int, status: PaymentStatus) -> Order:
        with self._uow_factory() as uow:
            order = uow.orders.get_by_id(order_id)
            if order is None:
                raise EntityNotFoundError(f"Order #{order_id} not found")
            order.update_payment_status(status)
            uow.orders.save(order)
            uow.commit()
        return order
