"""Domain service: Inventory Pool Store.

The only code allowed to change pool counters.  Every operation is
validated before it mutates and is written to the movement ledger in
the same unit of work.  The store never commits: it always runs inside
the caller's unit of work.
"""

from __future__ import annotations

import logging
from typing import Callable

from stockflow.domain.exceptions import EntityNotFoundError, ValidationError
from stockflow.domain.model.inventory import InventoryPool, TransferDirection
from stockflow.domain.model.movement import MovementRecord, PoolOperation
from stockflow.domain.repository.unit_of_work import UnitOfWork
from stockflow.domain.service.movement_ledger import MovementLedger

logger = logging.getLogger(__name__)

# (pool, quantity, direction) -> signed ledger delta, or None when nothing moved
_Handler = Callable[[InventoryPool, int, "TransferDirection | None"], "int | None"]
_Validator = Callable[[InventoryPool, int, "TransferDirection | None"], None]


class InventoryPoolStore:

    def __init__(self, uow: UnitOfWork, ledger: MovementLedger | None = None) -> None:
        self._uow = uow
        self._ledger = ledger or MovementLedger(uow)
        self._handlers: dict[PoolOperation, _Handler] = {
            PoolOperation.RESERVE: self._reserve,
            PoolOperation.RELEASE: self._release,
            PoolOperation.CONSUME: self._consume,
            PoolOperation.RECEIVE: self._receive,
            PoolOperation.RETURN: self._return,
            PoolOperation.TRANSFER: self._transfer,
        }

    # --- Lookup ---------------------------------------------------------------

    def load(self, batch_id: int) -> InventoryPool:
        pool = self._uow.pools.get_by_batch_id(batch_id)
        if pool is None:
            raise EntityNotFoundError(f"No inventory pool for batch #{batch_id}")
        return pool

    # --- Validation (no mutation) ---------------------------------------------

    @staticmethod
    def validate(
        operation: PoolOperation,
        pool: InventoryPool,
        quantity: int,
        direction: TransferDirection | None = None,
    ) -> None:
        """Raise the error ``operation`` would raise, without applying it.

        Release, receive and return have no stock precondition.
        """
        _VALIDATORS[operation](pool, quantity, direction)

    # --- Operations -----------------------------------------------------------

    def apply(
        self,
        operation: PoolOperation,
        batch_id: int,
        quantity: int,
        *,
        actor_id: str,
        reason: str = "",
        order_id: int | None = None,
        purchase_id: str | None = None,
        direction: TransferDirection | None = None,
    ) -> MovementRecord | None:
        """Apply one operation to a batch pool and record it.

        Returns the staged ledger record, or None if nothing moved.
        """
        pool = self.load(batch_id)
        delta = self._handlers[operation](pool, quantity, direction)
        if delta is None:
            return None
        self._uow.pools.save(pool)
        return self._ledger.record(
            pool,
            operation,
            delta,
            actor_id=actor_id,
            reason=reason or operation.value,
            order_id=order_id,
            purchase_id=purchase_id,
        )

    def reserve(self, batch_id: int, quantity: int, **context) -> MovementRecord | None:
        return self.apply(PoolOperation.RESERVE, batch_id, quantity, **context)

    def release(self, batch_id: int, quantity: int, **context) -> MovementRecord | None:
        return self.apply(PoolOperation.RELEASE, batch_id, quantity, **context)

    def consume(self, batch_id: int, quantity: int, **context) -> MovementRecord | None:
        return self.apply(PoolOperation.CONSUME, batch_id, quantity, **context)

    def receive(self, batch_id: int, quantity: int, **context) -> MovementRecord | None:
        return self.apply(PoolOperation.RECEIVE, batch_id, quantity, **context)

    def return_stock(self, batch_id: int, quantity: int, **context) -> MovementRecord | None:
        return self.apply(PoolOperation.RETURN, batch_id, quantity, **context)

    def transfer(
        self,
        batch_id: int,
        quantity: int,
        direction: TransferDirection,
        **context,
    ) -> MovementRecord | None:
        return self.apply(
            PoolOperation.TRANSFER, batch_id, quantity, direction=direction, **context
        )

    # --- Handlers, one per operation ------------------------------------------

    @staticmethod
    def _reserve(pool: InventoryPool, quantity: int, _direction) -> int:
        pool.reserve(quantity)
        return -quantity

    @staticmethod
    def _release(pool: InventoryPool, quantity: int, _direction) -> int | None:
        released = pool.release(quantity)
        if released < quantity:
            logger.warning(
                "Release of %d from batch #%d clamped to %d reserved unit(s)",
                quantity,
                pool.batch_id,
                released,
            )
        return released or None

    @staticmethod
    def _consume(pool: InventoryPool, quantity: int, _direction) -> int:
        pool.consume(quantity)
        return -quantity

    @staticmethod
    def _receive(pool: InventoryPool, quantity: int, _direction) -> int:
        pool.receive(quantity)
        return quantity

    @staticmethod
    def _return(pool: InventoryPool, quantity: int, _direction) -> int:
        pool.return_stock(quantity)
        return quantity

    @staticmethod
    def _transfer(pool: InventoryPool, quantity: int, direction) -> int:
        direction = _require_direction(direction)
        pool.transfer(quantity, direction)
        return quantity if direction == TransferDirection.TO_SHELF else -quantity


def _require_direction(direction: TransferDirection | None) -> TransferDirection:
    if direction is None:
        raise ValidationError("Transfer direction is required")
    return direction


def _require_positive(operation: PoolOperation) -> _Validator:
    def check(_pool: InventoryPool, quantity: int, _direction) -> None:
        if quantity <= 0:
            raise ValidationError(f"{operation.value.capitalize()} quantity must be positive")

    return check


_VALIDATORS: dict[PoolOperation, _Validator] = {
    PoolOperation.RESERVE: lambda pool, quantity, _direction: pool.check_reserve(quantity),
    PoolOperation.CONSUME: lambda pool, quantity, _direction: pool.check_consume(quantity),
    PoolOperation.TRANSFER: lambda pool, quantity, direction: pool.check_transfer(
        quantity, _require_direction(direction)
    ),
    PoolOperation.RELEASE: _require_positive(PoolOperation.RELEASE),
    PoolOperation.RECEIVE: _require_positive(PoolOperation.RECEIVE),
    PoolOperation.RETURN: _require_positive(PoolOperation.RETURN),
}
