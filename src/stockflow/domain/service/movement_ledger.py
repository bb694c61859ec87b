"""Domain service: Movement Ledger.

Appends one MovementRecord per pool change and reads the history back.
``replay`` folds a batch's records into counters, which must always
match what the pool itself holds.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable

from stockflow.domain.model.inventory import InventoryPool
from stockflow.domain.model.movement import MovementRecord, PoolOperation
from stockflow.domain.repository.unit_of_work import UnitOfWork


@dataclass
class PoolCounters:
    quantity_on_hand: int = 0
    quantity_on_shelf: int = 0
    quantity_reserved: int = 0

    @staticmethod
    def of(pool: InventoryPool) -> PoolCounters:
        return PoolCounters(
            quantity_on_hand=pool.quantity_on_hand,
            quantity_on_shelf=pool.quantity_on_shelf,
            quantity_reserved=pool.quantity_reserved,
        )


def _replay_receive(counters: PoolCounters, delta: int) -> None:
    counters.quantity_on_hand += delta


def _replay_return(counters: PoolCounters, delta: int) -> None:
    counters.quantity_on_shelf += delta


def _replay_hold(counters: PoolCounters, delta: int) -> None:
    # reserve is recorded negative, release positive
    counters.quantity_reserved -= delta


def _replay_consume(counters: PoolCounters, delta: int) -> None:
    counters.quantity_reserved += delta
    counters.quantity_on_shelf += delta


def _replay_transfer(counters: PoolCounters, delta: int) -> None:
    counters.quantity_on_shelf += delta
    counters.quantity_on_hand -= delta


_REPLAY: dict[PoolOperation, Callable[[PoolCounters, int], None]] = {
    PoolOperation.RECEIVE: _replay_receive,
    PoolOperation.RETURN: _replay_return,
    PoolOperation.RESERVE: _replay_hold,
    PoolOperation.RELEASE: _replay_hold,
    PoolOperation.CONSUME: _replay_consume,
    PoolOperation.TRANSFER: _replay_transfer,
}


class MovementLedger:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def record(
        self,
        pool: InventoryPool,
        operation: PoolOperation,
        quantity_delta: int,
        actor_id: str,
        reason: str = "",
        order_id: int | None = None,
        purchase_id: str | None = None,
    ) -> MovementRecord:
        """Stage one record in the caller's unit of work."""
        record = MovementRecord(
            batch_id=pool.batch_id,
            pool_id=pool.id,
            operation=operation,
            quantity_delta=quantity_delta,
            actor_id=actor_id,
            timestamp=datetime.now(timezone.utc),
            reason=reason,
            linked_order_id=order_id,
            linked_purchase_id=purchase_id,
        )
        self._uow.movements.add(record)
        return record

    def history(self, batch_id: int) -> list[MovementRecord]:
        return self._uow.movements.list_by_batch(batch_id)

    def for_order(self, order_id: int) -> list[MovementRecord]:
        return self._uow.movements.list_by_order(order_id)

    def replay(self, batch_id: int) -> PoolCounters:
        """Rebuild a pool's counters from its committed records."""
        counters = PoolCounters()
        for record in self.history(batch_id):
            _REPLAY[record.operation](counters, record.quantity_delta)
        return counters
