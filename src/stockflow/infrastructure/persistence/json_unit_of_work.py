"""JSON-document-backed implementation of UnitOfWork.

A unit of work reads one snapshot of the document when it starts.
Repositories hand out domain objects from that snapshot (one object per
id for the life of the unit) and stage every ``save``.  ``commit``
re-reads the document under the store's write lock, compares versions,
and writes everything in a single replace of the file.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import Callable, Generic, TypeVar

from stockflow.domain.exceptions import ConflictError
from stockflow.domain.model.batch import Batch, BatchStatus
from stockflow.domain.model.inventory import InventoryPool
from stockflow.domain.model.movement import MovementRecord, movement_number
from stockflow.domain.model.order import Order
from stockflow.domain.repository.batch_repository import BatchRepository
from stockflow.domain.repository.inventory_repository import InventoryRepository
from stockflow.domain.repository.movement_repository import MovementRepository
from stockflow.domain.repository.order_repository import OrderRepository
from stockflow.domain.repository.unit_of_work import UnitOfWork
from stockflow.infrastructure.persistence.json_store import JsonDocumentStore
from stockflow.infrastructure.persistence.serialization import (
    batch_to_domain,
    batch_to_raw,
    movement_to_domain,
    movement_to_raw,
    order_to_domain,
    order_to_raw,
    pool_to_domain,
    pool_to_raw,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class _Collection(Generic[T]):
    """Identity map plus staged writes over one snapshot collection."""

    def __init__(self, raw: dict[str, dict], to_domain: Callable[[dict], T]) -> None:
        self._raw = raw
        self._to_domain = to_domain
        self._loaded: dict[int, T] = {}
        self.staged: dict[int, T] = {}

    def get(self, key: int) -> T | None:
        if key not in self._loaded:
            raw = self._raw.get(str(key))
            if raw is None:
                return None
            self._loaded[key] = self._to_domain(raw)
        return self._loaded[key]

    def keys(self) -> list[int]:
        return sorted({int(k) for k in self._raw} | set(self._loaded))

    def all(self) -> list[T]:
        return [self.get(k) for k in self.keys()]

    def in_snapshot(self, key: int) -> bool:
        return str(key) in self._raw

    def stage(self, key: int, obj: T) -> None:
        self._loaded[key] = obj
        self.staged[key] = obj


# --- Repositories -------------------------------------------------------------


class JsonOrderRepository(OrderRepository):

    def __init__(self, collection: _Collection[Order]) -> None:
        self._orders = collection

    def next_id(self) -> int:
        return max(self._orders.keys(), default=0) + 1

    def count(self) -> int:
        return len(self._orders.keys())

    def get_by_id(self, order_id: int) -> Order | None:
        return self._orders.get(order_id)

    def save(self, order: Order) -> None:
        self._orders.stage(order.id, order)


class JsonBatchRepository(BatchRepository):

    def __init__(self, collection: _Collection[Batch]) -> None:
        self._batches = collection

    def next_id(self) -> int:
        return max(self._batches.keys(), default=0) + 1

    def get_by_id(self, batch_id: int) -> Batch | None:
        return self._batches.get(batch_id)

    def get_by_code(self, batch_code: str) -> Batch | None:
        code = batch_code.strip().upper()
        for batch in self._batches.all():
            if batch.batch_code == code:
                return batch
        return None

    def list_active_by_product(self, product_id: str) -> list[Batch]:
        return [
            b for b in self._batches.all()
            if b.product_id == product_id and b.status == BatchStatus.ACTIVE
        ]

    def list_all(self) -> list[Batch]:
        return self._batches.all()

    def save(self, batch: Batch) -> None:
        self._batches.stage(batch.id, batch)


class JsonInventoryRepository(InventoryRepository):
    """Pools are keyed by batch id; ``id`` is the pool's own identifier."""

    def __init__(self, collection: _Collection[InventoryPool]) -> None:
        self._pools = collection

    def next_id(self) -> int:
        return max((p.id for p in self._pools.all()), default=0) + 1

    def get_by_batch_id(self, batch_id: int) -> InventoryPool | None:
        return self._pools.get(batch_id)

    def list_all(self) -> list[InventoryPool]:
        return self._pools.all()

    def save(self, pool: InventoryPool) -> None:
        self._pools.stage(pool.batch_id, pool)


class JsonMovementRepository(MovementRepository):

    def __init__(self, raw: list[dict]) -> None:
        self._raw = raw
        self.staged: list[MovementRecord] = []

    def add(self, record: MovementRecord) -> None:
        self.staged.append(record)

    def list_by_batch(self, batch_id: int) -> list[MovementRecord]:
        return [movement_to_domain(r) for r in self._raw if r["batch_id"] == batch_id]

    def list_by_order(self, order_id: int) -> list[MovementRecord]:
        return [
            movement_to_domain(r) for r in self._raw if r.get("linked_order_id") == order_id
        ]

    def list_all(self) -> list[MovementRecord]:
        return [movement_to_domain(r) for r in self._raw]


# --- Unit of work -------------------------------------------------------------


class JsonUnitOfWork(UnitOfWork):

    def __init__(self, store: JsonDocumentStore) -> None:
        self._store = store
        snapshot = store.read()
        self._orders = _Collection(snapshot["orders"], order_to_domain)
        self._batches = _Collection(snapshot["batches"], batch_to_domain)
        self._pools = _Collection(snapshot["pools"], pool_to_domain)
        self.orders = JsonOrderRepository(self._orders)
        self.batches = JsonBatchRepository(self._batches)
        self.pools = JsonInventoryRepository(self._pools)
        self.movements = JsonMovementRepository(snapshot["movements"])

    def commit(self) -> None:
        if not (
            self._orders.staged
            or self._batches.staged
            or self._pools.staged
            or self.movements.staged
        ):
            return

        with self._store.transaction() as document:
            # Check everything before writing anything
            self._check_versions("order", document["orders"], self._orders)
            self._check_versions("pool", document["pools"], self._pools)
            self._check_inserts("batch", document["batches"], self._batches)

            for key, order in self._orders.staged.items():
                order.version += 1
                document["orders"][str(key)] = order_to_raw(order)
            for key, pool in self._pools.staged.items():
                pool.version += 1
                document["pools"][str(key)] = pool_to_raw(pool)
            for key, batch in self._batches.staged.items():
                document["batches"][str(key)] = batch_to_raw(batch)
            self._append_movements(document["movements"])

        self._clear()

    def rollback(self) -> None:
        self._clear()

    # --- Internal helpers -----------------------------------------------------

    @staticmethod
    def _check_versions(kind: str, stored: dict[str, dict], collection: _Collection) -> None:
        for key, obj in collection.staged.items():
            current = stored.get(str(key))
            if collection.in_snapshot(key):
                if current is None or current.get("version", 0) != obj.version:
                    raise ConflictError(
                        f"{kind.capitalize()} {key} was modified by another transaction"
                    )
            elif current is not None:
                raise ConflictError(f"{kind.capitalize()} {key} was created concurrently")

    @staticmethod
    def _check_inserts(kind: str, stored: dict[str, dict], collection: _Collection) -> None:
        for key in collection.staged:
            if not collection.in_snapshot(key) and str(key) in stored:
                raise ConflictError(f"{kind.capitalize()} {key} was created concurrently")

    def _append_movements(self, stored: list[dict]) -> None:
        year = datetime.now(timezone.utc).year
        prefix = f"BATCHMOV{year}"
        sequence = sum(1 for r in stored if (r.get("movement_number") or "").startswith(prefix))
        for record in self.movements.staged:
            sequence += 1
            committed = replace(
                record,
                id=len(stored) + 1,
                movement_number=movement_number(year, sequence),
            )
            stored.append(movement_to_raw(committed))
        if self.movements.staged:
            logger.debug("Appended %d ledger record(s)", len(self.movements.staged))

    def _clear(self) -> None:
        self._orders.staged.clear()
        self._batches.staged.clear()
        self._pools.staged.clear()
        self.movements.staged.clear()
