"""In-memory fakes for testing.

``FakeStore`` plays the part of the JSON document: it holds the last
committed state.  ``FakeUnitOfWork`` implements the same contract as the
JSON unit of work (identity map over a private snapshot, staged writes,
version check at commit) but keeps everything in dicts. No file I/O.
"""

from __future__ import annotations

import copy
import threading
from dataclasses import replace
from datetime import date
from typing import Callable

from stockflow.domain.exceptions import ConflictError
from stockflow.domain.model.batch import Batch, BatchStatus
from stockflow.domain.model.customer import Customer
from stockflow.domain.model.inventory import InventoryPool
from stockflow.domain.model.movement import MovementRecord, movement_number
from stockflow.domain.model.order import Order
from stockflow.domain.model.product import Product
from stockflow.domain.model.value_objects import Money
from stockflow.domain.repository.batch_repository import BatchRepository
from stockflow.domain.repository.customer_directory import CustomerDirectory
from stockflow.domain.repository.inventory_repository import InventoryRepository
from stockflow.domain.repository.movement_repository import MovementRepository
from stockflow.domain.repository.order_repository import OrderRepository
from stockflow.domain.repository.product_catalog import ProductCatalog
from stockflow.domain.repository.unit_of_work import UnitOfWork


class FakeStore:

    def __init__(self) -> None:
        self.orders: dict[int, Order] = {}
        self.batches: dict[int, Batch] = {}
        self.pools: dict[int, InventoryPool] = {}  # keyed by batch id
        self.movements: list[MovementRecord] = []
        self.commits = 0
        self.lock = threading.Lock()

    # --- Seeding helpers ------------------------------------------------------

    def add_batch(
        self,
        batch_id: int,
        product_id: str,
        on_shelf: int = 0,
        on_hand: int = 0,
        reserved: int = 0,
        expiry: date | None = None,
        price: str = "10.00",
        status: BatchStatus = BatchStatus.ACTIVE,
        currency: str = "USD",
    ) -> Batch:
        """Put a batch and its pool straight into committed state."""
        batch = Batch(
            id=batch_id,
            product_id=product_id,
            batch_code=f"B{batch_id:03d}",
            unit_price=Money.of(price, currency),
            cost_price=Money.of("1.00", currency),
            expiry_date=expiry,
            status=status,
        )
        self.batches[batch_id] = batch
        self.pools[batch_id] = InventoryPool(
            id=batch_id,
            batch_id=batch_id,
            quantity_on_hand=on_hand,
            quantity_on_shelf=on_shelf,
            quantity_reserved=reserved,
        )
        return batch

    def pool(self, batch_id: int) -> InventoryPool:
        return self.pools[batch_id]


class FakeOrderRepository(OrderRepository):

    def __init__(self, snapshot: dict[int, Order]) -> None:
        self._store = snapshot
        self.staged: dict[int, Order] = {}

    def next_id(self) -> int:
        return max(self._store, default=0) + 1

    def count(self) -> int:
        return len(self._store)

    def get_by_id(self, order_id: int) -> Order | None:
        return self._store.get(order_id)

    def save(self, order: Order) -> None:
        self._store[order.id] = order
        self.staged[order.id] = order


class FakeBatchRepository(BatchRepository):

    def __init__(self, snapshot: dict[int, Batch]) -> None:
        self._store = snapshot
        self.staged: dict[int, Batch] = {}

    def next_id(self) -> int:
        return max(self._store, default=0) + 1

    def get_by_id(self, batch_id: int) -> Batch | None:
        return self._store.get(batch_id)

    def get_by_code(self, batch_code: str) -> Batch | None:
        code = batch_code.strip().upper()
        for b in self._store.values():
            if b.batch_code == code:
                return b
        return None

    def list_active_by_product(self, product_id: str) -> list[Batch]:
        return [b for b in self._store.values() if b.product_id == product_id and b.is_active]

    def list_all(self) -> list[Batch]:
        return list(self._store.values())

    def save(self, batch: Batch) -> None:
        self._store[batch.id] = batch
        self.staged[batch.id] = batch


class FakeInventoryRepository(InventoryRepository):

    def __init__(self, snapshot: dict[int, InventoryPool]) -> None:
        self._store = snapshot
        self.staged: dict[int, InventoryPool] = {}

    def next_id(self) -> int:
        return max((p.id for p in self._store.values()), default=0) + 1

    def get_by_batch_id(self, batch_id: int) -> InventoryPool | None:
        return self._store.get(batch_id)

    def list_all(self) -> list[InventoryPool]:
        return list(self._store.values())

    def save(self, pool: InventoryPool) -> None:
        self._store[pool.batch_id] = pool
        self.staged[pool.batch_id] = pool


class FakeMovementRepository(MovementRepository):

    def __init__(self, committed: list[MovementRecord]) -> None:
        self._committed = committed
        self.staged: list[MovementRecord] = []

    def add(self, record: MovementRecord) -> None:
        self.staged.append(record)

    def list_by_batch(self, batch_id: int) -> list[MovementRecord]:
        return [r for r in self._committed if r.batch_id == batch_id]

    def list_by_order(self, order_id: int) -> list[MovementRecord]:
        return [r for r in self._committed if r.linked_order_id == order_id]

    def list_all(self) -> list[MovementRecord]:
        return list(self._committed)


class FakeUnitOfWork(UnitOfWork):
    """``before_commit`` runs just before the version check; tests use it
    to line up concurrent units or to inject conflicts."""

    def __init__(
        self,
        store: FakeStore,
        before_commit: Callable[[FakeUnitOfWork], None] | None = None,
    ) -> None:
        self._store = store
        self._before_commit = before_commit
        with store.lock:
            self._snapshot_orders = {k: o.version for k, o in store.orders.items()}
            self._snapshot_pools = {k: p.version for k, p in store.pools.items()}
            self._snapshot_batches = set(store.batches)
            self.orders = FakeOrderRepository(copy.deepcopy(store.orders))
            self.batches = FakeBatchRepository(copy.deepcopy(store.batches))
            self.pools = FakeInventoryRepository(copy.deepcopy(store.pools))
            self.movements = FakeMovementRepository(list(store.movements))
        self.committed = False

    def commit(self) -> None:
        if not (
            self.orders.staged
            or self.batches.staged
            or self.pools.staged
            or self.movements.staged
        ):
            return

        if self._before_commit is not None:
            self._before_commit(self)

        with self._store.lock:
            self._check(self.orders.staged, self._snapshot_orders, self._store.orders, "Order")
            self._check(self.pools.staged, self._snapshot_pools, self._store.pools, "Pool")
            for key in self.batches.staged:
                if key not in self._snapshot_batches and key in self._store.batches:
                    raise ConflictError(f"Batch {key} was created concurrently")

            for key, order in self.orders.staged.items():
                order.version += 1
                self._store.orders[key] = copy.deepcopy(order)
            for key, pool in self.pools.staged.items():
                pool.version += 1
                self._store.pools[key] = copy.deepcopy(pool)
            for key, batch in self.batches.staged.items():
                self._store.batches[key] = copy.deepcopy(batch)
            for record in self.movements.staged:
                sequence = len(self._store.movements) + 1
                self._store.movements.append(
                    replace(record, id=sequence, movement_number=movement_number(2025, sequence))
                )
            self._store.commits += 1

        self.committed = True
        self.rollback()

    def rollback(self) -> None:
        self.orders.staged.clear()
        self.batches.staged.clear()
        self.pools.staged.clear()
        self.movements.staged.clear()

    @staticmethod
    def _check(staged: dict, snapshot: dict, stored: dict, kind: str) -> None:
        for key, obj in staged.items():
            current = stored.get(key)
            if key in snapshot:
                if current is None or current.version != snapshot[key]:
                    raise ConflictError(f"{kind} {key} was modified by another transaction")
            elif current is not None:
                raise ConflictError(f"{kind} {key} was created concurrently")


def uow_factory_for(
    store: FakeStore,
    before_commit: Callable[[FakeUnitOfWork], None] | None = None,
) -> Callable[[], FakeUnitOfWork]:
    return lambda: FakeUnitOfWork(store, before_commit)


class FakeProductCatalog(ProductCatalog):

    def __init__(self, products: list[Product] | None = None) -> None:
        self._store: dict[str, Product] = {p.id: p for p in products or []}

    def get_by_id(self, product_id: str) -> Product | None:
        return self._store.get(product_id)

    def list_all(self) -> list[Product]:
        return list(self._store.values())


class FakeCustomerDirectory(CustomerDirectory):

    def __init__(self, customers: list[Customer] | None = None) -> None:
        self._store: dict[str, Customer] = {c.id: c for c in customers or []}

    def get_by_id(self, customer_id: str) -> Customer | None:
        return self._store.get(customer_id)
