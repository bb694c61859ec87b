"""Integration tests for the CreateOrder use case.

Uses in-memory fakes; no file I/O.
"""

import threading
from datetime import date

import pytest

from stockflow.application.create_order import CreateOrderHandler
from stockflow.application.dto import OrderItemSpec
from stockflow.application.receive_stock import ReceiveStockHandler
from stockflow.application.register_batch import RegisterBatchHandler
from stockflow.application.transfer_stock import TransferStockHandler
from stockflow.domain.exceptions import (
    BatchMismatchError,
    ConflictError,
    EntityNotFoundError,
    InsufficientStockError,
    ValidationError,
)
from stockflow.domain.model.customer import Customer, CustomerType
from stockflow.domain.model.product import Product
from stockflow.domain.model.value_objects import Money
from tests.fakes import (
    FakeCustomerDirectory,
    FakeProductCatalog,
    FakeStore,
    uow_factory_for,
)


def _setup() -> tuple[CreateOrderHandler, FakeStore]:
    """Build handler with fakes pre-loaded with products, customers and batches."""
    store = FakeStore()
    store.add_batch(1, "P1", on_shelf=5, expiry=date(2025, 3, 1), price="15.00")
    store.add_batch(2, "P1", on_shelf=20, expiry=date(2025, 8, 1), price="16.00")
    store.add_batch(3, "P2", on_shelf=10, expiry=None, price="25.00")
    products = [
        Product(id="P1", name="Milk", price=Money.of("15.00")),
        Product(id="P2", name="Bread", price=Money.of("25.00")),
        Product(id="P3", name="Retired", price=Money.of("1.00"), active=False),
    ]
    customers = [
        Customer(id="guest", name="Walk-in"),
        Customer(id="vip", name="Alice", customer_type=CustomerType.VIP),
        Customer(id="gone", name="Bob", active=False),
    ]
    handler = CreateOrderHandler(
        uow_factory_for(store),
        FakeProductCatalog(products),
        FakeCustomerDirectory(customers),
    )
    return handler, store


class TestCreateOrderHappyPath:

    def test_creates_draft_with_fefo_lines(self):
        handler, store = _setup()
        dto = handler.handle("guest", "clerk", [OrderItemSpec("P1", 7)])

        assert dto.status == "draft"
        assert dto.payment_status == "pending"
        assert [(i.batch_id, i.quantity) for i in dto.items] == [(1, 5), (2, 2)]
        assert dto.total == "$107.00"
        assert dto.id in store.orders

    def test_assigns_sequential_ids_and_numbers(self):
        handler, _ = _setup()
        dto1 = handler.handle("guest", "clerk", [OrderItemSpec("P1", 1)])
        dto2 = handler.handle("guest", "clerk", [OrderItemSpec("P2", 1)])

        assert dto2.id == dto1.id + 1
        assert dto1.order_number[-5:] == "00001"
        assert dto2.order_number[-5:] == "00002"

    def test_customer_tier_sets_default_discount(self):
        handler, _ = _setup()
        dto = handler.handle("vip", "clerk", [OrderItemSpec("P2", 4)])

        assert dto.discount_percentage == "20%"
        assert dto.total == "$80.00"

    def test_explicit_discount_and_shipping(self):
        handler, _ = _setup()
        dto = handler.handle(
            "vip", "clerk", [OrderItemSpec("P2", 2)],
            shipping_fee="4.99", discount_percentage="5",
        )

        assert dto.total == "$52.49"
        assert dto.shipping_fee == "$4.99"

    def test_pinned_batch(self):
        handler, _ = _setup()
        dto = handler.handle("guest", "clerk", [OrderItemSpec("P1", 3, pinned_batch_id=2)])

        assert [(i.batch_id, i.unit_price) for i in dto.items] == [(2, "$16.00")]


class TestCreateOrderValidation:

    def test_unknown_customer_rejected(self):
        handler, _ = _setup()
        with pytest.raises(EntityNotFoundError, match="Customer not found"):
            handler.handle("nobody", "clerk", [OrderItemSpec("P1", 1)])

    def test_inactive_customer_rejected(self):
        handler, _ = _setup()
        with pytest.raises(ValidationError, match="inactive"):
            handler.handle("gone", "clerk", [OrderItemSpec("P1", 1)])

    def test_unknown_product_rejected(self):
        handler, _ = _setup()
        with pytest.raises(EntityNotFoundError, match="Product not found"):
            handler.handle("guest", "clerk", [OrderItemSpec("NOPE", 1)])

    def test_inactive_product_rejected(self):
        handler, _ = _setup()
        with pytest.raises(ValidationError, match="not available"):
            handler.handle("guest", "clerk", [OrderItemSpec("P3", 1)])

    def test_pinned_batch_of_other_product_rejected(self):
        handler, store = _setup()
        with pytest.raises(BatchMismatchError):
            handler.handle("guest", "clerk", [OrderItemSpec("P1", 1, pinned_batch_id=3)])
        assert store.orders == {}

    def test_not_enough_stock_rejected(self):
        handler, store = _setup()
        with pytest.raises(InsufficientStockError) as exc_info:
            handler.handle("guest", "clerk", [OrderItemSpec("P1", 30)])
        assert exc_info.value.shortfall == 5
        assert store.orders == {}

    def test_invalid_discount_rejected(self):
        handler, _ = _setup()
        with pytest.raises(ValidationError, match="between 0 and 100"):
            handler.handle("guest", "clerk", [OrderItemSpec("P1", 1)], discount_percentage="150")

    def test_negative_quantity_rejected(self):
        handler, _ = _setup()
        with pytest.raises(ValidationError, match="must be positive"):
            handler.handle("guest", "clerk", [OrderItemSpec("P1", -1)])


class TestNonDollarCatalog:

    def _vnd_store(self) -> tuple[FakeStore, FakeProductCatalog]:
        store = FakeStore()
        catalog = FakeProductCatalog([Product(id="PHO", name="Pho", price=Money.of("15000", "VND"))])
        batch = RegisterBatchHandler(uow_factory_for(store), catalog).handle(
            "PHO", "lot-1", "15000", "9000", expiry_date=date(2025, 6, 1)
        )
        ReceiveStockHandler(uow_factory_for(store)).handle(batch.id, 10, "clerk")
        TransferStockHandler(uow_factory_for(store)).handle(batch.id, 10, "to-shelf", "clerk")
        return store, catalog

    def test_order_is_priced_in_catalog_currency(self):
        store, catalog = self._vnd_store()
        handler = CreateOrderHandler(
            uow_factory_for(store),
            catalog,
            FakeCustomerDirectory([Customer(id="guest", name="Walk-in")]),
        )

        dto = handler.handle("guest", "clerk", [OrderItemSpec("PHO", 2)], shipping_fee="5000")

        assert dto.items[0].unit_price == "15000.00 VND"
        assert dto.shipping_fee == "5000.00 VND"
        assert dto.total == "35000.00 VND"
        assert store.orders[dto.id].total.currency == "VND"

    def test_lines_in_two_currencies_rejected(self):
        store, catalog = self._vnd_store()
        store.add_batch(2, "P1", on_shelf=5, price="2.00")
        catalog = FakeProductCatalog(
            catalog.list_all() + [Product(id="P1", name="Milk", price=Money.of("2.00"))]
        )
        handler = CreateOrderHandler(
            uow_factory_for(store),
            catalog,
            FakeCustomerDirectory([Customer(id="guest", name="Walk-in")]),
        )

        with pytest.raises(ValidationError, match="mix currencies: VND and USD"):
            handler.handle("guest", "clerk", [OrderItemSpec("PHO", 1), OrderItemSpec("P1", 1)])
        assert store.orders == {}


class TestConcurrentCreates:

    def test_losing_create_is_retried_with_the_next_number(self):
        store = FakeStore()
        store.add_batch(1, "P1", on_shelf=20, price="15.00")
        barrier = threading.Barrier(2)
        lined_up: set[int] = set()

        def line_up(uow):
            # Both units picked the same next id; let them race to commit
            me = threading.get_ident()
            if me not in lined_up:
                lined_up.add(me)
                barrier.wait(timeout=5)

        handler = CreateOrderHandler(
            uow_factory_for(store, before_commit=line_up),
            FakeProductCatalog([Product(id="P1", name="Milk", price=Money.of("15.00"))]),
            FakeCustomerDirectory([Customer(id="guest", name="Walk-in")]),
            backoff_seconds=0,
        )
        outcomes: list[object] = []

        def run() -> None:
            try:
                outcomes.append(handler.handle("guest", "clerk", [OrderItemSpec("P1", 1)]))
            except Exception as exc:  # collected for the assertions below
                outcomes.append(exc)

        threads = [threading.Thread(target=run) for _ in range(2)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=10)

        assert len(outcomes) == 2
        assert not [o for o in outcomes if isinstance(o, Exception)]
        assert sorted(o.id for o in outcomes) == [1, 2]
        assert sorted(o.order_number[-5:] for o in outcomes) == ["00001", "00002"]
        assert sorted(store.orders) == [1, 2]

    def test_gives_up_after_max_attempts(self):
        store = FakeStore()
        store.add_batch(1, "P1", on_shelf=20, price="15.00")
        calls = {"n": 0}

        def always_conflict(uow):
            calls["n"] += 1
            raise ConflictError("simulated")

        handler = CreateOrderHandler(
            uow_factory_for(store, before_commit=always_conflict),
            FakeProductCatalog([Product(id="P1", name="Milk", price=Money.of("15.00"))]),
            FakeCustomerDirectory([Customer(id="guest", name="Walk-in")]),
            max_attempts=2,
            backoff_seconds=0,
        )
        with pytest.raises(ConflictError):
            handler.handle("guest", "clerk", [OrderItemSpec("P1", 1)])

        assert calls["n"] == 2
        assert store.orders == {}
