"""Integration tests for payment status and draft edits."""

from datetime import date

import pytest

from stockflow.application.transition_order import TransitionOrderHandler
from stockflow.application.update_draft_order import UpdateDraftOrderHandler
from stockflow.application.update_payment import UpdatePaymentStatusHandler
from stockflow.application.show_order import ShowOrderHandler
from stockflow.domain.exceptions import ConflictError, EntityNotFoundError, ValidationError
from stockflow.domain.model.order import LineRequest
from stockflow.domain.service.order_lifecycle import OrderLifecycleEngine
from tests.fakes import FakeStore, FakeUnitOfWork, uow_factory_for


def _setup() -> tuple[FakeStore, int]:
    store = FakeStore()
    store.add_batch(1, "P1", on_shelf=10, expiry=date(2025, 6, 1), price="10.00")
    with FakeUnitOfWork(store) as uow:
        order = OrderLifecycleEngine(uow).create_order("C1", "clerk", [LineRequest("P1", 2)])
        uow.commit()
    return store, order.id


class TestUpdatePayment:

    def test_mark_paid(self):
        store, order_id = _setup()
        dto = UpdatePaymentStatusHandler(uow_factory_for(store)).handle(order_id, "PAID")
        assert dto.payment_status == "paid"
        assert store.orders[order_id].payment_status.value == "paid"

    def test_paid_then_cancelled_is_refunded(self):
        store, order_id = _setup()
        UpdatePaymentStatusHandler(uow_factory_for(store)).handle(order_id, "paid")

        dto = TransitionOrderHandler(uow_factory_for(store)).handle(order_id, "cancelled")

        assert dto.payment_status == "refunded"

    def test_unknown_payment_status(self):
        store, order_id = _setup()
        with pytest.raises(ValidationError, match="Invalid payment status"):
            UpdatePaymentStatusHandler(uow_factory_for(store)).handle(order_id, "maybe")

    def test_unknown_order(self):
        with pytest.raises(EntityNotFoundError):
            UpdatePaymentStatusHandler(uow_factory_for(FakeStore())).handle(3, "paid")


class TestUpdateDraftOrder:

    def test_shipping_and_discount(self):
        store, order_id = _setup()
        dto = UpdateDraftOrderHandler(uow_factory_for(store)).handle(
            order_id, shipping_fee="3.50", discount_percentage="10"
        )
        assert dto.total == "$21.50"
        assert str(store.orders[order_id].total) == "$21.50"

    def test_rejected_once_pending(self):
        store, order_id = _setup()
        TransitionOrderHandler(uow_factory_for(store)).handle(order_id, "pending")

        with pytest.raises(ValidationError, match="draft"):
            UpdateDraftOrderHandler(uow_factory_for(store)).handle(order_id, shipping_fee="1")

    def test_edit_is_replayed_on_a_fresh_read_after_a_conflict(self):
        store, order_id = _setup()
        calls = {"n": 0}

        def conflict_once(uow):
            calls["n"] += 1
            if calls["n"] == 1:
                raise ConflictError("simulated")

        dto = UpdateDraftOrderHandler(
            uow_factory_for(store, before_commit=conflict_once), backoff_seconds=0
        ).handle(order_id, shipping_fee="3.50")

        assert calls["n"] == 2
        assert dto.total == "$23.50"
        assert store.orders[order_id].version == 2

    def test_shipping_fee_follows_order_currency(self):
        store = FakeStore()
        store.add_batch(1, "P9", on_shelf=5, price="15000", currency="VND")
        with FakeUnitOfWork(store) as uow:
            order = OrderLifecycleEngine(uow).create_order("C1", "clerk", [LineRequest("P9", 1)])
            uow.commit()

        dto = UpdateDraftOrderHandler(uow_factory_for(store)).handle(order.id, shipping_fee="2000")

        assert dto.shipping_fee == "2000.00 VND"
        assert dto.total == "17000.00 VND"


class TestShowOrder:

    def test_show(self):
        store, order_id = _setup()
        dto = ShowOrderHandler(uow_factory_for(store)).handle(order_id)
        assert dto.order_number == store.orders[order_id].order_number
        assert dto.items[0].line_total == "$20.00"

    def test_missing(self):
        with pytest.raises(EntityNotFoundError, match="not found"):
            ShowOrderHandler(uow_factory_for(FakeStore())).handle(1)
