"""Application service: Register Batch use case.

Creates a batch together with its empty inventory pool.  Stock enters
the pool afterwards through ``ReceiveStockHandler``.
"""

from __future__ import annotations

from datetime import date
from typing import Callable

from stockflow.application.retry import conflict_retrying
from stockflow.domain.exceptions import EntityNotFoundError, ValidationError
from stockflow.domain.model.batch import Batch
from stockflow.domain.model.inventory import InventoryPool
from stockflow.domain.model.product import Product
from stockflow.domain.model.value_objects import Money
from stockflow.domain.repository.product_catalog import ProductCatalog
from stockflow.domain.repository.unit_of_work import UnitOfWork


class RegisterBatchHandler:

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        product_catalog: ProductCatalog,
        max_attempts: int = 3,
        backoff_seconds: float = 0.05,
    ) -> None:
        self._uow_factory = uow_factory
        self._product_catalog = product_catalog
        self._max_attempts = max_attempts
        self._backoff_seconds = backoff_seconds

    def handle(
        self,
        product_id: str,
        batch_code: str,
        unit_price: str,
        cost_price: str,
        expiry_date: date | None = None,
        manufacture_date: date | None = None,
    ) -> Batch:
        product = self._product_catalog.get_by_id(product_id)
        if product is None:
            raise EntityNotFoundError(f"Product not found: '{product_id}'")

        retrying = conflict_retrying(self._max_attempts, self._backoff_seconds)
        return retrying(
            self._attempt,
            product,
            batch_code,
            unit_price,
            cost_price,
            expiry_date,
            manufacture_date,
        )

    def _attempt(
        self,
        product: Product,
        batch_code: str,
        unit_price: str,
        cost_price: str,
        expiry_date: date | None,
        manufacture_date: date | None,
    ) -> Batch:
        with self._uow_factory() as uow:
            if uow.batches.get_by_code(batch_code) is not None:
                raise ValidationError(f"Batch code '{batch_code.upper()}' already exists")

            batch = Batch.create(
                batch_id=uow.batches.next_id(),
                product_id=product.id,
                batch_code=batch_code,
                unit_price=Money.of(unit_price, product.price.currency),
                cost_price=Money.of(cost_price, product.price.currency),
                expiry_date=expiry_date,
                manufacture_date=manufacture_date,
            )
            uow.batches.save(batch)
            uow.pools.save(InventoryPool(id=uow.pools.next_id(), batch_id=batch.id))
            uow.commit()
        return batch
