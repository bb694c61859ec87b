"""Composition root: wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

from typing import Callable

from stockflow.domain.repository.unit_of_work import UnitOfWork
from stockflow.infrastructure.persistence.json_customer_directory import (
    JsonCustomerDirectory,
)
from stockflow.infrastructure.persistence.json_product_catalog import (
    JsonProductCatalog,
)
from stockflow.infrastructure.persistence.json_store import JsonDocumentStore
from stockflow.infrastructure.persistence.json_unit_of_work import JsonUnitOfWork
from stockflow.infrastructure.settings import Settings, get_settings


def document_store(settings: Settings | None = None) -> JsonDocumentStore:
    settings = settings or get_settings()
    return JsonDocumentStore(
        settings.data_dir / "inventory.json",
        lock_timeout=settings.lock_timeout_seconds,
    )


def uow_factory(settings: Settings | None = None) -> Callable[[], UnitOfWork]:
    store = document_store(settings)
    return lambda: JsonUnitOfWork(store)


def product_catalog(settings: Settings | None = None) -> JsonProductCatalog:
    settings = settings or get_settings()
    return JsonProductCatalog(settings.data_dir / "products.json")


def customer_directory(settings: Settings | None = None) -> JsonCustomerDirectory:
    settings = settings or get_settings()
    return JsonCustomerDirectory(settings.data_dir / "customers.json")


def retry_policy(settings: Settings | None = None) -> dict:
    """Keyword arguments for handlers that retry on ConflictError."""
    settings = settings or get_settings()
    return {
        "max_attempts": settings.max_conflict_retries,
        "backoff_seconds": settings.retry_backoff_seconds,
    }
