"""CLI commands for batches and stock movements."""

from __future__ import annotations

from datetime import datetime

import click

from stockflow.application.expire_batch import ExpireBatchHandler
from stockflow.application.receive_stock import ReceiveStockHandler
from stockflow.application.register_batch import RegisterBatchHandler
from stockflow.application.transfer_stock import TransferStockHandler
from stockflow.domain.exceptions import DomainException
from stockflow.infrastructure.bootstrap import product_catalog, retry_policy, uow_factory


@click.command("register")
@click.option("--product", "product_id", required=True, help="Product ID.")
@click.option("--code", required=True, help="Batch code.")
@click.option("--price", required=True, help="Unit selling price (e.g. 4.50).")
@click.option("--cost", required=True, help="Unit cost price.")
@click.option("--expiry", type=click.DateTime(formats=["%Y-%m-%d"]), default=None, help="Expiry date (YYYY-MM-DD).")
@click.option("--mfg", type=click.DateTime(formats=["%Y-%m-%d"]), default=None, help="Manufacture date (YYYY-MM-DD).")
def batch_register(
    product_id: str,
    code: str,
    price: str,
    cost: str,
    expiry: datetime | None,
    mfg: datetime | None,
) -> None:
    """Register a new batch with an empty pool."""
    handler = RegisterBatchHandler(
        uow_factory=uow_factory(),
        product_catalog=product_catalog(),
        **retry_policy(),
    )

    try:
        created = handler.handle(
            product_id=product_id,
            batch_code=code,
            unit_price=price,
            cost_price=cost,
            expiry_date=expiry.date() if expiry else None,
            manufacture_date=mfg.date() if mfg else None,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Batch #{created.id} '{created.batch_code}' registered for product {created.product_id}")


@click.command("receive")
@click.option("--id", "batch_id", required=True, type=int, help="Batch ID.")
@click.option("--quantity", required=True, type=int, help="Units received into the warehouse.")
@click.option("--actor", default="system", show_default=True, help="Who performed the receipt.")
@click.option("--purchase", "purchase_id", default=None, help="Linked purchase order.")
def batch_receive(batch_id: int, quantity: int, actor: str, purchase_id: str | None) -> None:
    """Receive stock into a batch's warehouse counter."""
    handler = ReceiveStockHandler(uow_factory(), **retry_policy())

    try:
        handler.handle(batch_id, quantity, actor_id=actor, purchase_id=purchase_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Received {quantity} unit(s) into batch #{batch_id}")


@click.command("transfer")
@click.option("--id", "batch_id", required=True, type=int, help="Batch ID.")
@click.option("--quantity", required=True, type=int, help="Units to move.")
@click.option(
    "--direction",
    type=click.Choice(["to_shelf", "to_warehouse"]),
    default="to_shelf",
    show_default=True,
)
@click.option("--actor", default="system", show_default=True, help="Who moved the stock.")
def batch_transfer(batch_id: int, quantity: int, direction: str, actor: str) -> None:
    """Move stock between the warehouse and the shelf."""
    handler = TransferStockHandler(uow_factory(), **retry_policy())

    try:
        handler.handle(batch_id, quantity, direction, actor_id=actor)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Moved {quantity} unit(s) of batch #{batch_id} {direction.replace('_', ' ')}")


@click.command("expire")
@click.option("--id", "batch_id", required=True, type=int, help="Batch ID.")
def batch_expire(batch_id: int) -> None:
    """Mark a batch expired so FEFO skips it."""
    handler = ExpireBatchHandler(uow_factory(), **retry_policy())

    try:
        handler.handle(batch_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Batch #{batch_id} marked expired.")
