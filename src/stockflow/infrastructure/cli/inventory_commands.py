"""CLI commands for inventory inspection."""

from __future__ import annotations

import click

from stockflow.application.movement_history import MovementHistoryHandler
from stockflow.application.show_inventory import ShowInventoryHandler
from stockflow.domain.exceptions import DomainException
from stockflow.infrastructure.bootstrap import uow_factory


@click.command("show")
@click.option("--product", "product_id", default=None, help="Only batches of this product.")
def inventory_show(product_id: str | None) -> None:
    """Show per-batch stock levels."""
    handler = ShowInventoryHandler(uow_factory())
    lines = handler.handle(product_id)

    if not lines:
        click.echo("No inventory records found.")
        return

    click.echo(
        f"{'Batch':<6} {'Code':<14} {'Product':<10} {'Expiry':<11} "
        f"{'OnHand':>7} {'Shelf':>7} {'Reserved':>9} {'Avail':>7}"
    )
    click.echo("-" * 78)
    for line in lines:
        expiry = line.expiry_date or "-"
        flag = "" if line.status == "active" else f"  ({line.status})"
        click.echo(
            f"{line.batch_id:<6} {line.batch_code:<14} {line.product_id:<10} {expiry:<11} "
            f"{line.on_hand:>7} {line.on_shelf:>7} {line.reserved:>9} {line.available:>7}{flag}"
        )


@click.command("history")
@click.option("--batch", "batch_id", type=int, default=None, help="Batch ID.")
@click.option("--order", "order_id", type=int, default=None, help="Order ID.")
def inventory_history(batch_id: int | None, order_id: int | None) -> None:
    """Show ledger entries for a batch or an order."""
    handler = MovementHistoryHandler(uow_factory())

    try:
        movements = handler.handle(batch_id=batch_id, order_id=order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not movements:
        click.echo("No movements recorded.")
        return

    click.echo(f"{'Number':<19} {'Batch':>5} {'Type':<10} {'Op':<9} {'Delta':>6}  Reason")
    click.echo("-" * 78)
    for m in movements:
        click.echo(
            f"{m.movement_number:<19} {m.batch_id:>5} {m.type:<10} {m.operation:<9} "
            f"{m.quantity_delta:>+6}  {m.reason}"
        )
