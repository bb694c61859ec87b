"""CLI commands for the Order aggregate."""

from __future__ import annotations

import click

from stockflow.application.allocate_stock import AllocateHandler
from stockflow.application.create_order import CreateOrderHandler
from stockflow.application.dto import OrderDTO, OrderItemSpec
from stockflow.application.show_order import ShowOrderHandler
from stockflow.application.transition_order import TransitionOrderHandler
from stockflow.application.update_draft_order import UpdateDraftOrderHandler
from stockflow.application.update_payment import UpdatePaymentStatusHandler
from stockflow.domain.exceptions import DomainException
from stockflow.infrastructure.bootstrap import (
    customer_directory,
    product_catalog,
    retry_policy,
    uow_factory,
)


def _parse_items(raw: str) -> list[OrderItemSpec]:
    """Parse 'P1:3,P2:5@12' into OrderItemSpec list (``@batch`` pins a batch)."""
    specs: list[OrderItemSpec] = []
    for pair in raw.split(","):
        pair = pair.strip()
        if ":" not in pair:
            raise click.BadParameter(
                f"Invalid item format '{pair}'. Expected 'ProductId:Quantity[@BatchId]'."
            )
        product_id, rest = pair.rsplit(":", 1)
        qty_str, _, batch_str = rest.partition("@")
        try:
            qty = int(qty_str)
        except ValueError:
            raise click.BadParameter(
                f"Invalid quantity '{qty_str}' for product '{product_id}'."
            )
        pinned: int | None = None
        if batch_str:
            try:
                pinned = int(batch_str)
            except ValueError:
                raise click.BadParameter(f"Invalid batch id '{batch_str}'.")
        specs.append(
            OrderItemSpec(product_id=product_id.strip(), quantity=qty, pinned_batch_id=pinned)
        )
    return specs


def _display_order(dto: OrderDTO) -> None:
    """Shared formatting for displaying an order."""
    click.echo(f"Order {dto.order_number} (#{dto.id})  status={dto.status}  payment={dto.payment_status}")
    click.echo(f"Customer: {dto.customer_id}   Created by: {dto.created_by}")
    click.echo(f"Created:  {dto.created_at}")
    click.echo()
    click.echo(f"  {'Product':<12} {'Batch':>6} {'Qty':>5} {'Price':>10} {'Total':>10}")
    click.echo(f"  {'-'*47}")
    for item in dto.items:
        click.echo(
            f"  {item.product_id:<12} {item.batch_id:>6} {item.quantity:>5} "
            f"{item.unit_price:>10} {item.line_total:>10}"
        )
    click.echo(f"  {'-'*47}")
    click.echo(f"  {'Subtotal':<27} {dto.subtotal:>20}")
    click.echo(f"  {'Discount':<27} {dto.discount_percentage:>20}")
    click.echo(f"  {'Shipping':<27} {dto.shipping_fee:>20}")
    click.echo(f"  {'Order Total':<27} {dto.total:>20}")


@click.command("create")
@click.option("--customer", required=True, help="Customer ID.")
@click.option("--created-by", default="system", show_default=True, help="Staff member creating the order.")
@click.option("--items", required=True, help="Items as 'Product:Qty[@Batch],...'.")
@click.option("--shipping-fee", default="0", show_default=True, help="Shipping fee.")
@click.option("--discount", default=None, help="Discount percentage (defaults to the customer's tier).")
def order_create(
    customer: str,
    created_by: str,
    items: str,
    shipping_fee: str,
    discount: str | None,
) -> None:
    """Create a draft order bound to batches."""
    specs = _parse_items(items)

    handler = CreateOrderHandler(
        uow_factory=uow_factory(),
        product_catalog=product_catalog(),
        customer_directory=customer_directory(),
        **retry_policy(),
    )

    try:
        dto = handler.handle(
            customer_id=customer,
            created_by=created_by,
            item_specs=specs,
            shipping_fee=shipping_fee,
            discount_percentage=discount,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{dto.id} created")
    _display_order(dto)


@click.command("show")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to display.")
def order_show(order_id: int) -> None:
    """Show details of an existing order."""
    handler = ShowOrderHandler(uow_factory())

    try:
        dto = handler.handle(order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_order(dto)


@click.command("transition")
@click.option("--id", "order_id", required=True, type=int, help="Order ID.")
@click.option(
    "--status",
    required=True,
    type=click.Choice(["draft", "pending", "shipping", "delivered", "cancelled", "refunded"]),
    help="Target status.",
)
@click.option("--actor", default="system", show_default=True, help="Who performed the change.")
def order_transition(order_id: int, status: str, actor: str) -> None:
    """Move an order to a new status, adjusting shelf stock."""
    handler = TransitionOrderHandler(uow_factory(), **retry_policy())

    try:
        dto = handler.handle(order_id, status, actor_id=actor)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{order_id} is now {dto.status} (payment={dto.payment_status}).")


@click.command("pay")
@click.option("--id", "order_id", required=True, type=int, help="Order ID.")
@click.option(
    "--status",
    type=click.Choice(["pending", "paid", "failed", "refunded"]),
    default="paid",
    show_default=True,
)
def order_pay(order_id: int, status: str) -> None:
    """Record a payment status for an order."""
    handler = UpdatePaymentStatusHandler(uow_factory(), **retry_policy())

    try:
        dto = handler.handle(order_id, status)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{order_id} payment status: {dto.payment_status}")


@click.command("update")
@click.option("--id", "order_id", required=True, type=int, help="Draft order ID.")
@click.option("--shipping-fee", default=None, help="New shipping fee.")
@click.option("--discount", default=None, help="New discount percentage.")
def order_update(order_id: int, shipping_fee: str | None, discount: str | None) -> None:
    """Change the shipping fee or discount of a draft order."""
    if shipping_fee is None and discount is None:
        raise click.ClickException("Nothing to update: pass --shipping-fee and/or --discount")

    handler = UpdateDraftOrderHandler(uow_factory(), **retry_policy())

    try:
        dto = handler.handle(order_id, shipping_fee=shipping_fee, discount_percentage=discount)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_order(dto)


@click.command("allocate")
@click.option("--product", "product_id", required=True, help="Product ID.")
@click.option("--quantity", required=True, type=int, help="Units wanted.")
def order_allocate(product_id: str, quantity: int) -> None:
    """Preview the FEFO batch plan for a quantity (nothing is reserved)."""
    handler = AllocateHandler(uow_factory())

    try:
        plan = handler.handle(product_id, quantity)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"  {'Batch':>6} {'Qty':>5} {'Price':>10} {'Expiry':>12}")
    click.echo(f"  {'-'*36}")
    for pick in plan:
        click.echo(
            f"  {pick.batch_id:>6} {pick.quantity:>5} {pick.unit_price:>10} {pick.expiry_date or '-':>12}"
        )
