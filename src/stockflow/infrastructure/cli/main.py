import click

from stockflow.infrastructure.cli.batch_commands import (
    batch_expire,
    batch_receive,
    batch_register,
    batch_transfer,
)
from stockflow.infrastructure.cli.inventory_commands import (
    inventory_history,
    inventory_show,
)
from stockflow.infrastructure.cli.order_commands import (
    order_allocate,
    order_create,
    order_pay,
    order_show,
    order_transition,
    order_update,
)
from stockflow.infrastructure.cli.product_commands import product_list
from stockflow.infrastructure.logging_config import configure_logging
from stockflow.infrastructure.settings import get_settings


@click.group()
@click.option("-v", "--verbose", is_flag=True, default=False, help="Debug logging.")
def cli(verbose: bool) -> None:
    """Stockflow: batch inventory and order lifecycle"""
    configure_logging(get_settings().log_level, verbose=verbose)


@cli.group()
def order() -> None:
    """Manage orders."""


@cli.group()
def batch() -> None:
    """Manage batches and their stock."""


@cli.group()
def product() -> None:
    """Browse the product catalog."""


@cli.group()
def inventory() -> None:
    """Inspect inventory and the movement ledger."""


# Register subcommands
order.add_command(order_allocate)
order.add_command(order_create)
order.add_command(order_pay)
order.add_command(order_show)
order.add_command(order_transition)
order.add_command(order_update)
batch.add_command(batch_expire)
batch.add_command(batch_receive)
batch.add_command(batch_register)
batch.add_command(batch_transfer)
inventory.add_command(inventory_history)
inventory.add_command(inventory_show)
product.add_command(product_list)
