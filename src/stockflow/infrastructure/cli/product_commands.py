"""CLI commands for the product catalog (read-only)."""

from __future__ import annotations

import click

from stockflow.infrastructure.bootstrap import product_catalog


@click.command("list")
def product_list() -> None:
    """List all products in the catalog."""
    products = product_catalog().list_all()

    if not products:
        click.echo("No products found.")
        return

    click.echo(f"{'ID':<10} {'Name':<25} {'Price':>10} {'Active':>7}")
    click.echo("-" * 55)
    for p in products:
        click.echo(f"{p.id:<10} {p.name:<25} {str(p.price):>10} {'yes' if p.active else 'no':>7}")
