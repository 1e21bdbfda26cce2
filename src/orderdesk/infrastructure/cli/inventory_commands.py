"""CLI commands for inventory management."""

from __future__ import annotations

import click

from orderdesk.infrastructure import bootstrap
from orderdesk.infrastructure.cli.common import execute, parse_items


def _print_lines(lines) -> None:
    click.echo(f"{'ID':<6} {'Product':<20} {'Available':>10} {'Sold':>8} {'Tracked':>8}")
    click.echo("-" * 56)
    for line in lines:
        click.echo(
            f"{line.product_id:<6} {line.product_name:<20} {line.available:>10} "
            f"{line.sold:>8} {'yes' if line.tracked else 'no':>8}"
        )


@click.command("show")
def inventory_show() -> None:
    """Show current inventory levels."""
    lines = execute(bootstrap.show_inventory_handler().handle)
    if not lines:
        click.echo("No inventory records found.")
        return
    _print_lines(lines)


@click.command("restock")
@click.argument("product_id")
@click.option("--quantity", required=True, type=int, help="Units to add.")
def inventory_restock(product_id: str, quantity: int) -> None:
    """Add units to a product's available stock."""
    line = execute(bootstrap.restock_inventory_handler().handle, product_id, quantity)
    click.echo(f"Restocked '{line.product_name}': {line.available} available")


@click.command("check")
@click.option("--items", required=True, help="Items as 'ProductId:Qty,ProductId:Qty'.")
def inventory_check(items: str) -> None:
    """Check whether items could be ordered right now."""
    result = execute(bootstrap.check_stock_handler().handle, parse_items(items))
    for line in result.items:
        name = line.name or line.message or ""
        state = "in stock" if line.in_stock else "OUT OF STOCK"
        click.echo(
            f"{line.product_id:<6} {name:<20} {line.requested:>5} / {line.available:<6} {state}"
        )
    click.echo("All items available." if result.in_stock else "Some items are unavailable.")


@click.command("low-stock")
@click.option("--threshold", type=int, default=None, help="Override the configured threshold.")
def inventory_low_stock(threshold: int | None) -> None:
    """List tracked products that are running low."""
    lines = execute(bootstrap.low_stock_alerts_handler().handle, threshold)
    if not lines:
        click.echo("No products are low on stock.")
        return
    _print_lines(lines)


@click.command("backorders")
def inventory_backorders() -> None:
    """List backordered line items of open orders."""
    items = execute(bootstrap.backordered_items_handler().handle)
    if not items:
        click.echo("No backordered items.")
        return
    click.echo(f"{'Order':<16} {'Product':<20} {'Qty':>5}  Ordered")
    click.echo("-" * 60)
    for item in items:
        click.echo(
            f"{item.order_number:<16} {item.product_name:<20} {item.quantity:>5}  {item.ordered_at}"
        )
