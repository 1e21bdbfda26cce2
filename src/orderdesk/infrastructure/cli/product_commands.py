"""CLI commands for the Product aggregate."""

from __future__ import annotations

import click

from orderdesk.infrastructure import bootstrap
from orderdesk.infrastructure.cli.common import execute


@click.command("add")
@click.option("--name", required=True, help="Product name.")
@click.option("--price", required=True, help="Price (e.g. 15.00).")
@click.option("--sku", default=None, help="Stock keeping unit.")
@click.option("--image", default=None, help="Image URL.")
@click.option("--stock", type=int, default=0, show_default=True, help="Initial available stock.")
@click.option("--untracked", is_flag=True, default=False, help="Do not track stock for this product.")
def product_add(
    name: str, price: str, sku: str | None, image: str | None, stock: int, untracked: bool
) -> None:
    """Add a new product to the catalog."""
    product = execute(
        bootstrap.add_product_handler().handle,
        name=name,
        price=price,
        sku=sku,
        image=image,
        stock=stock,
        tracked=not untracked,
    )
    click.echo(f"Product #{product.id} '{product.name}' added at {product.price}")


@click.command("list")
def product_list() -> None:
    """List all products in the catalog."""
    products = execute(bootstrap.list_products_handler().handle)

    if not products:
        click.echo("No products found.")
        return

    click.echo(f"{'ID':<6} {'Name':<20} {'SKU':<12} {'Price':>10}")
    click.echo("-" * 51)
    for p in products:
        click.echo(f"{p.id:<6} {p.name:<20} {p.sku or '-':<12} {str(p.price):>10}")


@click.command("update")
@click.option("--id", "product_id", required=True, help="Product ID.")
@click.option("--price", required=True, help="New price (e.g. 29.99).")
def product_update(product_id: str, price: str) -> None:
    """Update a product's price."""
    product = execute(
        bootstrap.update_product_handler().handle, product_id=product_id, new_price=price
    )
    click.echo(f"Product #{product.id} price updated to {product.price}")
