import logging

import click

from orderdesk.infrastructure import bootstrap
from orderdesk.infrastructure.cli.inventory_commands import (
    inventory_backorders,
    inventory_check,
    inventory_low_stock,
    inventory_restock,
    inventory_show,
)
from orderdesk.infrastructure.cli.order_commands import (
    order_bulk_transition,
    order_cancel,
    order_create,
    order_list,
    order_pay,
    order_show,
    order_split,
    order_track,
    order_transition,
)
from orderdesk.infrastructure.cli.product_commands import (
    product_add,
    product_list,
    product_update,
)
from orderdesk.infrastructure.cli.return_commands import (
    refund_process,
    return_list,
    return_request,
    return_update,
)


@click.group()
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug logging.")
def cli(verbose: bool) -> None:
    """orderdesk: order lifecycle, returns, refunds and stock."""
    level = "DEBUG" if verbose else bootstrap.settings().log_level
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@cli.group()
def order() -> None:
    """Manage orders."""


@cli.group()
def returns() -> None:
    """Manage return requests."""


@cli.group()
def refund() -> None:
    """Record refunds."""


@cli.group()
def product() -> None:
    """Manage products."""


@cli.group()
def inventory() -> None:
    """Manage inventory."""


# Register subcommands
order.add_command(order_bulk_transition)
order.add_command(order_cancel)
order.add_command(order_create)
order.add_command(order_list)
order.add_command(order_pay)
order.add_command(order_show)
order.add_command(order_split)
order.add_command(order_track)
order.add_command(order_transition)
returns.add_command(return_list)
returns.add_command(return_request)
returns.add_command(return_update)
refund.add_command(refund_process)
product.add_command(product_add)
product.add_command(product_list)
product.add_command(product_update)
inventory.add_command(inventory_backorders)
inventory.add_command(inventory_check)
inventory.add_command(inventory_low_stock)
inventory.add_command(inventory_restock)
inventory.add_command(inventory_show)
