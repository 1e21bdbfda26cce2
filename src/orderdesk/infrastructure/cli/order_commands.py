"""CLI commands for the Order aggregate."""

from __future__ import annotations

import click

from orderdesk.domain.model.order import SplitSelector
from orderdesk.domain.model.status import OrderStatus
from orderdesk.domain.model.value_objects import ShippingAddress
from orderdesk.infrastructure import bootstrap
from orderdesk.infrastructure.cli.common import (
    execute,
    parse_items,
    parse_pairs,
    requester_options,
)

_STATUS_CHOICE = click.Choice([s.value for s in OrderStatus])


def _display_order(dto) -> None:
    """Shared formatting for displaying an order."""
    click.echo(f"Order {dto.order_number}  (status={dto.status}, payment={dto.payment_status})")
    click.echo(f"ID:       {dto.id}")
    click.echo(f"Customer: {dto.customer}{' (guest)' if dto.is_guest else ''}")
    click.echo(f"Ship to:  {dto.shipping_address}")
    click.echo(f"Created:  {dto.created_at}")
    if dto.parent_order_id:
        click.echo(f"Split from: {dto.parent_order_id}")
    if dto.tracking_number:
        click.echo(f"Tracking: {dto.tracking_number}")
    click.echo()

    click.echo(f"  {'Item':<14} {'Product':<20} {'Qty':>5} {'Price':>10} {'Total':>10}")
    click.echo(f"  {'-'*63}")
    for item in dto.items:
        flag = "  (backordered)" if item.backordered else ""
        click.echo(
            f"  {item.id:<14} {item.product_name:<20} {item.quantity:>5} "
            f"{item.unit_price:>10} {item.line_total:>10}{flag}"
        )
    click.echo(f"  {'-'*63}")
    click.echo(f"  {'Subtotal':<41} {dto.subtotal:>21}")
    click.echo(f"  {'Tax':<41} {dto.tax:>21}")
    click.echo(f"  {'Shipping':<41} {dto.shipping_fee:>21}")
    click.echo(f"  {'Discount':<41} {dto.discount:>21}")
    click.echo(f"  {'Order Total':<41} {dto.total:>21}")
    if dto.refunds:
        click.echo(f"  {'Refunded':<41} {dto.refunded_amount:>21}")

    click.echo()
    click.echo("History:")
    for change in dto.status_history:
        note = f"  {change.note}" if change.note else ""
        click.echo(f"  {change.timestamp}  {change.status:<12} by {change.changed_by or '-'}{note}")


@click.command("create")
@click.option("--items", required=True, help="Items as 'ProductId:Qty,ProductId:Qty'.")
@click.option("--user", "user_id", default=None, help="Registered customer id.")
@click.option("--email", "guest_email", default=None, help="Guest checkout email.")
@click.option("--street", required=True)
@click.option("--city", required=True)
@click.option("--state", required=True)
@click.option("--postal-code", required=True)
@click.option("--country", required=True)
@click.option("--shipping-fee", default="0", help="Shipping fee (e.g. 5.00).")
@click.option("--discount", default="0", help="Order-level discount.")
@click.option("--notes", default=None)
def order_create(
    items: str,
    user_id: str | None,
    guest_email: str | None,
    street: str,
    city: str,
    state: str,
    postal_code: str,
    country: str,
    shipping_fee: str,
    discount: str,
    notes: str | None,
) -> None:
    """Create a new order."""
    specs = parse_items(items)
    address = execute(
        ShippingAddress,
        street=street,
        city=city,
        state=state,
        postal_code=postal_code,
        country=country,
    )
    dto = execute(
        bootstrap.create_order_handler().handle,
        item_specs=specs,
        shipping_address=address,
        user_id=user_id,
        guest_email=guest_email,
        notes=notes,
        shipping_fee=shipping_fee,
        discount=discount,
    )
    click.echo(f"Order {dto.order_number} created  (id={dto.id})")
    click.echo()
    _display_order(dto)


@click.command("show")
@click.argument("order_id")
@requester_options
def order_show(order_id: str, requester) -> None:
    """Show details of an existing order."""
    dto = execute(bootstrap.show_order_handler().handle, order_id, requester)
    _display_order(dto)


@click.command("list")
@click.option("--status", type=_STATUS_CHOICE, default=None)
@click.option("--user", "user_id", default=None)
@click.option("--email", "guest_email", default=None)
@click.option("--page", type=int, default=1, show_default=True)
@click.option("--limit", type=int, default=10, show_default=True)
def order_list(
    status: str | None,
    user_id: str | None,
    guest_email: str | None,
    page: int,
    limit: int,
) -> None:
    """List orders, newest first."""
    result = execute(
        bootstrap.list_orders_handler().handle,
        status=status,
        user_id=user_id,
        guest_email=guest_email,
        page=page,
        limit=limit,
    )
    if not result.orders:
        click.echo("No orders found.")
        return

    click.echo(f"{'Number':<16} {'Status':<12} {'Payment':<18} {'Customer':<24} {'Total':>10}")
    click.echo("-" * 84)
    for o in result.orders:
        click.echo(
            f"{o.order_number:<16} {o.status:<12} {o.payment_status:<18} "
            f"{o.customer:<24} {o.total:>10}"
        )
    click.echo(f"Page {result.page} of {result.pages} ({result.total} orders)")


@click.command("transition")
@click.argument("order_id")
@click.argument("status", type=_STATUS_CHOICE)
@click.option("--actor", default="admin", show_default=True)
@click.option("--note", default="")
@click.option("--tracking", "tracking_number", default=None, help="Tracking number when shipping.")
def order_transition(
    order_id: str, status: str, actor: str, note: str, tracking_number: str | None
) -> None:
    """Move an order to a new status."""
    dto = execute(
        bootstrap.transition_order_handler().handle,
        order_id,
        status,
        actor,
        note=note,
        tracking_number=tracking_number,
    )
    click.echo(f"Order {dto.order_number} is now {dto.status}.")
    if dto.tracking_number and dto.status == OrderStatus.SHIPPED.value:
        click.echo(f"Tracking number: {dto.tracking_number}")


@click.command("bulk-transition")
@click.argument("order_ids", nargs=-1, required=True)
@click.option("--status", type=_STATUS_CHOICE, required=True)
@click.option("--actor", default="admin", show_default=True)
@click.option("--note", default="")
def order_bulk_transition(order_ids: tuple[str, ...], status: str, actor: str, note: str) -> None:
    """Move many orders to the same status."""
    report = execute(
        bootstrap.bulk_transition_handler().handle, list(order_ids), status, actor, note=note
    )
    for r in report.results:
        outcome = "ok" if r.success else f"failed: {r.message}"
        click.echo(f"{r.order_id:<34} {outcome}")
    click.echo(f"{report.succeeded} updated, {report.failed} failed.")


@click.command("cancel")
@click.argument("order_id")
@click.option("--note", default="")
@requester_options
def order_cancel(order_id: str, note: str, requester) -> None:
    """Cancel an order (restores stock)."""
    dto = execute(bootstrap.cancel_order_handler().handle, order_id, requester, note=note)
    click.echo(f"Order {dto.order_number} cancelled.")


@click.command("split")
@click.argument("order_id")
@click.option(
    "--items",
    required=True,
    help="Line items to move as 'ItemId:Qty,ItemId:Qty'.",
)
@click.option("--actor", default="admin", show_default=True)
def order_split(order_id: str, items: str, actor: str) -> None:
    """Move line items into a new order."""
    selectors = [
        SplitSelector(order_item_id=key, quantity=qty)
        for key, qty in parse_pairs(items, what="ItemId")
    ]
    result = execute(bootstrap.split_order_handler().handle, order_id, selectors, actor=actor)
    click.echo(
        f"Order {result.original_order_number} split: {len(result.moved_items)} item(s) "
        f"moved to {result.new_order_number} (id={result.new_order_id})"
    )
    click.echo(f"  {result.original_order_number:<16} {result.original_total:>10}")
    click.echo(f"  {result.new_order_number:<16} {result.new_total:>10}")


@click.command("track")
@click.argument("tracking_number")
def order_track(tracking_number: str) -> None:
    """Look up an order by its tracking number."""
    dto = execute(bootstrap.track_order_handler().handle, tracking_number)
    click.echo(f"Order {dto.order_number}  (status={dto.status}, tracking={dto.tracking_number})")
    for change in dto.history:
        click.echo(f"  {change.timestamp}  {change.status}")


@click.command("pay")
@click.argument("order_id")
@click.option("--failed", is_flag=True, default=False, help="Record a failed payment instead.")
def order_pay(order_id: str, failed: bool) -> None:
    """Record a payment outcome reported by the payment provider."""
    handler = bootstrap.payment_event_handler()
    if failed:
        dto = execute(handler.handle_failed, order_id)
    else:
        dto = execute(handler.handle_succeeded, order_id)
    click.echo(f"Order {dto.order_number}: payment {dto.payment_status}, status {dto.status}.")
