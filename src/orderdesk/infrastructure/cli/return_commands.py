"""CLI commands for returns and refunds."""

from __future__ import annotations

import click

from orderdesk.domain.model.order import ReturnLine
from orderdesk.domain.model.returns import UPDATABLE_RETURN_STATUSES
from orderdesk.domain.model.status import ReturnStatus
from orderdesk.infrastructure import bootstrap
from orderdesk.infrastructure.cli.common import execute, parse_pairs, requester_options


def _display_return(dto) -> None:
    click.echo(f"Return {dto.return_id} on order {dto.order_number}  (status={dto.status})")
    click.echo(f"Reason:    {dto.reason}")
    click.echo(f"Requested: {dto.requested_at}  (deadline {dto.return_deadline})")
    click.echo(f"  {'Item':<14} {'Product':<20} {'Qty':>5} {'Price':>10} {'Status':>10}")
    click.echo(f"  {'-'*63}")
    for item in dto.items:
        click.echo(
            f"  {item.order_item_id:<14} {item.product_name or '?':<20} "
            f"{item.quantity:>5} {item.price:>10} {item.status:>10}"
        )
    for note in dto.notes:
        click.echo(f"  note ({note.added_by or '-'}, {note.added_at}): {note.text}")


@click.command("request")
@click.argument("order_id")
@click.option("--items", required=True, help="Items as 'ItemId:Qty,ItemId:Qty'.")
@click.option("--reason", required=True)
@requester_options
def return_request(order_id: str, items: str, reason: str, requester) -> None:
    """Request a return for items of a delivered order."""
    lines = [
        ReturnLine(order_item_id=key, quantity=qty)
        for key, qty in parse_pairs(items, what="ItemId")
    ]
    dto = execute(
        bootstrap.request_return_handler().handle, order_id, requester, reason, lines
    )
    _display_return(dto)


@click.command("update")
@click.argument("return_id")
@click.argument(
    "status", type=click.Choice(sorted(s.value for s in UPDATABLE_RETURN_STATUSES))
)
@click.option("--actor", default="admin", show_default=True)
@click.option("--notes", default=None)
def return_update(return_id: str, status: str, actor: str, notes: str | None) -> None:
    """Approve, reject, process or complete a return request."""
    dto = execute(
        bootstrap.update_return_status_handler().handle, return_id, status, actor, notes=notes
    )
    _display_return(dto)


@click.command("list")
@click.option("--status", type=click.Choice([s.value for s in ReturnStatus]), default=None)
def return_list(status: str | None) -> None:
    """List return requests across all orders."""
    requests = execute(bootstrap.list_returns_handler().handle, status)
    if not requests:
        click.echo("No return requests found.")
        return

    click.echo(f"{'Return':<14} {'Order':<16} {'Status':<12} {'Items':>5}  Requested")
    click.echo("-" * 70)
    for r in requests:
        click.echo(
            f"{r.return_id:<14} {r.order_number:<16} {r.status:<12} "
            f"{len(r.items):>5}  {r.requested_at}"
        )


@click.command("process")
@click.argument("order_id")
@click.option("--amount", required=True, help="Refund amount (e.g. 12.50).")
@click.option("--reason", required=True)
@click.option("--method", default="original_payment", show_default=True)
@click.option("--actor", default="admin", show_default=True)
def refund_process(order_id: str, amount: str, reason: str, method: str, actor: str) -> None:
    """Record a refund against an order."""
    dto = execute(
        bootstrap.process_refund_handler().handle,
        order_id,
        amount,
        reason,
        actor,
        method=method,
    )
    click.echo(f"Refund {dto.refund_id} of {dto.amount} recorded on {dto.order_number}.")
    click.echo(f"Refunded so far: {dto.refunded_amount}  remaining: {dto.remaining_balance}")
    click.echo(f"Order status: {dto.order_status}  payment: {dto.payment_status}")
