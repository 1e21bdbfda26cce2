"""Helpers shared by the CLI command modules."""

from __future__ import annotations

import functools
from collections.abc import Callable
from typing import Any

import click

from orderdesk.application.dto import OrderItemSpec
from orderdesk.application.result import run_operation
from orderdesk.domain.model.requester import Requester
from orderdesk.infrastructure import bootstrap


def execute(operation: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
    """Run an application operation and turn a failure into a ClickException."""
    result = run_operation(operation, *args, debug=bootstrap.settings().debug, **kwargs)
    if result.success:
        return result.payload

    lines = [f"[{result.error_kind}] {result.message}"]
    payload = result.payload or {}
    for problem in payload.get("problems", []):
        lines.append(f"  - {problem}")
    for item in payload.get("results", []):
        lines.append(f"  - {item.order_id}: {item.message}")
    if result.details:
        lines.append(f"  ({result.details['exception']}: {result.details['repr']})")
    raise click.ClickException("\n".join(lines))


def requester_options(command: Callable[..., Any]) -> Callable[..., Any]:
    """Add --user/--email/--admin and pass a ``requester`` to the command."""

    @click.option("--user", "user_id", default=None, help="Acting user id.")
    @click.option("--email", default=None, help="Acting guest email.")
    @click.option("--admin", is_flag=True, default=False, help="Act as an administrator.")
    @functools.wraps(command)
    def wrapper(*args: Any, user_id: str | None, email: str | None, admin: bool, **kwargs: Any) -> Any:
        if admin:
            requester = Requester.admin(user_id or "admin")
        elif user_id or email:
            requester = Requester(user_id=user_id, email=email)
        else:
            raise click.UsageError("Provide --user, --email or --admin.")
        return command(*args, requester=requester, **kwargs)

    return wrapper


def parse_pairs(raw: str, what: str = "ProductId") -> list[tuple[str, int]]:
    """Parse 'a:3,b:5' into [('a', 3), ('b', 5)]."""
    pairs: list[tuple[str, int]] = []
    for pair in raw.split(","):
        pair = pair.strip()
        if ":" not in pair:
            raise click.BadParameter(
                f"Invalid item format '{pair}'. Expected '{what}:Quantity'."
            )
        key, qty_str = pair.rsplit(":", 1)
        try:
            qty = int(qty_str)
        except ValueError:
            raise click.BadParameter(
                f"Invalid quantity '{qty_str}' for '{key}'."
            )
        pairs.append((key.strip(), qty))
    return pairs


def parse_items(raw: str) -> list[OrderItemSpec]:
    return [OrderItemSpec(product_id=key, quantity=qty) for key, qty in parse_pairs(raw)]
