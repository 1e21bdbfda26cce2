"""Structured operation results.

Every operation exposed to collaborators answers with an
``OperationResult``: a success flag, the payload, and on failure the
error kind plus a human-readable message.  Exception internals only show
up in ``details`` when running in debug mode.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from orderdesk.domain.exceptions import (
    DomainException,
    InvalidReturnItemsError,
    NothingUpdatedError,
)


@dataclass(frozen=True)
class OperationResult:
    success: bool
    payload: Any = None
    error_kind: str | None = None
    message: str | None = None
    details: dict[str, Any] | None = None


def run_operation(
    operation: Callable[..., Any],
    *args: Any,
    debug: bool = False,
    **kwargs: Any,
) -> OperationResult:
    """Invoke *operation* and wrap its outcome.

    Only domain errors are converted; anything else is a bug and
    propagates to the caller.
    """
    try:
        payload = operation(*args, **kwargs)
    except DomainException as exc:
        return OperationResult(
            success=False,
            payload=_failure_payload(exc),
            error_kind=exc.kind.value,
            message=str(exc),
            details={"exception": type(exc).__name__, "repr": repr(exc)} if debug else None,
        )
    return OperationResult(success=True, payload=payload)


def _failure_payload(exc: DomainException) -> Any:
    # What the caller needs to correct the request.
    if isinstance(exc, InvalidReturnItemsError):
        return {"problems": list(exc.problems)}
    if isinstance(exc, NothingUpdatedError):
        return {"results": list(exc.results)}
    return None
