"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the application and CLI layers can catch them uniformly.  Every class
carries an ``ErrorKind`` that callers report back to collaborators.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(Enum):
    VALIDATION = "ValidationError"
    NOT_FOUND = "NotFound"
    CONFLICT = "Conflict"
    FORBIDDEN = "Forbidden"
    DEPENDENCY_FAILURE = "DependencyFailure"


class DomainException(Exception):
    """Base class for all domain errors."""

    kind: ErrorKind = ErrorKind.VALIDATION


class ValidationError(DomainException):
    """Malformed input or a violated value invariant."""

    kind = ErrorKind.VALIDATION


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""

    kind = ErrorKind.NOT_FOUND


class ConflictError(DomainException):
    """The request is well-formed but clashes with the current state."""

    kind = ErrorKind.CONFLICT


class InvalidTransitionError(ConflictError):
    """The requested status is not reachable from the current one."""


class InsufficientStockError(ConflictError):
    """A tracked product does not have enough available stock."""


class ReturnWindowExpiredError(ConflictError):
    """The return deadline for the order has passed."""


class InvalidReturnItemsError(ConflictError):
    """One or more requested return items are not acceptable.

    ``problems`` holds one message per offending item so the caller can
    fix all of them in one round trip.
    """

    def __init__(self, problems: list[str]) -> None:
        self.problems = list(problems)
        super().__init__("Invalid return items: " + "; ".join(self.problems))


class RefundExceedsBalanceError(ConflictError):
    """The refund amount is larger than the remaining refundable balance."""


class NothingUpdatedError(ConflictError):
    """A bulk operation changed no order at all."""

    def __init__(self, message: str, results: list | None = None) -> None:
        self.results = list(results or [])
        super().__init__(message)


class ForbiddenError(DomainException):
    """The requester is neither the owner of the order nor privileged."""

    kind = ErrorKind.FORBIDDEN


class DependencyFailure(DomainException):
    """The store could not commit a unit of work."""

    kind = ErrorKind.DEPENDENCY_FAILURE


class CompensationFailedError(DependencyFailure):
    """A saga compensation failed; the data needs manual reconciliation."""
