"""A minimal synchronous saga runner.

A saga is a list of steps, each an action plus an optional compensating
action.  Steps run in order; when one fails, the compensations of the
steps that already succeeded run in reverse order and the original error
is re-raised.  A failing compensation is escalated as
``CompensationFailedError`` and never retried.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from orderdesk.domain.exceptions import CompensationFailedError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SagaStep:
    name: str
    action: Callable[[], Any]
    compensate: Callable[[Any], None] | None = None


class Saga:

    def __init__(self, name: str) -> None:
        self.name = name
        self._steps: list[SagaStep] = []

    def step(
        self,
        name: str,
        action: Callable[[], Any],
        compensate: Callable[[Any], None] | None = None,
    ) -> Saga:
        self._steps.append(SagaStep(name, action, compensate))
        return self

    def run(self) -> list[Any]:
        """Execute every step; returns the results in step order."""
        completed: list[tuple[SagaStep, Any]] = []
        for step in self._steps:
            try:
                result = step.action()
            except Exception as exc:
                logger.error("Saga %s failed at step %s: %s", self.name, step.name, exc)
                self._compensate(completed, exc)
                raise
            completed.append((step, result))
        return [result for _, result in completed]

    def _compensate(self, completed: list[tuple[SagaStep, Any]], cause: Exception) -> None:
        for step, result in reversed(completed):
            if step.compensate is None:
                continue
            try:
                step.compensate(result)
            except Exception as exc:
                logger.critical(
                    "Saga %s could not compensate step %s after %r: %s. "
                    "Manual reconciliation required.",
                    self.name,
                    step.name,
                    cause,
                    exc,
                )
                raise CompensationFailedError(
                    f"{self.name}: compensation of '{step.name}' failed ({exc}) "
                    f"after: {cause}"
                ) from exc
            logger.info("Saga %s compensated step %s", self.name, step.name)
