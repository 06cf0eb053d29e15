"""
app/ingestion/time_budget.py

Read-only view of the remaining execution time of the current invocation.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import timedelta
from typing import Any

DEFAULT_LOW_BUDGET_MS = 1000
DEFAULT_INITIAL_DELAY_MS = 500


@dataclass(frozen=True)
class TimeBudgetWarning:
    """
    Advisory signal raised when the remaining budget drops below the threshold.
    """

    remaining_ms: int
    threshold_ms: int

    def __str__(self) -> str:
        return f"time left before timeout: {self.remaining_ms}ms (threshold {self.threshold_ms}ms)"


class TimeBudgetMonitor:
    """
    Polls a remaining-milliseconds source and reports when budget is low.

    `check()` stays silent until `initial_delay_ms` has elapsed since the
    monitor was created; it never sleeps.
    """

    def __init__(
        self,
        remaining_millis: Callable[[], int | float | None],
        *,
        low_budget_ms: int = DEFAULT_LOW_BUDGET_MS,
        initial_delay_ms: int = DEFAULT_INITIAL_DELAY_MS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._remaining_millis = remaining_millis
        self._low_budget_ms = max(0, low_budget_ms)
        self._initial_delay_seconds = max(0, initial_delay_ms) / 1000.0
        self._clock = clock
        self._started_at = clock()

    @classmethod
    def from_lambda_context(cls, context: Any, **kwargs: Any) -> "TimeBudgetMonitor":
        """
        Build a monitor backed by a Lambda context's remaining time.
        """

        getter = getattr(context, "get_remaining_time_in_millis", None)
        if getter is None:
            return cls.unlimited(**kwargs)
        return cls(getter, **kwargs)

    @classmethod
    def with_deadline(
        cls,
        budget_seconds: float,
        *,
        clock: Callable[[], float] = time.monotonic,
        **kwargs: Any,
    ) -> "TimeBudgetMonitor":
        deadline = clock() + budget_seconds

        def remaining() -> float:
            return max(0.0, (deadline - clock()) * 1000.0)

        return cls(remaining, clock=clock, **kwargs)

    @classmethod
    def unlimited(cls, **kwargs: Any) -> "TimeBudgetMonitor":
        return cls(lambda: None, **kwargs)

    @property
    def low_budget_ms(self) -> int:
        return self._low_budget_ms

    def remaining(self) -> timedelta:
        """
        Remaining budget; `timedelta.max` when the source is unbounded.
        """

        value = self._remaining_millis()
        if value is None:
            return timedelta.max
        return timedelta(milliseconds=max(0, value))

    def check(self) -> TimeBudgetWarning | None:
        if self._clock() - self._started_at < self._initial_delay_seconds:
            return None

        value = self._remaining_millis()
        if value is None:
            return None

        remaining_ms = int(value)
        if remaining_ms < self._low_budget_ms:
            return TimeBudgetWarning(remaining_ms=remaining_ms, threshold_ms=self._low_budget_ms)
        return None
