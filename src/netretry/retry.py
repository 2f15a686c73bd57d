from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    Retrying,
    retry_if_exception,
    wait_none,
)
from tenacity.stop import stop_base

from netretry.classify import is_spurious
from netretry.errors import root_cause
from netretry.settings import NetSettings, load_net_settings
from netretry.sinks import WarningSink

T = TypeVar("T")


@dataclass(slots=True)
class RetryBudget:
    """Retries still permitted in one retry session."""

    remaining: int

    def __post_init__(self) -> None:
        if self.remaining < 0:
            raise ValueError("remaining must be >= 0")

    @property
    def exhausted(self) -> bool:
        return self.remaining == 0

    def consume(self) -> None:
        """Spend one retry."""
        if self.exhausted:
            raise ValueError("retry budget is exhausted")
        self.remaining -= 1


class stop_when_budget_exhausted(stop_base):
    """Stop retrying once the session budget reaches zero."""

    def __init__(self, budget: RetryBudget) -> None:
        self._budget = budget

    def __call__(self, retry_state: RetryCallState) -> bool:
        return self._budget.exhausted


def format_spurious_warning(remaining: int, error: BaseException) -> str:
    """Render the warning printed before retrying ``error``."""
    return (
        f"spurious network error ({remaining} tries remaining): "
        f"{root_cause(error)}"
    )


class Retry:
    """Re-run a network operation while its failures look spurious.

    Each instance owns the budget of one retry session. Retries happen
    immediately, and the operation runs at most ``remaining + 1`` times.
    Whatever the last attempt raised reaches the caller unchanged.

    An operation may raise :class:`tenacity.TryAgain` to request a retry
    explicitly. Such a request skips classification but is otherwise an
    ordinary retry: it prints the warning, spends one unit of budget and
    is re-raised once the budget is exhausted.
    """

    def __init__(self, remaining: int, *, sink: WarningSink) -> None:
        """Create a retry session.

        Args:
            remaining: Retries permitted after the first attempt.
            sink: Destination for the warning printed before each retry.
        """
        self._budget = RetryBudget(remaining)
        self._sink = sink

    @classmethod
    def from_settings(
        cls,
        settings: NetSettings | None = None,
        *,
        sink: WarningSink,
    ) -> Retry:
        """Create a retry session sized by ``settings``.

        Settings are read from the environment when not given, so an invalid
        configuration fails here before any attempt is made.
        """
        resolved = load_net_settings() if settings is None else settings
        return cls(resolved.retry_count(), sink=sink)

    @property
    def remaining(self) -> int:
        return self._budget.remaining

    def _warn_before_retry(self, retry_state: RetryCallState) -> None:
        outcome = retry_state.outcome
        if outcome is None:
            return
        error = outcome.exception()
        if error is None:
            return
        self._sink.warn(format_spurious_warning(self._budget.remaining, error))
        self._budget.consume()

    def _retrying_options(self) -> dict[str, Any]:
        return {
            "retry": retry_if_exception(is_spurious),
            "stop": stop_when_budget_exhausted(self._budget),
            "wait": wait_none(),
            "before_sleep": self._warn_before_retry,
            "reraise": True,
        }

    def run(self, operation: Callable[[], T]) -> T:
        """Invoke ``operation`` until it succeeds or fails for good.

        Raises:
            Exception: The error from the last attempt, unmodified, or the
                error raised by the warning sink.
        """
        retrying = Retrying(**self._retrying_options())
        return retrying(operation)

    async def run_async(self, operation: Callable[[], Awaitable[T]]) -> T:
        """Async counterpart of :meth:`run` for coroutine operations."""
        retrying = AsyncRetrying(**self._retrying_options())
        return await retrying(operation)


def with_retry(
    settings: NetSettings | None,
    operation: Callable[[], T],
    *,
    sink: WarningSink,
) -> T:
    """Run ``operation`` in a fresh retry session sized by ``settings``."""
    return Retry.from_settings(settings, sink=sink).run(operation)


async def with_retry_async(
    settings: NetSettings | None,
    operation: Callable[[], Awaitable[T]],
    *,
    sink: WarningSink,
) -> T:
    """Async counterpart of :func:`with_retry`."""
    return await Retry.from_settings(settings, sink=sink).run_async(operation)
