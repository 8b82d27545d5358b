"""Bounded polling primitives.

Browser state changes asynchronously relative to the test: pages load, the
DOM mutates, animations run. The two primitives here turn such eventually
consistent state into a deterministic pass/fail within a deadline:

- wait_for: poll a predicate until it returns a truthy value
- retry: run an action until it completes without raising

Both block the calling thread between polls; no threads are started.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import TypeVar

from browserscope.utils.exceptions import (
    ConfigurationError,
    ErrorKind,
    WaitTimeoutError,
    error_kind,
    is_transient,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_INTERVAL = 500  # ms


def never_ignore(kind: ErrorKind) -> bool:
    """Classification that lets every error propagate."""
    return False


@dataclass(frozen=True)
class WaitSpec:
    """Parameters of one bounded wait.

    Attributes:
        max_timeout: Deadline in milliseconds, measured from the first poll.
        interval: Pause between polls in milliseconds.
        failure_message: Message of the WaitTimeoutError raised on timeout.
        ignore: Decides which error kinds count as "not yet" in a predicate
            wait instead of propagating.
    """

    max_timeout: int
    interval: int = DEFAULT_INTERVAL
    failure_message: str | None = None
    ignore: Callable[[ErrorKind], bool] = is_transient

    def __post_init__(self) -> None:
        """Validate timing values."""
        if self.max_timeout < 0:
            raise ConfigurationError(
                f"max_timeout must be >= 0, got {self.max_timeout}"
            )
        if self.interval <= 0:
            raise ConfigurationError(f"interval must be > 0, got {self.interval}")


class Waiter:
    """Runs waits described by a WaitSpec.

    The clock and sleep functions can be replaced, which keeps the polling
    loop itself free of any knowledge about real time.
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._clock = clock
        self._sleep = sleep

    def _elapsed_ms(self, started: float) -> float:
        return (self._clock() - started) * 1000

    def until(self, predicate: Callable[[], object], spec: WaitSpec) -> None:
        """Poll ``predicate`` until it returns a truthy value.

        Errors whose kind ``spec.ignore`` accepts count as an unsatisfied
        poll; every other error propagates immediately.

        Raises:
            ConfigurationError: If ``predicate`` is None.
            WaitTimeoutError: If the deadline passes first.
        """
        if predicate is None:
            raise ConfigurationError("Condition cannot be None")

        started = self._clock()
        last_error: BaseException | None = None
        polls = 0
        while True:
            polls += 1
            try:
                if predicate():
                    return
            except Exception as e:
                if not spec.ignore(error_kind(e)):
                    raise
                last_error = e
                logger.debug(f"Ignoring {type(e).__name__} on poll {polls}: {e}")

            elapsed = self._elapsed_ms(started)
            if elapsed > spec.max_timeout:
                logger.warning(
                    f"Wait timed out after {elapsed:.0f}ms and {polls} polls: "
                    f"{spec.failure_message}"
                )
                raise WaitTimeoutError(spec.failure_message, elapsed) from last_error
            self._sleep(spec.interval / 1000)

    def retry(self, action: Callable[[], T], spec: WaitSpec) -> T:
        """Run ``action`` until it completes without raising.

        Any exception counts as "not yet succeeded". The deadline is checked
        after each attempt, so a slow action can overrun it by its own
        duration.

        Returns:
            The value returned by the successful attempt.

        Raises:
            ConfigurationError: If ``action`` is None.
            WaitTimeoutError: On timeout when ``spec.failure_message`` is
                set, chained from the last error.
            Exception: The last error itself on timeout without a message.
        """
        if action is None:
            raise ConfigurationError("Action cannot be None")

        started = self._clock()
        attempts = 0
        while True:
            attempts += 1
            try:
                return action()
            except Exception as e:
                last_error = e
                logger.debug(f"Attempt {attempts} failed: {type(e).__name__}: {e}")

            elapsed = self._elapsed_ms(started)
            if elapsed > spec.max_timeout:
                logger.warning(
                    f"Retry gave up after {elapsed:.0f}ms and {attempts} attempts"
                )
                if spec.failure_message is not None:
                    raise WaitTimeoutError(spec.failure_message, elapsed) from last_error
                raise last_error
            self._sleep(spec.interval / 1000)


_default_waiter = Waiter()


def wait_for(
    predicate: Callable[[], object],
    max_timeout: int,
    failure_message: str | None = None,
    ignore_transient: bool = True,
    interval: int = DEFAULT_INTERVAL,
) -> None:
    """Wait until ``predicate`` returns a truthy value.

    Args:
        predicate: Condition to poll.
        max_timeout: Deadline in milliseconds.
        failure_message: Message of the WaitTimeoutError on timeout.
        ignore_transient: Treat stale-element and invalid-element-state
            errors as "not yet" instead of propagating them.
        interval: Pause between polls in milliseconds.

    Raises:
        ConfigurationError: If ``predicate`` is None or timings are invalid.
        WaitTimeoutError: If the condition is not met in time.
    """
    spec = WaitSpec(
        max_timeout=max_timeout,
        interval=interval,
        failure_message=failure_message,
        ignore=is_transient if ignore_transient else never_ignore,
    )
    _default_waiter.until(predicate, spec)


def retry(
    action: Callable[[], T],
    max_timeout: int,
    interval: int = DEFAULT_INTERVAL,
    failure_message: str | None = None,
) -> T:
    """Repeat ``action`` until it runs without raising.

    Args:
        action: Operation to attempt.
        max_timeout: Deadline in milliseconds.
        interval: Pause between attempts in milliseconds.
        failure_message: When set, a timeout raises WaitTimeoutError with this
            message and the last error as its cause; otherwise the last error
            is re-raised as is.

    Returns:
        The value returned by the successful attempt.
    """
    spec = WaitSpec(max_timeout=max_timeout, interval=interval, failure_message=failure_message)
    return _default_waiter.retry(action, spec)
