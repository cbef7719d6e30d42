"""
Retry policy — bounded exponential backoff around a fallible call.

The policy is a plain value (attempt budget, base delay, backoff
function); ``retry_call`` is the one loop that consumes it. Sleeping
is injected so callers and tests decide what a wait costs.

Attempt 1 is the first try, not a retry. A run of N attempts sleeps
at most N - 1 times: there is no wait after the final failure.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

BackoffFn = Callable[[float, int], float]


def exponential_backoff(base_delay: float, attempt: int) -> float:
    """Delay after failed attempt ``attempt``: base, 2*base, 4*base..."""
    return base_delay * (2 ** (attempt - 1))


@dataclass(frozen=True)
class RetryPolicy:
    """How many times to try, and how long to wait in between."""

    max_attempts: int = 3
    base_delay: float = 10.0
    backoff: BackoffFn = exponential_backoff

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")
        if self.base_delay < 0:
            raise ValueError(f"base_delay must be >= 0, got {self.base_delay}")

    def delay_after(self, attempt: int) -> float:
        """Wait before the attempt following failed attempt ``attempt``."""
        return self.backoff(self.base_delay, attempt)

    def delays(self) -> list[float]:
        """Every wait the policy can incur, in order."""
        return [self.delay_after(n) for n in range(1, self.max_attempts)]


@dataclass
class Attempt:
    """One try of the operation."""

    number: int
    ok: bool = False
    error: str = ""
    wait_after: float = 0.0

    def to_dict(self) -> dict:
        return {
            "number": self.number,
            "ok": self.ok,
            "error": self.error,
            "wait_after": self.wait_after,
        }


@dataclass
class RetryOutcome(Generic[T]):
    """Value of the successful attempt, plus the attempt history."""

    value: T
    attempts: list[Attempt] = field(default_factory=list)


class RetryExhausted(Exception):
    """Raised when every attempt allowed by the policy has failed."""

    def __init__(self, attempts: list[Attempt], last_error: BaseException):
        super().__init__(f"All {len(attempts)} attempt(s) failed: {last_error}")
        self.attempts = attempts
        self.last_error = last_error


def retry_call(
    operation: Callable[[], T],
    policy: RetryPolicy,
    *,
    sleep: Callable[[float], None] = time.sleep,
    retry_on: tuple[type[BaseException], ...] = (Exception,),
    label: str = "operation",
) -> RetryOutcome[T]:
    """Call ``operation`` until it returns, within the policy's budget.

    Exceptions not listed in ``retry_on`` propagate immediately.

    Raises:
        RetryExhausted: After ``policy.max_attempts`` failures, carrying
            the attempt history and the last underlying exception.
    """
    attempts: list[Attempt] = []

    for number in range(1, policy.max_attempts + 1):
        attempt = Attempt(number=number)
        attempts.append(attempt)
        logger.info("%s attempt %d of %d...", label, number, policy.max_attempts)

        try:
            value = operation()
        except retry_on as e:
            attempt.error = str(e)
            if number == policy.max_attempts:
                logger.warning("%s attempt %d failed: %s", label, number, e)
                raise RetryExhausted(attempts, e) from e

            attempt.wait_after = policy.delay_after(number)
            logger.warning(
                "%s attempt %d failed: %s. Waiting %.0f seconds before retry...",
                label,
                number,
                e,
                attempt.wait_after,
            )
            sleep(attempt.wait_after)
            continue

        attempt.ok = True
        return RetryOutcome(value=value, attempts=attempts)

    # range() above always runs at least once and either returns or raises
    raise AssertionError("unreachable")
