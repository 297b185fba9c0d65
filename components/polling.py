"""
Bounded polling and fixed-delay retry.

Cloud control planes are eventually consistent: a certificate may not expose
its validation record yet, or an API may throttle a burst of writes. Both
cases are handled with a fixed number of attempts and a fixed delay between
them; when the budget runs out the caller's error is raised instead of
blocking forever. ``sleep`` is injectable so tests can observe the waits
without taking them.
"""

import time
from dataclasses import dataclass
from typing import Callable, TypeVar

import pulumi

from components.errors import RateLimited, RetryLimitExceeded

T = TypeVar("T")

Sleep = Callable[[float], None]


@dataclass(frozen=True)
class PollPolicy:
    """
    Attributes:
        max_attempts: Number of checks before giving up (at least 1).
        interval: Seconds to wait between two checks.
    """

    max_attempts: int
    interval: float


@dataclass(frozen=True)
class RetryPolicy:
    """
    Attributes:
        max_attempts: Total tries of one operation while it is rate limited.
        delay: Fixed seconds to wait after each rate-limited try.
    """

    max_attempts: int = 10
    delay: float = 2.0


def poll_until(
    check: Callable[[], T | None],
    policy: PollPolicy,
    on_timeout: Callable[[], Exception],
    sleep: Sleep = time.sleep,
) -> T:
    """
    Call ``check`` until it returns something other than None.

    Sleeps ``policy.interval`` between checks, never after the last one.

    Returns:
        The first non-None value returned by ``check``.

    Raises:
        The exception built by ``on_timeout`` once ``policy.max_attempts``
        checks all returned None.
    """
    for attempt in range(1, policy.max_attempts + 1):
        result = check()
        if result is not None:
            return result
        if attempt < policy.max_attempts:
            sleep(policy.interval)
    raise on_timeout()


def retry_rate_limited(
    operation: Callable[[], T],
    description: str,
    policy: RetryPolicy,
    sleep: Sleep = time.sleep,
) -> T:
    """
    Run ``operation``, retrying after ``policy.delay`` whenever it raises RateLimited.

    Any other exception propagates on the first occurrence.

    Raises:
        RetryLimitExceeded: ``operation`` was rate limited ``policy.max_attempts`` times.
    """
    for attempt in range(1, policy.max_attempts + 1):
        try:
            return operation()
        except RateLimited:
            if attempt == policy.max_attempts:
                break
            pulumi.log.debug(
                f"{description} was rate limited, retrying in {policy.delay}s "
                f"(attempt {attempt}/{policy.max_attempts})."
            )
            sleep(policy.delay)
    raise RetryLimitExceeded(description, policy.max_attempts)
