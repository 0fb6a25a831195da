"""Bounded retry for blocking calls.

An action is attempted at most `max_retries + 1` times. Only remote-call
failures (transport, provider, decode) are retried; anything else, including
`ValidationError`, propagates on the first attempt.
"""
from __future__ import annotations
import logging
import random
import time
from typing import Callable, TypeVar

from mistral_client.common.errors import RemoteCallError

LOGGER = logging.getLogger("mistral_client.api.retry")

T = TypeVar("T")


def backoff_delay(attempt: int, backoff: float, jitter: float = 0.1) -> float:
    """
    Delay before the next attempt, in seconds.

    Grows linearly with the attempt number and is spread by +/- `jitter` so
    concurrent callers do not retry in lockstep.

    Args:
        attempt: Attempt that just failed (1-indexed).
        backoff: Base delay in seconds. 0 disables waiting.
        jitter: Fraction of the delay used as random spread.
    """
    if backoff <= 0:
        return 0.0
    delay = backoff * attempt
    return max(0.0, delay + random.uniform(-jitter * delay, jitter * delay))


def with_retry(
    action: Callable[[], T],
    max_retries: int = 3,
    backoff: float = 1.0,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """
    Run `action`, retrying remote-call failures.

    Args:
        action: Zero-argument callable performing one attempt.
        max_retries: Retries after the first attempt.
        backoff: Base delay in seconds, see `backoff_delay`.
        sleep: Injected for tests.

    Returns:
        The first successful result.

    Raises:
        RemoteCallError: The last failure, with `attempts` set to the number made.
    """
    attempts = max_retries + 1
    for attempt in range(1, attempts + 1):
        try:
            return action()
        except RemoteCallError as e:
            e.attempts = attempt
            if attempt >= attempts:
                LOGGER.error("Giving up after %s attempt(s): %s", attempt, e)
                raise
            delay = backoff_delay(attempt, backoff)
            LOGGER.warning(
                "Attempt %s/%s failed (%s); retrying in %.2fs", attempt, attempts, e, delay
            )
            if delay:
                sleep(delay)
    raise AssertionError("unreachable")
