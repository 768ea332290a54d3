"""Bounded exponential-backoff retry, independent of any transport."""

import time
from collections.abc import Callable
from typing import TypeVar

from tenacity import RetryCallState, Retrying, stop_after_attempt, wait_exponential

from chunked_transcriber.config import RetryConfig

T = TypeVar("T")


def backoff_delay(attempt: int, base_delay_seconds: float) -> float:
    """Delay before the retry that follows 0-indexed ``attempt``. No jitter."""
    return base_delay_seconds * (2**attempt)


def call_with_retry(
    fn: Callable[[], T],
    policy: RetryConfig,
    *,
    sleep: Callable[[float], None] = time.sleep,
    on_retry: Callable[[int, float, Exception], None] | None = None,
) -> T:
    """
    Calls ``fn`` until it succeeds or ``policy.max_retries`` extra attempts fail.

    Waits follow ``backoff_delay``: base, 2 x base, 4 x base, ...

    Args:
        fn: Zero-argument callable performing one attempt.
        policy: Retry count and base delay.
        sleep: Blocking wait used between attempts.
        on_retry: Called with (attempt, delay, error) before each wait.

    Returns:
        Whatever ``fn`` returns on its first successful attempt.

    Raises:
        Exception: The error from the final attempt once retries are exhausted.
    """

    def before_sleep(retry_state: RetryCallState) -> None:
        if on_retry is not None:
            on_retry(
                retry_state.attempt_number - 1,
                retry_state.next_action.sleep,
                retry_state.outcome.exception(),
            )

    retrying = Retrying(
        stop=stop_after_attempt(policy.max_retries + 1),
        wait=wait_exponential(multiplier=policy.base_delay_seconds, min=0),
        sleep=sleep,
        before_sleep=before_sleep,
        reraise=True,
    )
    return retrying(fn)
