"""Retry utilities using tenacity.

Every network call made while provisioning goes through ``retry_action``:
the action is executed up to ``max_attempts`` times with jittered exponential
backoff between attempts, and the last failure is re-raised unchanged once
the attempts are exhausted.
"""

from __future__ import annotations

import logging
import random
from typing import Callable, Optional, TypeVar

from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
)
from tenacity.wait import wait_base

from winprovision.domain.config.retry import RetryConfig

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_ATTEMPTS = 5
DEFAULT_BASE_DELAY = 0.1


def compute_backoff_delay(attempt: int, base_delay: float, fraction: float) -> float:
    """Delay to sleep after the given failed attempt.

    Args:
        attempt: 1-based number of attempts made so far
        base_delay: Backoff scale in seconds
        fraction: Random value in [0, 1]

    Returns:
        base_delay * fraction * (2^attempt - 1)
    """
    return base_delay * fraction * (2**attempt - 1)


class wait_jittered_exponential(wait_base):
    """Tenacity wait strategy: uniform jitter over an exponential ceiling."""

    def __init__(self, base_delay: float, rng: Callable[[], float] = random.random):
        self.base_delay = base_delay
        self.rng = rng

    def __call__(self, retry_state: RetryCallState) -> float:
        return compute_backoff_delay(retry_state.attempt_number, self.base_delay, self.rng())


def retry_action(
    action: Callable[[], T],
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    base_delay: float = DEFAULT_BASE_DELAY,
    on_exhausted: Optional[str] = None,
    *,
    sleep: Optional[Callable[[float], None]] = None,
    rng: Callable[[], float] = random.random,
) -> T:
    """Execute an action, retrying on any exception.

    Args:
        action: Zero-argument callable
        max_attempts: Upper bound on executions, including the first one
        base_delay: Backoff scale in seconds
        on_exhausted: Message logged once when every attempt has failed
        sleep: Sleep function (defaults to tenacity's)
        rng: Source of uniform random values in [0, 1]

    Returns:
        Whatever the first successful execution returned

    Raises:
        ValueError: If max_attempts is less than 1
        Exception: The failure of the final attempt, unchanged
    """
    if max_attempts < 1:
        raise ValueError(f"max_attempts must be >= 1, got {max_attempts}")

    def _log_failure(retry_state: RetryCallState) -> None:
        if retry_state.outcome is None:
            return
        exception = retry_state.outcome.exception()
        attempt = retry_state.attempt_number
        logger.warning(f"Attempt {attempt}/{max_attempts} failed: {exception}")

    kwargs = {}
    if sleep is not None:
        kwargs["sleep"] = sleep

    retrying = Retrying(
        stop=stop_after_attempt(max_attempts),
        wait=wait_jittered_exponential(base_delay, rng),
        retry=retry_if_exception_type(Exception),
        reraise=True,
        after=_log_failure,
        **kwargs,
    )

    try:
        return retrying(action)
    except Exception:
        if on_exhausted:
            logger.error(on_exhausted)
        raise


def retry_with_config(
    action: Callable[[], T],
    retry_config: RetryConfig,
    on_exhausted: Optional[str] = None,
    **kwargs,
) -> T:
    """Run retry_action with the attempt budget from a RetryConfig."""
    return retry_action(
        action,
        max_attempts=retry_config.max_attempts,
        base_delay=retry_config.base_delay,
        on_exhausted=on_exhausted,
        **kwargs,
    )
