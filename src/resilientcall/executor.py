"""Retry/backoff executor for fallible operations."""

from __future__ import annotations

import functools
import logging as py_logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TypeVar

from resilientcall.backoff import STOP, BackOff, ExponentialBackOff, RetryBoundedBackOff
from resilientcall.determiner import DEFAULT, RetryDeterminer
from resilientcall.errors import ErrorCode, ResilientCallError, classify_failure
from resilientcall.sleeper import Sleeper, ThreadSleeper

T = TypeVar("T")

FailureType = type[BaseException] | tuple[type[BaseException], ...]

logger = py_logging.getLogger(__name__)


def retry(
    operation: Callable[[], T],
    backoff: BackOff,
    determiner: RetryDeterminer = DEFAULT,
    failure_type: FailureType = Exception,
    sleeper: Sleeper | None = None,
) -> T:
    """Call ``operation`` until it succeeds, fails fatally or the backoff stops.

    Failures outside ``failure_type`` are not caught. A caught failure is
    re-raised unchanged when ``determiner`` rejects it or when ``backoff``
    returns ``STOP``; on exhaustion that is always the most recent failure.
    The backoff is reset before the first attempt.
    """
    active_sleeper = ThreadSleeper() if sleeper is None else sleeper
    backoff.reset()
    attempt = 0

    while True:
        attempt += 1
        logger.debug("Running operation attempt=%s", attempt)
        try:
            result = operation()
        except failure_type as exc:
            kind = classify_failure(exc)
            if not determiner.should_retry(exc):
                logger.error(
                    "Operation failed with non-retryable error attempt=%s kind=%s error=%s",
                    attempt,
                    kind.value,
                    exc,
                )
                raise

            delay = backoff.next_backoff_millis()
            if delay == STOP:
                logger.error(
                    "Operation exhausted retries attempts=%s kind=%s error=%s",
                    attempt,
                    kind.value,
                    exc,
                )
                raise
            if delay < 0:
                raise ResilientCallError(
                    f"Backoff returned a negative interval: {delay}",
                    code=ErrorCode.INVALID_POLICY,
                    hint="Return STOP or a non-negative number of milliseconds.",
                ) from exc

            logger.warning(
                "Operation failed attempt=%s kind=%s retry_in_ms=%s error=%s",
                attempt,
                kind.value,
                delay,
                exc,
            )
            active_sleeper.sleep(delay)
            continue

        if attempt > 1:
            logger.info("Operation succeeded after %s attempts", attempt)
        return result


@dataclass(frozen=True)
class RetryPolicy:
    max_retries: int = 3
    initial_backoff_millis: int = 500
    multiplier: float = 2.0
    max_backoff_millis: int = 60_000
    randomization_factor: float = 0.0
    determiner: RetryDeterminer = field(default=DEFAULT, compare=False)

    def build_backoff(self) -> RetryBoundedBackOff:
        return RetryBoundedBackOff(
            self.max_retries,
            ExponentialBackOff(
                initial_interval_millis=self.initial_backoff_millis,
                multiplier=self.multiplier,
                max_interval_millis=self.max_backoff_millis,
                randomization_factor=self.randomization_factor,
            ),
        )


def run_with_retry(
    operation: Callable[[], T],
    *,
    policy: RetryPolicy,
    sleeper: Sleeper | None = None,
    failure_type: FailureType = Exception,
) -> T:
    return retry(
        operation,
        policy.build_backoff(),
        policy.determiner,
        failure_type,
        sleeper,
    )


def resilient(
    policy: RetryPolicy | None = None,
    *,
    sleeper: Sleeper | None = None,
    failure_type: FailureType = Exception,
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Decorate a function so every call runs through ``run_with_retry``."""
    active_policy = policy or RetryPolicy()

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(func)
        def wrapper(*args: object, **kwargs: object) -> T:
            return run_with_retry(
                functools.partial(func, *args, **kwargs),
                policy=active_policy,
                sleeper=sleeper,
                failure_type=failure_type,
            )

        return wrapper

    return decorator
