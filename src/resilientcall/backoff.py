"""Backoff policies producing wait intervals between attempts."""

from __future__ import annotations

import logging as py_logging
import random
from enum import Enum
from typing import Final, Protocol

from resilientcall.errors import ErrorCode, ResilientCallError

logger = py_logging.getLogger(__name__)

STOP: Final = -1


class BackOff(Protocol):
    def reset(self) -> None: ...

    def next_backoff_millis(self) -> int: ...


def _invalid(message: str, hint: str) -> ResilientCallError:
    return ResilientCallError(message, code=ErrorCode.INVALID_POLICY, hint=hint)


class ExponentialBackOff:
    """Multiplies the interval on every call, capped at ``max_interval_millis``.

    With ``initial_interval_millis=1`` and ``multiplier=2.0`` the n-th call
    returns ``2**n``. A non-zero ``randomization_factor`` spreads each value
    uniformly over ``[v * (1 - f), v * (1 + f)]`` using ``rng``.
    """

    def __init__(
        self,
        initial_interval_millis: int = 500,
        multiplier: float = 2.0,
        max_interval_millis: int = 60_000,
        randomization_factor: float = 0.0,
        rng: random.Random | None = None,
    ) -> None:
        if initial_interval_millis < 1:
            raise _invalid(
                f"Invalid initial interval: {initial_interval_millis}",
                "Use an initial interval of at least 1 millisecond.",
            )
        if multiplier < 1.0:
            raise _invalid(f"Invalid multiplier: {multiplier}", "Use a multiplier >= 1.0.")
        if max_interval_millis < initial_interval_millis:
            raise _invalid(
                f"Invalid max interval: {max_interval_millis}",
                "Max interval cannot be lower than the initial interval.",
            )
        if not 0.0 <= randomization_factor <= 1.0:
            raise _invalid(
                f"Invalid randomization factor: {randomization_factor}",
                "Use a randomization factor between 0.0 and 1.0.",
            )
        self.initial_interval_millis = initial_interval_millis
        self.multiplier = multiplier
        self.max_interval_millis = max_interval_millis
        self.randomization_factor = randomization_factor
        self._rng = rng or random.Random()
        self._current = float(initial_interval_millis)

    @property
    def current_interval_millis(self) -> int:
        return int(self._current)

    def reset(self) -> None:
        self._current = float(self.initial_interval_millis)

    def next_backoff_millis(self) -> int:
        self._current = min(self._current * self.multiplier, float(self.max_interval_millis))
        if not self.randomization_factor:
            return int(self._current)
        delta = self.randomization_factor * self._current
        return max(0, int(self._rng.uniform(self._current - delta, self._current + delta)))


class FixedBackOff:
    def __init__(self, interval_millis: int) -> None:
        if interval_millis < 0:
            raise _invalid(
                f"Invalid interval: {interval_millis}",
                "Use a non-negative interval in milliseconds.",
            )
        self.interval_millis = interval_millis

    def reset(self) -> None:
        return None

    def next_backoff_millis(self) -> int:
        return self.interval_millis


class ZeroBackOff(FixedBackOff):
    def __init__(self) -> None:
        super().__init__(0)


class StopBackOff:
    def reset(self) -> None:
        return None

    def next_backoff_millis(self) -> int:
        return STOP


class BoundedState(str, Enum):
    ACTIVE = "active"
    EXHAUSTED = "exhausted"


class RetryBoundedBackOff:
    """Caps any backoff at ``max_retries`` intervals between resets."""

    def __init__(self, max_retries: int, backoff: BackOff) -> None:
        if isinstance(max_retries, bool) or not isinstance(max_retries, int) or max_retries < 0:
            raise _invalid(
                f"Invalid max retries: {max_retries!r}",
                "Use a non-negative integer.",
            )
        self._max_retries = max_retries
        self._backoff = backoff
        self._retries_attempted = 0

    @property
    def max_retries(self) -> int:
        return self._max_retries

    @property
    def retries_attempted(self) -> int:
        return self._retries_attempted

    @property
    def state(self) -> BoundedState:
        if self._retries_attempted >= self._max_retries:
            return BoundedState.EXHAUSTED
        return BoundedState.ACTIVE

    def reset(self) -> None:
        self._retries_attempted = 0
        self._backoff.reset()

    def next_backoff_millis(self) -> int:
        if self._retries_attempted >= self._max_retries:
            logger.debug("Retry budget exhausted max_retries=%s", self._max_retries)
            return STOP
        self._retries_attempted += 1
        return self._backoff.next_backoff_millis()
