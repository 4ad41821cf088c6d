"""Sleep capabilities used between retry attempts."""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import Protocol


class Sleeper(Protocol):
    def sleep(self, millis: int) -> None: ...


class ThreadSleeper:
    """Blocks the calling thread for the requested number of milliseconds."""

    def __init__(self, sleep: Callable[[float], None] = time.sleep) -> None:
        self._sleep = sleep

    def sleep(self, millis: int) -> None:
        if millis <= 0:
            return
        self._sleep(millis / 1000.0)


class RecordingSleeper:
    """Records requested sleeps without blocking."""

    def __init__(self) -> None:
        self.calls: list[int] = []

    def sleep(self, millis: int) -> None:
        self.calls.append(millis)

    @property
    def count(self) -> int:
        return len(self.calls)

    @property
    def last_millis(self) -> int | None:
        if not self.calls:
            return None
        return self.calls[-1]

    @property
    def total_millis(self) -> int:
        return sum(self.calls)
