"""Retry classification for failures raised by wrapped operations."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Protocol

from resilientcall.errors import ErrorCode, FailureKind, ResilientCallError, classify_failure


class RetryDeterminer(Protocol):
    def should_retry(self, failure: BaseException) -> bool: ...


class KindRetryDeterminer:
    def __init__(self, kinds: Iterable[FailureKind]) -> None:
        self.kinds = frozenset(kinds)

    def should_retry(self, failure: BaseException) -> bool:
        return classify_failure(failure) in self.kinds

    def __repr__(self) -> str:
        names = ", ".join(sorted(kind.value for kind in self.kinds))
        return f"KindRetryDeterminer({names})"


class PredicateRetryDeterminer:
    def __init__(self, predicate: Callable[[BaseException], bool]) -> None:
        self.predicate = predicate

    def should_retry(self, failure: BaseException) -> bool:
        return bool(self.predicate(failure))


class _AnyOf:
    def __init__(self, determiners: tuple[RetryDeterminer, ...]) -> None:
        self.determiners = determiners

    def should_retry(self, failure: BaseException) -> bool:
        return any(item.should_retry(failure) for item in self.determiners)


def any_of(*determiners: RetryDeterminer) -> RetryDeterminer:
    return _AnyOf(determiners)


DEFAULT = KindRetryDeterminer({FailureKind.SOCKET, FailureKind.TRANSIENT_NETWORK})
SOCKET_ERRORS = KindRetryDeterminer({FailureKind.SOCKET})
SERVER_ERRORS = KindRetryDeterminer({FailureKind.SERVER_ERROR})
RATE_LIMIT_ERRORS = KindRetryDeterminer({FailureKind.RATE_LIMITED})

DETERMINERS: dict[str, RetryDeterminer] = {
    "default": DEFAULT,
    "socket_errors": SOCKET_ERRORS,
    "server_errors": SERVER_ERRORS,
    "rate_limit_errors": RATE_LIMIT_ERRORS,
}


def get_determiner(name: str) -> RetryDeterminer:
    normalized = name.strip().lower()
    try:
        return DETERMINERS[normalized]
    except KeyError:
        raise ResilientCallError(
            f"Unknown retry determiner: {name}",
            code=ErrorCode.INVALID_POLICY,
            hint=f"Use one of: {', '.join(DETERMINERS)}.",
        ) from None
