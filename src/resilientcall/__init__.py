"""Resilient call execution with pluggable backoff, classification and sleep."""

from .backoff import (
    STOP,
    BackOff,
    BoundedState,
    ExponentialBackOff,
    FixedBackOff,
    RetryBoundedBackOff,
    StopBackOff,
    ZeroBackOff,
)
from .determiner import (
    DEFAULT,
    RATE_LIMIT_ERRORS,
    SERVER_ERRORS,
    SOCKET_ERRORS,
    KindRetryDeterminer,
    PredicateRetryDeterminer,
    RetryDeterminer,
    any_of,
    get_determiner,
)
from .errors import (
    ErrorCode,
    FailureKind,
    MalformedInputError,
    OperationFailure,
    PermissionDeniedError,
    ResilientCallError,
    SocketFailure,
    TransientNetworkError,
    classify_failure,
)
from .executor import RetryPolicy, resilient, retry, run_with_retry
from .sleeper import RecordingSleeper, Sleeper, ThreadSleeper

__all__ = [
    "any_of",
    "BackOff",
    "BoundedState",
    "classify_failure",
    "DEFAULT",
    "ErrorCode",
    "ExponentialBackOff",
    "FailureKind",
    "FixedBackOff",
    "get_determiner",
    "KindRetryDeterminer",
    "MalformedInputError",
    "OperationFailure",
    "PermissionDeniedError",
    "PredicateRetryDeterminer",
    "RATE_LIMIT_ERRORS",
    "RecordingSleeper",
    "resilient",
    "ResilientCallError",
    "retry",
    "RetryBoundedBackOff",
    "RetryDeterminer",
    "RetryPolicy",
    "run_with_retry",
    "SERVER_ERRORS",
    "Sleeper",
    "SOCKET_ERRORS",
    "SocketFailure",
    "STOP",
    "StopBackOff",
    "ThreadSleeper",
    "TransientNetworkError",
    "ZeroBackOff",
]
