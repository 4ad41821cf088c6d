"""Deterministic error model and failure taxonomy."""

from __future__ import annotations

import socket
from dataclasses import dataclass
from enum import Enum, IntEnum


class ErrorCode(IntEnum):
    INVALID_POLICY = 2
    CONFIG_ERROR = 3
    RUNTIME_ERROR = 4


@dataclass
class ResilientCallError(Exception):
    """Misuse of the library itself, never a stand-in for an operation failure."""

    message: str
    code: ErrorCode = ErrorCode.RUNTIME_ERROR
    hint: str = ""

    def __str__(self) -> str:
        if self.hint:
            return f"{self.message} Hint: {self.hint}"
        return self.message


class FailureKind(str, Enum):
    SOCKET = "socket"
    TRANSIENT_NETWORK = "transient_network"
    SERVER_ERROR = "server_error"
    RATE_LIMITED = "rate_limited"
    MALFORMED_INPUT = "malformed_input"
    PERMISSION_DENIED = "permission_denied"
    IO = "io"
    GENERIC = "generic"


@dataclass(eq=False)
class OperationFailure(Exception):
    """Failure raised by wrapped work, tagged with the family it belongs to."""

    message: str
    kind: FailureKind = FailureKind.GENERIC
    status_code: int | None = None

    def __str__(self) -> str:
        return self.message

    @classmethod
    def from_status(cls, status_code: int, message: str = "") -> OperationFailure:
        text = message or f"Request failed with status {status_code}"
        return cls(text, kind=kind_for_status(status_code), status_code=status_code)


@dataclass(eq=False)
class SocketFailure(OperationFailure):
    kind: FailureKind = FailureKind.SOCKET


@dataclass(eq=False)
class TransientNetworkError(OperationFailure):
    kind: FailureKind = FailureKind.TRANSIENT_NETWORK


@dataclass(eq=False)
class MalformedInputError(OperationFailure):
    kind: FailureKind = FailureKind.MALFORMED_INPUT


@dataclass(eq=False)
class PermissionDeniedError(OperationFailure):
    kind: FailureKind = FailureKind.PERMISSION_DENIED


def kind_for_status(status_code: int) -> FailureKind:
    if status_code == 429:
        return FailureKind.RATE_LIMITED
    if status_code == 408:
        return FailureKind.TRANSIENT_NETWORK
    if 500 <= status_code <= 599:
        return FailureKind.SERVER_ERROR
    if status_code in (401, 403):
        return FailureKind.PERMISSION_DENIED
    if status_code in (400, 422):
        return FailureKind.MALFORMED_INPUT
    return FailureKind.GENERIC


def classify_failure(failure: BaseException) -> FailureKind:
    # Order matters: TimeoutError, ConnectionError and PermissionError are all OSError.
    if isinstance(failure, OperationFailure):
        return failure.kind
    if isinstance(failure, (TimeoutError, ConnectionError)):
        return FailureKind.SOCKET
    if isinstance(failure, (socket.gaierror, socket.herror)):
        return FailureKind.TRANSIENT_NETWORK
    if isinstance(failure, PermissionError):
        return FailureKind.PERMISSION_DENIED
    if isinstance(failure, OSError):
        return FailureKind.IO
    if isinstance(failure, (ValueError, TypeError)):
        return FailureKind.MALFORMED_INPUT
    return FailureKind.GENERIC
