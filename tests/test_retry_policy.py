from __future__ import annotations

import pytest

from resilientcall.backoff import BoundedState
from resilientcall.determiner import SERVER_ERRORS
from resilientcall.errors import MalformedInputError, OperationFailure, TransientNetworkError
from resilientcall.executor import RetryPolicy, resilient, run_with_retry
from resilientcall.sleeper import RecordingSleeper


def test_retry_policy_recovers_after_transient_failures() -> None:
    attempts = {"count": 0}
    sleeper = RecordingSleeper()

    def operation() -> str:
        attempts["count"] += 1
        if attempts["count"] < 3:
            raise TransientNetworkError("temporary")
        return "ok"

    result = run_with_retry(
        operation,
        policy=RetryPolicy(max_retries=4, initial_backoff_millis=100),
        sleeper=sleeper,
    )
    assert result == "ok"
    assert attempts["count"] == 3
    assert sleeper.calls == [200, 400]


def test_retry_policy_stops_on_fatal_error() -> None:
    sleeper = RecordingSleeper()

    def operation() -> str:
        raise MalformedInputError("fatal")

    with pytest.raises(MalformedInputError):
        run_with_retry(operation, policy=RetryPolicy(max_retries=5), sleeper=sleeper)
    assert sleeper.count == 0


def test_retry_policy_raises_last_recoverable_error() -> None:
    attempts = {"count": 0}

    def operation() -> str:
        attempts["count"] += 1
        raise TransientNetworkError(f"temporary-{attempts['count']}")

    with pytest.raises(TransientNetworkError, match="temporary-3"):
        run_with_retry(operation, policy=RetryPolicy(max_retries=2), sleeper=RecordingSleeper())


def test_retry_policy_uses_its_determiner() -> None:
    attempts = {"count": 0}

    def operation() -> str:
        attempts["count"] += 1
        if attempts["count"] == 1:
            raise OperationFailure.from_status(503)
        return "ok"

    policy = RetryPolicy(max_retries=1, determiner=SERVER_ERRORS)
    assert run_with_retry(operation, policy=policy, sleeper=RecordingSleeper()) == "ok"


def test_retry_policy_caps_backoff_interval() -> None:
    sleeper = RecordingSleeper()

    def operation() -> str:
        raise TimeoutError("slow")

    policy = RetryPolicy(max_retries=4, initial_backoff_millis=100, max_backoff_millis=300)
    with pytest.raises(TimeoutError):
        run_with_retry(operation, policy=policy, sleeper=sleeper)
    assert sleeper.calls == [200, 300, 300, 300]


def test_build_backoff_returns_fresh_bounded_backoff() -> None:
    policy = RetryPolicy(max_retries=2)

    first = policy.build_backoff()
    second = policy.build_backoff()

    assert first is not second
    assert first.max_retries == 2
    assert first.state is BoundedState.ACTIVE


def test_resilient_decorator_retries_with_arguments() -> None:
    sleeper = RecordingSleeper()
    seen: list[tuple[int, str]] = []

    @resilient(RetryPolicy(max_retries=2, initial_backoff_millis=1), sleeper=sleeper)
    def fetch(item_id: int, *, region: str) -> str:
        seen.append((item_id, region))
        if len(seen) < 2:
            raise ConnectionResetError("reset")
        return f"{item_id}@{region}"

    assert fetch(7, region="eu") == "7@eu"
    assert seen == [(7, "eu"), (7, "eu")]
    assert sleeper.calls == [2]
    assert fetch.__name__ == "fetch"


def test_resilient_decorator_builds_budget_per_call() -> None:
    sleeper = RecordingSleeper()

    @resilient(RetryPolicy(max_retries=1, initial_backoff_millis=1), sleeper=sleeper)
    def always_slow() -> str:
        raise TimeoutError("slow")

    for _ in range(2):
        with pytest.raises(TimeoutError):
            always_slow()

    assert sleeper.calls == [2, 2]
