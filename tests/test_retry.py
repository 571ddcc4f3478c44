import asyncio
from unittest.mock import AsyncMock

import pytest

from exceptions import UpstreamContentBlocked, UpstreamUnavailable
from llm.retry import ErrorKind, RetryPolicy, backoff_delay_ms, call_with_retry, classify_error


class UpstreamError(Exception):
    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.status_code = status_code


class RecordingSleep:
    def __init__(self):
        self.delays = []

    async def __call__(self, seconds):
        self.delays.append(seconds)


@pytest.mark.parametrize("error, kind", [
    (UpstreamError("Service Unavailable", 503), ErrorKind.OVERLOADED),
    (UpstreamError("The model is overloaded"), ErrorKind.OVERLOADED),
    (UpstreamError("Too Many Requests", 429), ErrorKind.TRANSIENT),
    (UpstreamError("Bad Request", 400), ErrorKind.FATAL),
    (UpstreamError("Forbidden", 403), ErrorKind.FATAL),
    (UpstreamError("Invalid API key provided"), ErrorKind.FATAL),
    (UpstreamError("model not found"), ErrorKind.FATAL),
    (UpstreamError("got 400 from upstream"), ErrorKind.FATAL),
    (UpstreamError("connection reset by peer"), ErrorKind.TRANSIENT),
    (UpstreamContentBlocked(cause="blocked"), ErrorKind.FATAL),
])
def test_classify_error(error, kind):
    assert classify_error(error) is kind


def test_backoff_doubles_and_caps():
    policy = RetryPolicy()

    assert [backoff_delay_ms(ErrorKind.TRANSIENT, n, policy) for n in (1, 2, 3, 4, 5)] == [
        1000, 2000, 4000, 8000, 10000,
    ]
    assert [backoff_delay_ms(ErrorKind.OVERLOADED, n, policy) for n in (1, 2, 3, 4, 5)] == [
        2000, 4000, 8000, 16000, 30000,
    ]


def test_overloaded_twice_then_success():
    sleep = RecordingSleep()
    operation = AsyncMock(side_effect=[
        UpstreamError("Service Unavailable", 503),
        UpstreamError("Service Unavailable", 503),
        "Merry everything!",
    ])

    result = asyncio.run(call_with_retry(operation, RetryPolicy(), "rewrite message", sleep=sleep))

    assert result == "Merry everything!"
    assert operation.await_count == 3
    assert sleep.delays == [2.0, 4.0]


def test_fatal_error_is_not_retried():
    sleep = RecordingSleep()
    operation = AsyncMock(side_effect=UpstreamError("Invalid API key"))

    with pytest.raises(UpstreamError, match="Invalid API key"):
        asyncio.run(call_with_retry(operation, RetryPolicy(), "rewrite message", sleep=sleep))

    assert operation.await_count == 1
    assert sleep.delays == []


def test_exhausted_retries_raise_unavailable_with_last_error():
    sleep = RecordingSleep()
    operation = AsyncMock(side_effect=UpstreamError("Too Many Requests", 429))

    with pytest.raises(UpstreamUnavailable) as exc_info:
        asyncio.run(call_with_retry(operation, RetryPolicy(), "generate cover image", sleep=sleep))

    assert operation.await_count == 3
    assert sleep.delays == [1.0, 2.0]
    assert "Failed to generate cover image after 3 attempts" in exc_info.value.cause
    assert "Too Many Requests" in exc_info.value.cause
    assert exc_info.value.status_code == 503
