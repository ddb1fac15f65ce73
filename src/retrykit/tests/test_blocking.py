"""Tests for the blocking entry point and the retrying decorator.

Validates:
- retry_blocking retries a plain callable on a worker thread
- A blocked attempt is abandoned when the deadline fires
- retry_blocking works while an event loop is already running
- @retrying works bare and with options
- Concurrent decorated calls never share backoff state
"""

from __future__ import annotations

import asyncio
import time

import pytest

from retrykit import (
    ExponentialBackoff,
    FixedBackoff,
    RetryState,
    TimeoutFailure,
    retry_blocking,
    retrying,
)


class FlakyCall:
    """Blocking callable failing a fixed number of times."""

    def __init__(self, fail_count: int) -> None:
        self.fail_count = fail_count
        self.calls = 0

    def __call__(self) -> str:
        self.calls += 1
        if self.calls <= self.fail_count:
            raise ConnectionError(f"refused #{self.calls}")
        return "ok"


# ═════════════════════════════════════════════════════════════════════════════
# retry_blocking
# ═════════════════════════════════════════════════════════════════════════════


def test_blocking_retries_until_success() -> None:
    call = FlakyCall(fail_count=2)

    assert retry_blocking(call, backoff=FixedBackoff(0.01)) == "ok"
    assert call.calls == 3


def test_blocking_exhaustion_raises_last_error() -> None:
    call = FlakyCall(fail_count=10)

    with pytest.raises(ConnectionError, match="refused #2"):
        retry_blocking(call, retry_limit=1, backoff=FixedBackoff(0.01))


def test_blocking_deadline_abandons_stuck_attempt() -> None:
    started = time.monotonic()

    with pytest.raises(TimeoutFailure):
        retry_blocking(lambda: time.sleep(1.0), max_wait=0.05)

    assert time.monotonic() - started < 0.8


@pytest.mark.asyncio
async def test_blocking_inside_running_loop() -> None:
    call = FlakyCall(fail_count=1)

    assert retry_blocking(call, backoff=FixedBackoff(0.01)) == "ok"
    assert call.calls == 2


# ═════════════════════════════════════════════════════════════════════════════
# retrying
# ═════════════════════════════════════════════════════════════════════════════


def test_bare_decorator_uses_defaults(virtual_loop) -> None:
    calls = 0

    @retrying
    async def fetch(key: str) -> str:
        nonlocal calls
        calls += 1
        if calls < 3:
            raise ConnectionError("reset")
        return key.upper()

    assert virtual_loop.run_until_complete(fetch("abc")) == "ABC"
    assert calls == 3
    assert virtual_loop.time() == pytest.approx(2.0)


def test_decorator_keeps_metadata() -> None:
    @retrying(retry_limit=1)
    async def fetch_invoice(invoice_id: int) -> int:
        """Load one invoice."""
        return invoice_id

    assert fetch_invoice.__name__ == "fetch_invoice"
    assert fetch_invoice.__doc__ == "Load one invoice."


def test_decorator_filters_errors(virtual_loop) -> None:
    calls = 0

    @retrying(retry_limit=5, retry_on=ConnectionError)
    async def parse() -> None:
        nonlocal calls
        calls += 1
        raise ValueError("bad payload")

    with pytest.raises(ValueError, match="bad payload"):
        virtual_loop.run_until_complete(parse())
    assert calls == 1


def test_concurrent_calls_use_separate_backoff(virtual_loop) -> None:
    states: list[RetryState] = []
    failed: set[str] = set()

    @retrying(retry_limit=2, backoff=ExponentialBackoff(1.0), on_retry=states.append)
    async def fetch(key: str) -> str:
        if key not in failed:
            failed.add(key)
            raise ConnectionError(key)
        return key

    async def main() -> list[str]:
        return await asyncio.gather(fetch("a"), fetch("b"))

    assert virtual_loop.run_until_complete(main()) == ["a", "b"]
    # a shared policy would have handed the second call 2.0
    assert [s.delay for s in states] == [1.0, 1.0]
    assert virtual_loop.time() == pytest.approx(1.0)


def test_decorator_applies_deadline(virtual_loop) -> None:
    @retrying(max_wait=0.5)
    async def hang() -> None:
        await asyncio.sleep(60)

    with pytest.raises(TimeoutFailure):
        virtual_loop.run_until_complete(hang())
    assert virtual_loop.time() == pytest.approx(0.5)
