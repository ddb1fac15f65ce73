"""Clock capability used by the retry executor.

The executor never calls ``asyncio.sleep`` or reads time directly; it goes
through a Clock so tests can substitute a recording or virtual clock.

Key Components:
    - Clock: Protocol for now/sleep/deadline
    - LoopClock: Default clock backed by the running event loop
    - Deadline: Handle reporting whether the deadline fired
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import AsyncIterator


class Deadline:
    """Handle for an active deadline scope.

    Wraps ``asyncio.Timeout`` so callers can tell a deadline expiry apart
    from a ``TimeoutError`` raised by the guarded code itself.
    """

    __slots__ = ("_timeout",)

    def __init__(self, timeout: asyncio.Timeout) -> None:
        self._timeout = timeout

    @property
    def when(self) -> float | None:
        """Absolute loop time at which the deadline fires, None if unbounded."""
        return self._timeout.when()

    def expired(self) -> bool:
        return self._timeout.expired()


@runtime_checkable
class Clock(Protocol):
    """Protocol for time sources the executor depends on."""

    def now(self) -> float:
        """Current time in seconds (monotonic, arbitrary origin)."""
        ...

    async def sleep(self, seconds: float) -> None:
        """Suspend for the given number of seconds. Must be cancellable."""
        ...

    def deadline(self, seconds: float | None) -> AsyncIterator[Deadline]:
        """Async context manager cancelling its body after `seconds` (None = never)."""
        ...


class LoopClock:
    """Clock backed by the running asyncio event loop.

    Under ``VirtualTimeEventLoop`` every method observes virtual time, so the
    default clock is already deterministic in tests.
    """

    __slots__ = ()

    def now(self) -> float:
        return asyncio.get_running_loop().time()

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(seconds)

    @asynccontextmanager
    async def deadline(self, seconds: float | None) -> AsyncIterator[Deadline]:
        async with asyncio.timeout(seconds) as timeout:
            yield Deadline(timeout)

    def __repr__(self) -> str:
        return "LoopClock()"
