"""Retry executor: bounded retry loop with backoff, jitter and a global deadline.

Control flow for one ``run``:
    1. Open a deadline scope if ``max_wait > 0``
    2. Wait ``initial_delay``
    3. Attempt up to ``retry_limit + 1`` times; after each retryable failure
       that is not the last, wait the backoff interval, then the jitter
    4. Re-raise the last failure once attempts are exhausted

Deadline expiry at any suspension point (delay, attempt, backoff, jitter)
cancels the in-flight work and raises TimeoutFailure. Caller-side
cancellation propagates untouched since the loop only catches ``Exception``.

Example:
    >>> result = await retry(
    ...     fetch_invoice,
    ...     retry_limit=4,
    ...     backoff=ExponentialBackoff(0.5),
    ...     retry_on=ConnectionError,
    ...     max_wait=30.0,
    ... )
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from functools import wraps
from typing import TYPE_CHECKING, Any, Callable, NoReturn, ParamSpec, TypeVar, overload

from retrykit.foundation.errors import RetriesExhausted, TimeoutFailure, UnretryableFailure
from retrykit.runtime.concurrency import LoopClock, abandoning_executor, run_sync, to_thread
from retrykit.runtime.observability import get_logger

from .policy import RetryConfig, RetryState

if TYPE_CHECKING:
    from collections.abc import Awaitable

    from retrykit.runtime.concurrency import Clock
    from retrykit.runtime.observability import BoundLogger

T = TypeVar("T")
P = ParamSpec("P")


@dataclass(slots=True)
class _RunState:
    """Mutable bookkeeping for a single run; never shared between runs."""

    start: float
    attempts: int = 0
    last_error: Exception | None = None


class RetryExecutor:
    """Runs an async operation under a RetryConfig.

    The executor holds no per-run state, so one instance may serve several
    sequential or concurrent runs, provided its backoff policy is not shared
    by concurrent runs (see ``RetryConfig.with_fresh_backoff``).

    Args:
        config: Retry configuration (default: RetryConfig())
        clock: Time source for sleeps and the deadline (default: LoopClock)
        logger: Structured logger (default: get_logger("retrykit.retry"))
        name: Operation name bound into log entries
        rng: Random source for jitter (default: module-level random)
    """

    __slots__ = ("config", "clock", "name", "_log", "_jitter")

    def __init__(
        self,
        config: RetryConfig | None = None,
        *,
        clock: Clock | None = None,
        logger: BoundLogger | None = None,
        name: str | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.config = config or RetryConfig()
        self.clock = clock or LoopClock()
        self.name = name or "operation"
        self._log = (logger or get_logger("retrykit.retry")).bind(operation=self.name)
        self._jitter = (rng or random).random

    async def run(self, operation: Callable[[], Awaitable[T]]) -> T:
        """Execute operation until success, exhaustion, an unretryable failure or the deadline.

        Raises:
            TimeoutFailure: max_wait elapsed first
            Exception: the terminal failure of the operation (or RetriesExhausted /
                UnretryableFailure wrapping it when ``reraise=False``)
        """
        cfg = self.config
        state = _RunState(start=self.clock.now())
        try:
            async with self.clock.deadline(cfg.max_wait if cfg.has_deadline else None) as deadline:
                return await self._attempt_loop(operation, state)
        except TimeoutError:
            if not deadline.expired():
                raise
            elapsed = self.clock.now() - state.start
            self._log.error("deadline exceeded", max_wait=cfg.max_wait, elapsed=round(elapsed, 6),
                            attempts=state.attempts)
            raise TimeoutFailure(cfg.max_wait, elapsed, state.attempts) from None

    async def _attempt_loop(self, operation: Callable[[], Awaitable[T]], state: _RunState) -> T:
        cfg = self.config
        if cfg.initial_delay > 0:
            await self.clock.sleep(cfg.initial_delay)

        for attempt in range(1, cfg.max_attempts + 1):
            state.attempts = attempt
            try:
                result = await operation()
            except Exception as exc:
                state.last_error = exc
                if not cfg.retry_on(exc):
                    self._raise_terminal(UnretryableFailure, exc, attempt)
                if attempt == cfg.max_attempts:
                    break
                await self._wait_before_retry(exc, state)
            else:
                if attempt > 1:
                    self._log.info("attempt succeeded after retries", attempt=attempt)
                return result

        if state.last_error is None:
            raise RuntimeError("Retry loop ended without a recorded failure")
        self._raise_terminal(RetriesExhausted, state.last_error, state.attempts)

    async def _wait_before_retry(self, exc: Exception, state: _RunState) -> None:
        """Backoff wait followed by the optional jitter wait."""
        cfg = self.config
        delay = cfg.backoff.next_interval()
        self._log.warning(
            "retry scheduled",
            attempt=state.attempts, max_attempts=cfg.max_attempts, delay=delay,
            error=str(exc), error_type=type(exc).__name__,
        )
        if cfg.on_retry:
            cfg.on_retry(RetryState(state.attempts, exc, delay, self.clock.now() - state.start))
        await self.clock.sleep(delay)
        if cfg.use_jitter:
            await self.clock.sleep(self._jitter() * cfg.jitter_ceiling)

    def _raise_terminal(
        self,
        kind: type[RetriesExhausted] | type[UnretryableFailure],
        exc: Exception,
        attempts: int,
    ) -> NoReturn:
        outcome = "unretryable failure" if kind is UnretryableFailure else "retries exhausted"
        self._log.error(outcome, attempts=attempts, error=str(exc), error_type=type(exc).__name__)
        if self.config.reraise:
            exc.add_note(f"retrykit: {outcome} after {attempts} attempt(s)")
            raise exc
        raise kind(exc, attempts) from exc

    def __repr__(self) -> str:
        return f"RetryExecutor({self.name!r}, {self.config!r})"


# ─────────────────────────────────────────────────────────────────────────────
# Convenience API
# ─────────────────────────────────────────────────────────────────────────────


def _resolve_config(config: RetryConfig | None, options: dict[str, Any]) -> RetryConfig:
    """Explicit config wins; keyword options override it or the settings defaults."""
    if config is None:
        return RetryConfig.from_settings(**options)
    if not options:
        return config
    return RetryConfig(**{**dict(config), **options})


def _name_of(func: object) -> str:
    return getattr(func, "__qualname__", None) or type(func).__name__


async def retry(
    operation: Callable[[], Awaitable[T]],
    config: RetryConfig | None = None,
    *,
    clock: Clock | None = None,
    logger: BoundLogger | None = None,
    name: str | None = None,
    **options: Any,
) -> T:
    """Run an async operation with retries.

    Keyword options are RetryConfig fields (retry_limit, initial_delay, backoff,
    use_jitter, jitter_ceiling, retry_on, max_wait, reraise, on_retry). Anything
    not given falls back to ``config`` or, without one, to RetrySettings.

    Example:
        >>> async def flaky() -> int: ...
        >>> value = await retry(flaky, retry_limit=2, backoff=FixedBackoff(0.2))
    """
    executor = RetryExecutor(_resolve_config(config, options), clock=clock, logger=logger,
                             name=name or _name_of(operation))
    return await executor.run(operation)


def retry_blocking(
    fn: Callable[[], T],
    config: RetryConfig | None = None,
    *,
    logger: BoundLogger | None = None,
    name: str | None = None,
    **options: Any,
) -> T:
    """Run a blocking callable with retries from synchronous code.

    Each attempt runs on a dedicated worker thread so the deadline can still
    fire while the call blocks. A timed-out attempt is abandoned, not joined.
    """
    label = name or _name_of(fn)

    async def runner() -> T:
        with abandoning_executor(label) as pool:
            return await retry(lambda: to_thread(fn, executor=pool), config, logger=logger, name=label, **options)

    return run_sync(runner())


@overload
def retrying(func: Callable[P, Awaitable[T]], /) -> Callable[P, Awaitable[T]]: ...

@overload
def retrying(
    func: None = None, /, config: RetryConfig | None = None, **options: Any,
) -> Callable[[Callable[P, Awaitable[T]]], Callable[P, Awaitable[T]]]: ...


def retrying(
    func: Callable[P, Awaitable[T]] | None = None,
    /,
    config: RetryConfig | None = None,
    **options: Any,
) -> Callable[P, Awaitable[T]] | Callable[[Callable[P, Awaitable[T]]], Callable[P, Awaitable[T]]]:
    """Decorator running every call of an async function through retry().

    Each call gets its own copy of the backoff policy, so concurrent calls
    never share interval state.

    Example:
        >>> @retrying(retry_limit=3, backoff=ExponentialBackoff(0.1), retry_on=ConnectionError)
        ... async def fetch(url: str) -> bytes: ...
    """
    def decorator(fn: Callable[P, Awaitable[T]]) -> Callable[P, Awaitable[T]]:
        base = _resolve_config(config, options)
        label = _name_of(fn)

        @wraps(fn)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            executor = RetryExecutor(base.with_fresh_backoff(), name=label)
            return await executor.run(lambda: fn(*args, **kwargs))

        return wrapper

    return decorator(func) if func is not None else decorator
