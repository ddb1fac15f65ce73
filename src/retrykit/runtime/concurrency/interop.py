"""Sync/async interoperability utilities.

Bridges blocking callables into the async retry loop:
    - run_sync: Run async code from sync context
    - to_thread: Offload a blocking call to a thread pool
    - abandoning_executor: Thread pool whose in-flight work is abandoned on exit

These handle the tricky edge cases:
    - Running in an existing event loop (e.g., FastAPI, Jupyter)
    - Deadline expiry while a worker thread is still blocked

Example:
    >>> # Call async from sync
    >>> result = run_sync(async_function())

    >>> # Call sync from async (in thread)
    >>> result = await to_thread(blocking_function, executor=pool)
"""

from __future__ import annotations

import asyncio
import contextvars
import functools
import threading
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from typing import TYPE_CHECKING, Callable, TypeVar

if TYPE_CHECKING:
    from collections.abc import Coroutine, Iterator

T = TypeVar("T")


def run_sync(coro: Coroutine[object, object, T]) -> T:
    """Run async coroutine from synchronous context.

    Uses asyncio.run() when no loop is running in this thread, otherwise runs
    the coroutine on a fresh loop in a helper thread.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)
    return _run_in_thread_loop(coro)


def _run_in_thread_loop(coro: Coroutine[object, object, T]) -> T:
    """Run coroutine in a new thread with its own event loop."""
    result: T | None = None
    error: BaseException | None = None
    done = threading.Event()

    def runner() -> None:
        nonlocal result, error
        try:
            result = asyncio.run(coro)
        except BaseException as e:
            error = e
        finally:
            done.set()

    thread = threading.Thread(target=runner, daemon=True)
    thread.start()
    done.wait()

    if error is not None:
        raise error
    return result  # type: ignore[return-value]


async def to_thread(
    func: Callable[..., T],
    *args: object,
    executor: ThreadPoolExecutor | None = None,
    **kwargs: object,
) -> T:
    """Run sync function in a thread pool, propagating contextvars.

    Cancelling the awaiting task stops waiting immediately; the thread itself
    keeps running until the call returns.
    """
    loop = asyncio.get_running_loop()
    ctx = contextvars.copy_context()
    if kwargs:
        func = functools.partial(func, **kwargs)
    return await loop.run_in_executor(executor, functools.partial(ctx.run, func, *args))


@contextmanager
def abandoning_executor(name: str = "retrykit") -> Iterator[ThreadPoolExecutor]:
    """Dedicated single-worker pool that is shut down without waiting on exit."""
    pool = ThreadPoolExecutor(max_workers=1, thread_name_prefix=f"{name}-worker-")
    try:
        yield pool
    finally:
        pool.shutdown(wait=False, cancel_futures=True)
