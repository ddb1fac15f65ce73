"""Retrykit - Retry-with-timeout execution for async Python.

Wraps any fallible operation in a bounded retry loop: configurable backoff,
optional jitter, selective retry by error kind and an overall deadline that
cancels whatever is in flight when it expires.

Quick Start:
    >>> from retrykit import ExponentialBackoff, retry
    >>>
    >>> async def fetch_profile() -> dict:
    ...     return await api.get("/me")
    >>>
    >>> profile = await retry(
    ...     fetch_profile,
    ...     retry_limit=3,
    ...     backoff=ExponentialBackoff(1.0),   # waits 1s, 2s, 4s
    ...     retry_on=ConnectionError,
    ...     max_wait=15.0,                     # whole call, delays included
    ... )

Decorator:
    >>> from retrykit import retrying
    >>>
    >>> @retrying(retry_limit=2, use_jitter=True)
    ... async def publish(event: dict) -> None:
    ...     await broker.send(event)

Blocking Code:
    >>> from retrykit import retry_blocking
    >>> data = retry_blocking(lambda: requests.get(url).json(), max_wait=10.0)

Failures:
    >>> from retrykit import TimeoutFailure
    >>> try:
    ...     await retry(fetch_profile, max_wait=0.5)
    ... except TimeoutFailure as e:
    ...     print(e)  # Timed out after 0.5s
"""

from __future__ import annotations

__version__ = "0.1.0"

# Errors
from .foundation.errors import (
    TRANSIENT_CODES,
    CodedError,
    ErrorCode,
    InvalidConfiguration,
    RetriesExhausted,
    RetryError,
    TimeoutFailure,
    UnretryableFailure,
    classify_exception,
)

# Configuration
from .foundation.config import (
    LoggingSettings,
    RetrySettings,
    RetrykitSettings,
    clear_settings_cache,
    get_settings,
)

# Retry
from .runtime.retry import (
    BackoffPolicy,
    ErrorMatcher,
    ExponentialBackoff,
    FixedBackoff,
    RetryConfig,
    RetryExecutor,
    RetryState,
    retry,
    retry_blocking,
    retrying,
)

# Concurrency
from .runtime.concurrency import Clock, LoopClock

# Observability
from .runtime.observability import configure_from_settings, configure_logging, get_logger, log_context

__all__ = [
    "__version__",
    # Retry
    "retry", "retry_blocking", "retrying", "RetryExecutor",
    "RetryConfig", "RetryState", "ErrorMatcher",
    "BackoffPolicy", "FixedBackoff", "ExponentialBackoff",
    # Errors
    "RetryError", "InvalidConfiguration", "TimeoutFailure", "RetriesExhausted", "UnretryableFailure",
    "ErrorCode", "CodedError", "TRANSIENT_CODES", "classify_exception",
    # Configuration
    "RetrykitSettings", "RetrySettings", "LoggingSettings", "get_settings", "clear_settings_cache",
    # Concurrency
    "Clock", "LoopClock",
    # Observability
    "configure_logging", "configure_from_settings", "get_logger", "log_context",
]
