"""Runtime - Execution concerns for retrykit.

Contains: retry executor and backoff policies, concurrency/clock primitives, observability.
"""

from __future__ import annotations

__all__ = [
    # Retry
    "BackoffPolicy", "FixedBackoff", "ExponentialBackoff",
    "RetryConfig", "RetryState", "ErrorMatcher", "RetryExecutor", "retry", "retry_blocking", "retrying",
    # Concurrency
    "Clock", "LoopClock", "Deadline", "run_sync", "to_thread",
    # Observability
    "BoundLogger", "configure_logging", "get_logger", "log_context",
]

from .concurrency import Clock, Deadline, LoopClock, run_sync, to_thread
from .observability import BoundLogger, configure_logging, get_logger, log_context
from .retry import (
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
