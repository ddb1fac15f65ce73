"""Retry execution with backoff, jitter and an overall deadline.

Example:
    >>> from retrykit.runtime.retry import ExponentialBackoff, retry
    >>>
    >>> async def fetch_quote() -> float:
    ...     return await client.get_quote("ACME")
    >>>
    >>> price = await retry(
    ...     fetch_quote,
    ...     retry_limit=4,
    ...     backoff=ExponentialBackoff(0.5),
    ...     use_jitter=True,
    ...     retry_on=ConnectionError,
    ...     max_wait=20.0,
    ... )
"""

from .backoff import BackoffPolicy, ExponentialBackoff, FixedBackoff
from .executor import RetryExecutor, retry, retry_blocking, retrying
from .policy import ErrorKind, ErrorMatcher, RetryConfig, RetryState

__all__ = [
    # Backoff policies
    "BackoffPolicy",
    "FixedBackoff",
    "ExponentialBackoff",
    # Configuration
    "RetryConfig",
    "RetryState",
    "ErrorMatcher",
    "ErrorKind",
    # Execution
    "RetryExecutor",
    "retry",
    "retry_blocking",
    "retrying",
]
