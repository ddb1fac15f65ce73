"""Standardized errors for retry execution.

Provides error codes for classifying arbitrary exceptions and the exception
hierarchy raised by the retry executor.
"""

from __future__ import annotations

from enum import StrEnum
from functools import lru_cache


class ErrorCode(StrEnum):
    """Standard error codes for operation failures.

    Used for programmatic retry decisions when matching on exception
    types is too coarse (e.g. every client error is a ``RuntimeError``).
    """
    RATE_LIMITED = "RATE_LIMITED"
    NETWORK_ERROR = "NETWORK_ERROR"
    TIMEOUT = "TIMEOUT"
    INVALID_PARAMS = "INVALID_PARAMS"
    PARSE_ERROR = "PARSE_ERROR"
    EXTERNAL_SERVICE_ERROR = "EXTERNAL_SERVICE_ERROR"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    NOT_FOUND = "NOT_FOUND"
    UNKNOWN = "UNKNOWN"


# Flattened pattern -> code mapping, first match wins
_PATTERN_CODES: dict[str, ErrorCode] = {
    "timeout": ErrorCode.TIMEOUT,
    "timed out": ErrorCode.TIMEOUT,
    "connection": ErrorCode.NETWORK_ERROR,
    "network": ErrorCode.NETWORK_ERROR,
    "rate": ErrorCode.RATE_LIMITED,
    "limit": ErrorCode.RATE_LIMITED,
    "permission": ErrorCode.PERMISSION_DENIED,
    "forbidden": ErrorCode.PERMISSION_DENIED,
    "parse": ErrorCode.PARSE_ERROR,
    "json": ErrorCode.PARSE_ERROR,
    "decode": ErrorCode.PARSE_ERROR,
    "validation": ErrorCode.INVALID_PARAMS,
    "value": ErrorCode.INVALID_PARAMS,
    "notfound": ErrorCode.NOT_FOUND,
    "not found": ErrorCode.NOT_FOUND,
}
_PATTERN_KEYS = tuple(_PATTERN_CODES.keys())

# Transient failures that usually succeed on a later attempt
TRANSIENT_CODES: frozenset[ErrorCode] = frozenset({
    ErrorCode.RATE_LIMITED,
    ErrorCode.TIMEOUT,
    ErrorCode.NETWORK_ERROR,
})


@lru_cache(maxsize=256)
def _classify_cached(exc_key: str) -> ErrorCode:
    haystack = exc_key.lower()
    for pattern in _PATTERN_KEYS:
        if pattern in haystack:
            return _PATTERN_CODES[pattern]
    return ErrorCode.EXTERNAL_SERVICE_ERROR


def classify_exception(exc: BaseException) -> ErrorCode:
    """Map exception to error code via pattern matching on name/message."""
    if isinstance(exc, CodedError):
        return exc.code
    return _classify_cached(f"{type(exc).__name__} {exc}")


class CodedError(Exception):
    """Exception carrying an explicit ErrorCode, bypassing pattern classification."""

    def __init__(self, message: str, code: ErrorCode = ErrorCode.UNKNOWN) -> None:
        self.code = code
        super().__init__(message)


# ─────────────────────────────────────────────────────────────────────────────
# Retry Failures
# ─────────────────────────────────────────────────────────────────────────────


class RetryError(Exception):
    """Base class for every failure raised by the retry machinery."""


class InvalidConfiguration(RetryError, ValueError):
    """Retry or backoff parameters were rejected at construction time."""


class TimeoutFailure(RetryError, TimeoutError):
    """The overall deadline elapsed before success or a terminal failure.

    Attributes:
        max_wait: Configured bound in seconds
        elapsed: Seconds spent from the start of the call until expiry
        attempts: Attempts started before the deadline fired
    """

    def __init__(self, max_wait: float, elapsed: float, attempts: int = 0) -> None:
        self.max_wait, self.elapsed, self.attempts = max_wait, elapsed, attempts
        super().__init__(f"Timed out after {max_wait}s")


class _TerminalFailure(RetryError):
    """Wraps the failure that ended a retry loop, keeping its message."""

    def __init__(self, last_error: BaseException, attempts: int) -> None:
        self.last_error, self.attempts = last_error, attempts
        super().__init__(str(last_error))


class RetriesExhausted(_TerminalFailure):
    """Every permitted attempt failed with a retryable error."""


class UnretryableFailure(_TerminalFailure):
    """An attempt failed with an error that does not match the retryable kind."""
