"""Unified error handling for retrykit.

- ErrorCode/classify_exception: Standard codes for classifying failures
- RetryError hierarchy: Failures raised by the retry executor
"""

from .errors import (
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

__all__ = [
    # Codes
    "ErrorCode", "CodedError", "TRANSIENT_CODES", "classify_exception",
    # Retry failures
    "RetryError", "InvalidConfiguration", "TimeoutFailure", "RetriesExhausted", "UnretryableFailure",
]
