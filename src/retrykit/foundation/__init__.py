"""Foundation - Core building blocks for retrykit.

Contains: error handling, configuration, testing utilities.
"""

from __future__ import annotations

__all__ = [
    # Errors
    "ErrorCode", "CodedError", "TRANSIENT_CODES", "classify_exception",
    "RetryError", "InvalidConfiguration", "TimeoutFailure", "RetriesExhausted", "UnretryableFailure",
    # Config
    "RetrykitSettings", "RetrySettings", "LoggingSettings", "get_settings", "clear_settings_cache",
]

from .config import LoggingSettings, RetrySettings, RetrykitSettings, clear_settings_cache, get_settings
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
