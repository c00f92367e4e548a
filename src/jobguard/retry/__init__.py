"""
Jobguard - Retry Logic.

Error classification, exponential backoff and the retry executor.
"""

from .config import RetryConfig, parse_duration
from .backoff import calculate_backoff, backoff_schedule
from .classifier import (
    ErrorClass,
    RETRYABLE_CODES,
    RETRYABLE_PATTERNS,
    RETRYABLE_STATUS_CODES,
    classify,
    is_retryable,
)
from .outcome import AttemptOutcome, Success, RetryableFailure, FatalFailure
from .executor import RetryExecutor, with_retry, async_with_retry

__all__ = [
    "RetryConfig",
    "parse_duration",
    "calculate_backoff",
    "backoff_schedule",
    "ErrorClass",
    "RETRYABLE_CODES",
    "RETRYABLE_PATTERNS",
    "RETRYABLE_STATUS_CODES",
    "classify",
    "is_retryable",
    "AttemptOutcome",
    "Success",
    "RetryableFailure",
    "FatalFailure",
    "RetryExecutor",
    "with_retry",
    "async_with_retry",
]
