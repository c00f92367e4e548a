"""
Error classification: transient (retryable) vs permanent (fatal).

The vocabulary lives in the module-level tables below so it can be reviewed
and tested in one place.
"""

from enum import Enum

import httpx

from ..exceptions import RemoteOperationError


class ErrorClass(str, Enum):
    """Outcome of classifying a failure."""

    RETRYABLE = "retryable"
    FATAL = "fatal"


# Provider condition codes that indicate a transient failure.
RETRYABLE_CODES: frozenset[str] = frozenset(
    {
        "RequestLimitExceeded",
        "Throttling",
        "ThrottlingException",
        "TooManyRequestsException",
        "ProvisionedThroughputExceededException",
        "ServiceUnavailable",
        "InternalServerError",
        "InternalError",
    }
)

# HTTP statuses worth repeating the request for.
RETRYABLE_STATUS_CODES: frozenset[int] = frozenset({408, 409, 429, 500, 502, 503, 504})

# Lowercase phrases matched against the error text when no code applies.
RETRYABLE_PATTERNS: tuple[str, ...] = (
    "rate exceeded",
    "rate limit",
    "throttle",
    "too many requests",
    "service unavailable",
    "temporary failure",
    "timed out",
    "timeout",
    "connection refused",
    "connection reset",
    "no such host",
    "internal server error",
    "bad gateway",
    "gateway timeout",
    "conflict",
    "concurrent",
)


def error_code(error: BaseException) -> str | None:
    """
    Extract a structured provider code from an error, if it carries one.

    Looks at a `code` attribute first, then a botocore-style
    `response["Error"]["Code"]` payload.
    """
    code = getattr(error, "code", None)
    if isinstance(code, str) and code:
        return code

    response = getattr(error, "response", None)
    if isinstance(response, dict):
        code = response.get("Error", {}).get("Code")
        if isinstance(code, str) and code:
            return code
    return None


def matches_retryable_pattern(message: str) -> bool:
    """Check the error text against the transient-failure vocabulary."""
    text = message.lower()
    return any(pattern in text for pattern in RETRYABLE_PATTERNS)


def classify(error: BaseException | None) -> ErrorClass:
    """
    Decide whether a failure is worth retrying.

    Args:
        error: The exception raised by the operation

    Returns:
        ErrorClass.RETRYABLE for transient failures, ErrorClass.FATAL otherwise
        (including None, which is not a failure at all)
    """
    if error is None:
        return ErrorClass.FATAL

    if isinstance(error, RemoteOperationError) and error.retryable is not None:
        return ErrorClass.RETRYABLE if error.retryable else ErrorClass.FATAL

    if error_code(error) in RETRYABLE_CODES:
        return ErrorClass.RETRYABLE

    if isinstance(error, httpx.TransportError):
        return ErrorClass.RETRYABLE
    if isinstance(error, httpx.HTTPStatusError):
        if error.response.status_code in RETRYABLE_STATUS_CODES:
            return ErrorClass.RETRYABLE
        return ErrorClass.FATAL

    if matches_retryable_pattern(str(error)):
        return ErrorClass.RETRYABLE

    return ErrorClass.FATAL


def is_retryable(error: BaseException | None) -> bool:
    """Shorthand for `classify(error) is ErrorClass.RETRYABLE`."""
    return classify(error) is ErrorClass.RETRYABLE
