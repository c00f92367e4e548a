"""
Jobguard - Exception Hierarchy.

Remote failures, retry give-ups, job outcomes and sequence aborts.
"""

from .base import (
    JobguardError,
    RemoteOperationError,
    ThrottlingError,
    ServiceUnavailableError,
    RemoteConnectionError,
    ConflictError,
    ValidationError,
    AccessDeniedError,
    ResourceNotFoundError,
    OperationFailedError,
    NonRetryableError,
    RetryExhaustedError,
    OperationCancelledError,
    JobError,
    JobFailedError,
    JobTimeoutError,
    SequenceAbortedError,
)

__all__ = [
    "JobguardError",
    "RemoteOperationError",
    "ThrottlingError",
    "ServiceUnavailableError",
    "RemoteConnectionError",
    "ConflictError",
    "ValidationError",
    "AccessDeniedError",
    "ResourceNotFoundError",
    "OperationFailedError",
    "NonRetryableError",
    "RetryExhaustedError",
    "OperationCancelledError",
    "JobError",
    "JobFailedError",
    "JobTimeoutError",
    "SequenceAbortedError",
]
