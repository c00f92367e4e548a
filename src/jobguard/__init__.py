"""
Jobguard - Resilient Control-Plane Operations.

Retries idempotent remote calls under exponential backoff and polls
asynchronous jobs until they reach a terminal state.
"""

from .clients import BaseJobClient, HttpJobClient
from .exceptions import (
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
from .orchestration import (
    OrchestrationSequence,
    BackupTarget,
    RestoreOutcome,
    backup_and_restore,
)
from .polling import (
    PollingConfig,
    JobHandle,
    JobKind,
    JobState,
    JobStatus,
    PollResult,
    PollCompleted,
    PollFailed,
    PollTimedOut,
    JobPoller,
)
from .retry import (
    RetryConfig,
    ErrorClass,
    RetryExecutor,
    calculate_backoff,
    classify,
    is_retryable,
    with_retry,
    async_with_retry,
)

__version__ = "0.1.0"

__all__ = [
    # Version
    "__version__",
    # Clients
    "BaseJobClient",
    "HttpJobClient",
    # Exceptions
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
    # Orchestration
    "OrchestrationSequence",
    "BackupTarget",
    "RestoreOutcome",
    "backup_and_restore",
    # Polling
    "PollingConfig",
    "JobHandle",
    "JobKind",
    "JobState",
    "JobStatus",
    "PollResult",
    "PollCompleted",
    "PollFailed",
    "PollTimedOut",
    "JobPoller",
    # Retry
    "RetryConfig",
    "ErrorClass",
    "RetryExecutor",
    "calculate_backoff",
    "classify",
    "is_retryable",
    "with_retry",
    "async_with_retry",
]
