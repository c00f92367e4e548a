"""
Base exception classes for control-plane operations.

Remote failures carry an optional `retryable` flag and provider error code so
the classifier can decide whether the same call can be safely repeated.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..polling.models import JobHandle, JobState


class JobguardError(Exception):
    """Base exception for all jobguard errors."""


class RemoteOperationError(JobguardError):
    """Raised by job clients when a remote control-plane call fails."""

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        status_code: int | None = None,
        retryable: bool | None = None,
        provider: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.retryable = retryable
        self.provider = provider

    def __str__(self) -> str:
        parts = [self.message]
        if self.provider:
            parts.insert(0, f"[{self.provider}]")
        if self.code:
            parts.append(f"(code: {self.code})")
        if self.status_code:
            parts.append(f"(status: {self.status_code})")
        return " ".join(parts)


class ThrottlingError(RemoteOperationError):
    """Raised when the provider throttles the caller. Always retryable."""

    def __init__(
        self,
        message: str = "Rate exceeded",
        *,
        code: str | None = "ThrottlingException",
        retry_after: float | None = None,
        **kwargs,
    ):
        super().__init__(message, code=code, retryable=True, **kwargs)
        self.retry_after = retry_after


class ServiceUnavailableError(RemoteOperationError):
    """Raised when the service reports a 5xx condition. Retryable."""

    def __init__(
        self,
        message: str = "Service unavailable",
        *,
        code: str | None = "ServiceUnavailable",
        **kwargs,
    ):
        super().__init__(message, code=code, retryable=True, **kwargs)


class RemoteConnectionError(RemoteOperationError):
    """Raised when the service cannot be reached. Retryable."""

    def __init__(self, message: str = "Connection failed", **kwargs):
        super().__init__(message, retryable=True, **kwargs)


class ConflictError(RemoteOperationError):
    """Raised on concurrent modification of the same resource. Retryable."""

    def __init__(
        self,
        message: str = "Conflict",
        *,
        code: str | None = "ConflictException",
        **kwargs,
    ):
        super().__init__(message, code=code, retryable=True, **kwargs)


class ValidationError(RemoteOperationError):
    """Raised when the request is rejected as malformed. Not retryable."""

    def __init__(
        self,
        message: str = "Invalid parameter value",
        *,
        code: str | None = "InvalidParameterValueException",
        **kwargs,
    ):
        super().__init__(message, code=code, retryable=False, **kwargs)


class AccessDeniedError(RemoteOperationError):
    """Raised when the caller is not authorized. Not retryable."""

    def __init__(
        self,
        message: str = "Access denied",
        *,
        code: str | None = "AccessDenied",
        **kwargs,
    ):
        super().__init__(message, code=code, retryable=False, **kwargs)


class ResourceNotFoundError(RemoteOperationError):
    """Raised when the target resource or job does not exist. Not retryable."""

    def __init__(
        self,
        message: str = "Resource not found",
        *,
        code: str | None = "ResourceNotFoundException",
        **kwargs,
    ):
        super().__init__(message, code=code, retryable=False, **kwargs)


class OperationFailedError(JobguardError):
    """Raised when a retried operation gives up."""

    def __init__(self, message: str, *, description: str, attempts: int, cause: BaseException):
        super().__init__(message)
        self.description = description
        self.attempts = attempts
        self.cause = cause


class NonRetryableError(OperationFailedError):
    """The operation failed with an error classified as permanent."""

    def __init__(self, description: str, cause: BaseException, *, attempts: int = 1):
        super().__init__(
            f"{description} failed with non-retryable error: {cause}",
            description=description,
            attempts=attempts,
            cause=cause,
        )


class RetryExhaustedError(OperationFailedError):
    """Every permitted attempt failed with a retryable error."""

    def __init__(self, description: str, cause: BaseException, *, attempts: int):
        super().__init__(
            f"{description} failed after {attempts} attempts: {cause}",
            description=description,
            attempts=attempts,
            cause=cause,
        )


class OperationCancelledError(JobguardError):
    """Raised when a cancellation signal interrupts a retry or poll loop."""

    def __init__(self, description: str, *, attempts: int = 0):
        super().__init__(f"{description} cancelled after {attempts} attempts")
        self.description = description
        self.attempts = attempts


class JobError(JobguardError):
    """Base class for asynchronous job outcomes other than completion."""

    def __init__(self, message: str, *, handle: "JobHandle", elapsed: float):
        super().__init__(message)
        self.handle = handle
        self.elapsed = elapsed


class JobFailedError(JobError):
    """The job reached a terminal failure state (FAILED, ABORTED, EXPIRED)."""

    def __init__(self, handle: "JobHandle", state: "JobState", *, elapsed: float = 0.0):
        super().__init__(
            f"{handle.describe()} ended in state {state.value} after {elapsed:.1f}s",
            handle=handle,
            elapsed=elapsed,
        )
        self.state = state


class JobTimeoutError(JobError):
    """
    The job did not reach a terminal state before the poll timeout.

    The outcome is unknown: the job may still complete remotely.
    """

    def __init__(
        self,
        handle: "JobHandle",
        timeout: float,
        *,
        last_state: "JobState | None" = None,
        elapsed: float = 0.0,
    ):
        last = last_state.value if last_state is not None else "unknown"
        super().__init__(
            f"{handle.describe()} did not complete within {timeout:.1f}s "
            f"(last state: {last}, elapsed: {elapsed:.1f}s)",
            handle=handle,
            elapsed=elapsed,
        )
        self.timeout = timeout
        self.last_state = last_state


class SequenceAbortedError(JobguardError):
    """Raised when a phase of an orchestration sequence fails."""

    def __init__(self, sequence: str, phase: str, cause: BaseException):
        super().__init__(f"{sequence}: phase '{phase}' failed: {cause}")
        self.sequence = sequence
        self.phase = phase
        self.cause = cause
