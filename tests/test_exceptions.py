"""Tests for exceptions module - behavior focused."""

import pytest
from jobguard.exceptions import (
    AccessDeniedError,
    ConflictError,
    JobFailedError,
    JobguardError,
    JobTimeoutError,
    NonRetryableError,
    RemoteConnectionError,
    RemoteOperationError,
    ResourceNotFoundError,
    RetryExhaustedError,
    SequenceAbortedError,
    ServiceUnavailableError,
    ThrottlingError,
    ValidationError,
)
from jobguard.polling import JobHandle, JobKind, JobState


class TestRetryableFlag:
    """Test that remote exceptions have correct retryable defaults."""

    @pytest.mark.parametrize(
        "exception_class",
        [ThrottlingError, ServiceUnavailableError, RemoteConnectionError, ConflictError],
    )
    def test_transient_errors_are_retryable(self, exception_class):
        assert exception_class().retryable is True

    @pytest.mark.parametrize(
        "exception_class",
        [ValidationError, AccessDeniedError, ResourceNotFoundError],
    )
    def test_permanent_errors_not_retryable(self, exception_class):
        assert exception_class().retryable is False

    def test_base_error_leaves_flag_unset(self):
        """Base RemoteOperationError defers the decision to the classifier."""
        assert RemoteOperationError("test").retryable is None


class TestExceptionStringRepresentation:
    """Test that exception strings include useful context."""

    def test_str_includes_all_context(self):
        """String should include provider, message, code and status."""
        error = RemoteOperationError(
            "Rate exceeded",
            provider="BackupService",
            code="ThrottlingException",
            status_code=400,
        )
        result = str(error)

        assert "BackupService" in result
        assert "Rate exceeded" in result
        assert "ThrottlingException" in result
        assert "400" in result

    def test_throttling_keeps_retry_after(self):
        assert ThrottlingError(retry_after=30.0).retry_after == 30.0


class TestOperationFailures:
    """Test retry give-up messages."""

    def test_non_retryable_message(self):
        cause = ValueError("invalid parameter value")
        error = NonRetryableError("start backup job for EBS", cause)

        assert str(error) == (
            "start backup job for EBS failed with non-retryable error: invalid parameter value"
        )
        assert error.cause is cause
        assert error.attempts == 1

    def test_exhausted_message(self):
        cause = RuntimeError("rate exceeded")
        error = RetryExhaustedError("describe backup job", cause, attempts=3)

        assert str(error) == "describe backup job failed after 3 attempts: rate exceeded"
        assert error.attempts == 3


class TestJobErrors:
    """Test job outcome errors name the job, state and time."""

    handle = JobHandle("job-42", "EBS", JobKind.BACKUP)

    def test_failed_message(self):
        error = JobFailedError(self.handle, JobState.ABORTED, elapsed=12.0)

        assert "job-42" in str(error)
        assert "ABORTED" in str(error)
        assert "12.0s" in str(error)

    def test_timeout_message(self):
        error = JobTimeoutError(
            self.handle, 60.0, last_state=JobState.RUNNING, elapsed=61.5
        )

        assert "job-42" in str(error)
        assert "RUNNING" in str(error)
        assert "60.0s" in str(error)
        assert error.last_state is JobState.RUNNING

    def test_sequence_aborted_keeps_cause(self):
        cause = ValueError("boom")
        error = SequenceAbortedError("backup-restore", "wait for backup jobs", cause)

        assert error.cause is cause
        assert "wait for backup jobs" in str(error)


class TestExceptionInheritance:
    """Test that all exceptions inherit from JobguardError."""

    @pytest.mark.parametrize(
        "exception_class",
        [
            ThrottlingError,
            ServiceUnavailableError,
            RemoteConnectionError,
            ConflictError,
            ValidationError,
            AccessDeniedError,
            ResourceNotFoundError,
        ],
    )
    def test_inherits_from_base(self, exception_class):
        """All remote exception types are catchable as JobguardError."""
        error = exception_class()
        assert isinstance(error, RemoteOperationError)
        assert isinstance(error, JobguardError)
