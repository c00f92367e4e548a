"""
Job handles, states and poll results.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum

from ..exceptions import JobFailedError, JobTimeoutError


class JobKind(str, Enum):
    """What an asynchronous job does."""

    BACKUP = "backup"
    RESTORE = "restore"
    GENERIC = "generic"


class JobState(str, Enum):
    """Lifecycle states of an asynchronous job."""

    PENDING = "PENDING"
    RUNNING = "RUNNING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    ABORTED = "ABORTED"
    EXPIRED = "EXPIRED"

    @property
    def is_terminal(self) -> bool:
        return self not in (JobState.PENDING, JobState.RUNNING)

    @property
    def is_failure(self) -> bool:
        return self in (JobState.FAILED, JobState.ABORTED, JobState.EXPIRED)

    @classmethod
    def parse(cls, raw: str) -> "JobState":
        """
        Map a provider-reported state string onto a JobState.

        Raises:
            ValueError: If the state is not recognized
        """
        key = raw.strip().upper()
        if key in _ALIASES:
            return _ALIASES[key]
        return cls(key)


_ALIASES = {
    "CREATED": JobState.PENDING,
    "ABORTING": JobState.RUNNING,
    "PARTIAL": JobState.FAILED,
}


@dataclass(frozen=True)
class JobHandle:
    """Identifies a remote job and the resource type it targets."""

    job_id: str
    resource_type: str = ""
    kind: JobKind = JobKind.GENERIC

    def describe(self) -> str:
        label = self.kind.value.capitalize()
        if self.resource_type:
            return f"{label} job {self.job_id} ({self.resource_type})"
        return f"{label} job {self.job_id}"


@dataclass(frozen=True)
class JobStatus:
    """Answer of a single status query."""

    state: JobState
    artifact_ref: str | None = None
    message: str | None = None


@dataclass(frozen=True)
class PollResult(ABC):
    """Base of the three polling outcomes."""

    handle: JobHandle
    queries: int
    elapsed: float

    @property
    def ok(self) -> bool:
        return False

    @abstractmethod
    def unwrap(self) -> str | None:
        """Return the artifact reference, raising for any non-completed outcome."""
        ...


@dataclass(frozen=True)
class PollCompleted(PollResult):
    """The job reached COMPLETED."""

    artifact_ref: str | None = None

    @property
    def ok(self) -> bool:
        return True

    def unwrap(self) -> str | None:
        return self.artifact_ref


@dataclass(frozen=True)
class PollFailed(PollResult):
    """The job reached a terminal failure state; `reason` is the state name."""

    reason: str = JobState.FAILED.value

    @property
    def state(self) -> JobState:
        return JobState(self.reason)

    def unwrap(self) -> str | None:
        raise JobFailedError(self.handle, self.state, elapsed=self.elapsed)


@dataclass(frozen=True)
class PollTimedOut(PollResult):
    """The poll timeout expired before any terminal state was seen."""

    timeout: float = 0.0
    last_state: JobState | None = None

    def unwrap(self) -> str | None:
        raise JobTimeoutError(
            self.handle, self.timeout, last_state=self.last_state, elapsed=self.elapsed
        )
