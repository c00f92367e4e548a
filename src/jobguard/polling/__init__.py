"""
Jobguard - Job Polling.

Drives asynchronous jobs to a terminal state under a wall-clock timeout.
"""

from .config import PollingConfig
from .models import (
    JobHandle,
    JobKind,
    JobState,
    JobStatus,
    PollResult,
    PollCompleted,
    PollFailed,
    PollTimedOut,
)
from .poller import JobPoller

__all__ = [
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
]
