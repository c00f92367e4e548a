"""Shared fixtures: deterministic time and scripted job status sources."""

import pytest

from jobguard.polling import JobState, JobStatus


class FakeClock:
    """Monotonic clock that only moves when someone sleeps on it."""

    def __init__(self, query_cost: float = 0.0):
        self.now = 0.0
        self.sleeps: list[float] = []
        self.query_cost = query_cost

    def __call__(self) -> float:
        return self.now

    def sleep(self, delay: float) -> None:
        self.sleeps.append(delay)
        self.now += delay

    async def async_sleep(self, delay: float) -> None:
        self.sleep(delay)


class ScriptedStatus:
    """Returns the scripted statuses in order, repeating the last one forever."""

    def __init__(self, *states, artifact_ref: str | None = None, clock: FakeClock | None = None):
        self.states = list(states)
        self.artifact_ref = artifact_ref
        self.clock = clock
        self.calls = 0

    def __call__(self, handle) -> JobStatus:
        index = min(self.calls, len(self.states) - 1)
        self.calls += 1
        if self.clock is not None:
            self.clock.now += self.clock.query_cost
        item = self.states[index]
        if isinstance(item, Exception):
            raise item
        state = item
        ref = self.artifact_ref if state is JobState.COMPLETED else None
        return JobStatus(state=state, artifact_ref=ref)


@pytest.fixture
def clock():
    return FakeClock()
