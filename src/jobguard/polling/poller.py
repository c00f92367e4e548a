"""
Job poller: drives an asynchronous job to a terminal state.
"""

import asyncio
import logging
import math
import threading
import time
from typing import Awaitable, Callable

from .config import PollingConfig
from .models import (
    JobHandle,
    JobState,
    JobStatus,
    PollCompleted,
    PollFailed,
    PollResult,
    PollTimedOut,
)
from ..exceptions import OperationCancelledError
from ..retry import RetryConfig, RetryExecutor

logger = logging.getLogger(__name__)

StatusQuery = Callable[[JobHandle], JobStatus]
AsyncStatusQuery = Callable[[JobHandle], Awaitable[JobStatus]]


class JobPoller:
    """
    Polls a job's status at a fixed interval until it is terminal or the timeout expires.

    Each status query is itself a remote call and runs through a RetryExecutor,
    so transient query failures do not end the poll. The job's own terminal
    failure is never retried.
    """

    def __init__(
        self,
        query: StatusQuery | AsyncStatusQuery,
        *,
        poll_interval: float = 30.0,
        timeout: float = 1800.0,
        retry_executor: RetryExecutor | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
        async_sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        cancel_event: threading.Event | asyncio.Event | None = None,
    ):
        """
        Initialize the poller.

        Args:
            query: Returns the current JobStatus for a handle (a coroutine
                function when used with poll_until_terminal_async)
            poll_interval: Seconds between queries
            timeout: Wall-clock budget in seconds
            retry_executor: Executor wrapping each query (default: RetryExecutor())
            clock: Monotonic time source
            sleep: Blocking wait between queries
            async_sleep: Awaitable wait between queries
            cancel_event: threading.Event (sync) or asyncio.Event (async) that
                aborts the poll loop when set
        """
        if not math.isfinite(poll_interval) or poll_interval <= 0:
            raise ValueError(f"poll_interval must be positive and finite, got {poll_interval}")
        if not math.isfinite(timeout) or timeout <= 0:
            raise ValueError(f"timeout must be positive and finite, got {timeout}")
        self.query = query
        self.poll_interval = poll_interval
        self.timeout = timeout
        self.retry_executor = retry_executor or RetryExecutor()
        self.clock = clock
        self.sleep = sleep
        self.async_sleep = async_sleep
        self.cancel_event = cancel_event

    @classmethod
    def from_config(
        cls,
        query: StatusQuery | AsyncStatusQuery,
        polling: PollingConfig,
        retry: RetryConfig | None = None,
        **kwargs,
    ) -> "JobPoller":
        """Create a poller from polling and retry configs."""
        return cls(
            query,
            poll_interval=polling.poll_interval,
            timeout=polling.timeout,
            retry_executor=RetryExecutor(retry),
            **kwargs,
        )

    def _describe_query(self, handle: JobHandle) -> str:
        return f"describe {handle.kind.value} job {handle.job_id}"

    def _evaluate(
        self, handle: JobHandle, status: JobStatus, queries: int, elapsed: float
    ) -> PollResult | None:
        """Turn a status into a result when it is terminal, None otherwise."""
        logger.info(f"{handle.describe()} state: {status.state.value}")

        if status.state is JobState.COMPLETED:
            logger.info(
                f"{handle.describe()} completed successfully after {elapsed:.1f}s"
                + (f", artifact: {status.artifact_ref}" if status.artifact_ref else "")
            )
            return PollCompleted(
                handle=handle,
                queries=queries,
                elapsed=elapsed,
                artifact_ref=status.artifact_ref,
            )

        if status.state.is_failure:
            detail = f": {status.message}" if status.message else ""
            logger.error(f"{handle.describe()} ended in state {status.state.value}{detail}")
            return PollFailed(
                handle=handle,
                queries=queries,
                elapsed=elapsed,
                reason=status.state.value,
            )

        return None

    def _timed_out(
        self, handle: JobHandle, queries: int, elapsed: float, last_state: JobState | None
    ) -> PollTimedOut:
        logger.error(f"{handle.describe()} did not complete within {self.timeout:.1f}s")
        return PollTimedOut(
            handle=handle,
            queries=queries,
            elapsed=elapsed,
            timeout=self.timeout,
            last_state=last_state,
        )

    def _check_cancelled(self, handle: JobHandle, queries: int) -> None:
        if self.cancel_event is not None and self.cancel_event.is_set():
            raise OperationCancelledError(f"polling {handle.describe()}", attempts=queries)

    def _require_event(self, event_type: type, method: str) -> None:
        if self.cancel_event is not None and not isinstance(self.cancel_event, event_type):
            raise TypeError(
                f"{method} requires cancel_event to be "
                f"{event_type.__module__.split('.')[0]}.Event, "
                f"got {type(self.cancel_event).__module__}.{type(self.cancel_event).__name__}"
            )

    def poll_until_terminal(self, handle: JobHandle) -> PollResult:
        """
        Poll until the job completes, fails, or the timeout expires.

        Args:
            handle: The job to watch

        Returns:
            PollCompleted, PollFailed or PollTimedOut

        Raises:
            NonRetryableError: A status query failed permanently
            RetryExhaustedError: A status query kept failing transiently
            OperationCancelledError: The cancel event was set
            TypeError: cancel_event is not a threading.Event
        """
        self._require_event(threading.Event, "poll_until_terminal")
        start = self.clock()
        queries = 0
        last_state: JobState | None = None

        while self.clock() - start < self.timeout:
            self._check_cancelled(handle, queries)
            status = self.retry_executor.execute(
                self._describe_query(handle), lambda: self.query(handle)
            )
            queries += 1
            last_state = status.state

            result = self._evaluate(handle, status, queries, self.clock() - start)
            if result is not None:
                return result

            remaining = self.timeout - (self.clock() - start)
            if remaining <= 0:
                break
            self._wait(handle, queries, min(self.poll_interval, remaining))

        return self._timed_out(handle, queries, self.clock() - start, last_state)

    async def poll_until_terminal_async(self, handle: JobHandle) -> PollResult:
        """Async counterpart of `poll_until_terminal`; `query` must be a coroutine function."""
        self._require_event(asyncio.Event, "poll_until_terminal_async")
        start = self.clock()
        queries = 0
        last_state: JobState | None = None

        while self.clock() - start < self.timeout:
            self._check_cancelled(handle, queries)
            status = await self.retry_executor.execute_async(
                self._describe_query(handle), lambda: self.query(handle)
            )
            queries += 1
            last_state = status.state

            result = self._evaluate(handle, status, queries, self.clock() - start)
            if result is not None:
                return result

            remaining = self.timeout - (self.clock() - start)
            if remaining <= 0:
                break
            await self._wait_async(handle, queries, min(self.poll_interval, remaining))

        return self._timed_out(handle, queries, self.clock() - start, last_state)

    def _wait(self, handle: JobHandle, queries: int, delay: float) -> None:
        logger.debug(f"{handle.describe()} still in progress, checking again in {delay:.1f}s")
        if self.cancel_event is None:
            self.sleep(delay)
            return
        if self.cancel_event.wait(delay):
            raise OperationCancelledError(f"polling {handle.describe()}", attempts=queries)

    async def _wait_async(self, handle: JobHandle, queries: int, delay: float) -> None:
        logger.debug(f"{handle.describe()} still in progress, checking again in {delay:.1f}s")
        if self.cancel_event is None:
            await self.async_sleep(delay)
            return
        try:
            await asyncio.wait_for(self.cancel_event.wait(), timeout=delay)
        except asyncio.TimeoutError:
            return
        raise OperationCancelledError(f"polling {handle.describe()}", attempts=queries)
