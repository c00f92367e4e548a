"""
Retry executor and retry decorators.
"""

import asyncio
import functools
import logging
import threading
import time
from typing import Awaitable, Callable, ParamSpec, TypeVar

from .backoff import calculate_backoff
from .classifier import ErrorClass, classify
from .config import RetryConfig
from .outcome import AttemptOutcome, FatalFailure, RetryableFailure, Success
from ..exceptions import (
    NonRetryableError,
    OperationCancelledError,
    RetryExhaustedError,
)

logger = logging.getLogger(__name__)

P = ParamSpec("P")
T = TypeVar("T")

RetryCallback = Callable[[int, BaseException, float], None]


class RetryExecutor:
    """
    Invokes an operation until it succeeds, fails permanently, or runs out of attempts.

    The calling thread (or task, for `execute_async`) is suspended between
    attempts; there is no background scheduler.
    """

    def __init__(
        self,
        config: RetryConfig | None = None,
        *,
        classifier: Callable[[BaseException], ErrorClass] = classify,
        on_retry: RetryCallback | None = None,
        sleep: Callable[[float], None] = time.sleep,
        async_sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        cancel_event: threading.Event | asyncio.Event | None = None,
    ):
        """
        Initialize the executor.

        Args:
            config: Retry configuration (default: RetryConfig())
            classifier: Decides whether a failure is retryable
            on_retry: Optional callback(attempt, exception, delay) called before each retry
            sleep: Blocking wait used between attempts
            async_sleep: Awaitable wait used by execute_async
            cancel_event: threading.Event (sync) or asyncio.Event (async) that
                aborts the loop when set
        """
        self.config = config or RetryConfig()
        self.classifier = classifier
        self.on_retry = on_retry
        self.sleep = sleep
        self.async_sleep = async_sleep
        self.cancel_event = cancel_event

    def _outcome_for(self, error: BaseException) -> AttemptOutcome:
        if self.classifier(error) is ErrorClass.RETRYABLE:
            return RetryableFailure(error)
        return FatalFailure(error)

    def attempt(self, operation: Callable[[], T]) -> AttemptOutcome:
        """Invoke the operation once and classify the result."""
        try:
            value = operation()
        except Exception as e:
            return self._outcome_for(e)
        return Success(value)

    async def attempt_async(self, operation: Callable[[], Awaitable[T]]) -> AttemptOutcome:
        """Await the operation once and classify the result."""
        try:
            value = await operation()
        except Exception as e:
            return self._outcome_for(e)
        return Success(value)

    def _report_retry(
        self, description: str, attempt: int, cause: BaseException, delay: float
    ) -> None:
        logger.warning(
            f"{description} failed (attempt {attempt + 1}/{self.config.max_attempts}), "
            f"retrying in {delay:.1f}s: {cause}"
        )
        if self.on_retry:
            self.on_retry(attempt, cause, delay)

    def _check_cancelled(self, description: str, attempts: int) -> None:
        if self.cancel_event is not None and self.cancel_event.is_set():
            raise OperationCancelledError(description, attempts=attempts)

    def _require_event(self, event_type: type, method: str) -> None:
        if self.cancel_event is not None and not isinstance(self.cancel_event, event_type):
            raise TypeError(
                f"{method} requires cancel_event to be "
                f"{event_type.__module__.split('.')[0]}.Event, "
                f"got {type(self.cancel_event).__module__}.{type(self.cancel_event).__name__}"
            )

    def _handle_outcome(
        self, description: str, attempt: int, outcome: AttemptOutcome
    ) -> float | None:
        """
        Decide what happens after an attempt.

        Returns the delay before the next attempt, or None when the loop should
        stop because the budget is spent. Raises on fatal failures.
        """
        if isinstance(outcome, FatalFailure):
            logger.error(f"{description} failed with non-retryable error: {outcome.cause}")
            raise NonRetryableError(
                description, outcome.cause, attempts=attempt + 1
            ) from outcome.cause

        if attempt == self.config.max_attempts - 1:
            return None

        delay = calculate_backoff(attempt, self.config)
        retry_after = getattr(outcome.cause, "retry_after", None)
        if isinstance(retry_after, (int, float)) and retry_after > delay:
            delay = min(float(retry_after), self.config.max_delay)
        self._report_retry(description, attempt, outcome.cause, delay)
        return delay

    def _exhausted(self, description: str, cause: BaseException) -> RetryExhaustedError:
        logger.error(
            f"{description} failed after {self.config.max_attempts} attempts: {cause}"
        )
        return RetryExhaustedError(description, cause, attempts=self.config.max_attempts)

    def execute(self, description: str, operation: Callable[[], T]) -> T:
        """
        Run the operation under the retry policy.

        Args:
            description: Human-readable name of the operation, used in logs and errors
            operation: Zero-argument idempotent callable

        Returns:
            The operation's return value

        Raises:
            NonRetryableError: The operation failed with a fatal error
            RetryExhaustedError: Every attempt failed with a retryable error
            OperationCancelledError: The cancel event was set
            TypeError: cancel_event is not a threading.Event
        """
        self._require_event(threading.Event, "execute")
        last_cause: BaseException | None = None

        for attempt in range(self.config.max_attempts):
            self._check_cancelled(description, attempt)
            outcome = self.attempt(operation)
            if isinstance(outcome, Success):
                if attempt:
                    logger.debug(f"{description} succeeded on attempt {attempt + 1}")
                return outcome.value

            last_cause = outcome.cause
            delay = self._handle_outcome(description, attempt, outcome)
            if delay is None:
                break
            self._wait(description, attempt + 1, delay)

        raise self._exhausted(description, last_cause) from last_cause

    async def execute_async(
        self, description: str, operation: Callable[[], Awaitable[T]]
    ) -> T:
        """Async counterpart of `execute`; the operation returns an awaitable."""
        self._require_event(asyncio.Event, "execute_async")
        last_cause: BaseException | None = None

        for attempt in range(self.config.max_attempts):
            self._check_cancelled(description, attempt)
            outcome = await self.attempt_async(operation)
            if isinstance(outcome, Success):
                if attempt:
                    logger.debug(f"{description} succeeded on attempt {attempt + 1}")
                return outcome.value

            last_cause = outcome.cause
            delay = self._handle_outcome(description, attempt, outcome)
            if delay is None:
                break
            await self._wait_async(description, attempt + 1, delay)

        raise self._exhausted(description, last_cause) from last_cause

    def _wait(self, description: str, attempts: int, delay: float) -> None:
        if self.cancel_event is None:
            self.sleep(delay)
            return
        if self.cancel_event.wait(delay):
            raise OperationCancelledError(description, attempts=attempts)

    async def _wait_async(self, description: str, attempts: int, delay: float) -> None:
        if self.cancel_event is None:
            await self.async_sleep(delay)
            return
        try:
            await asyncio.wait_for(self.cancel_event.wait(), timeout=delay)
        except asyncio.TimeoutError:
            return
        raise OperationCancelledError(description, attempts=attempts)


def with_retry(
    config: RetryConfig | None = None,
    on_retry: RetryCallback | None = None,
    *,
    description: str | None = None,
) -> Callable[[Callable[P, T]], Callable[P, T]]:
    """
    Decorator for synchronous functions with retry logic.

    Args:
        config: Retry configuration (default: RetryConfig())
        on_retry: Optional callback(attempt, exception, delay) called before each retry
        description: Operation name for logs and errors (default: function name)

    Returns:
        Decorated function with retry behavior
    """
    executor = RetryExecutor(config, on_retry=on_retry)

    def decorator(func: Callable[P, T]) -> Callable[P, T]:
        name = description or func.__name__

        @functools.wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            return executor.execute(name, lambda: func(*args, **kwargs))

        return wrapper

    return decorator


def async_with_retry(
    config: RetryConfig | None = None,
    on_retry: RetryCallback | None = None,
    *,
    description: str | None = None,
) -> Callable[[Callable[P, Awaitable[T]]], Callable[P, Awaitable[T]]]:
    """
    Decorator for async functions with retry logic.

    Args:
        config: Retry configuration (default: RetryConfig())
        on_retry: Optional callback(attempt, exception, delay) called before each retry
        description: Operation name for logs and errors (default: function name)

    Returns:
        Decorated async function with retry behavior
    """
    executor = RetryExecutor(config, on_retry=on_retry)

    def decorator(func: Callable[P, Awaitable[T]]) -> Callable[P, Awaitable[T]]:
        name = description or func.__name__

        @functools.wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            return await executor.execute_async(name, lambda: func(*args, **kwargs))

        return wrapper

    return decorator
