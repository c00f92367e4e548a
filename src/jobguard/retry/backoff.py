"""
Backoff delay calculation.
"""

from typing import Iterator

from .config import RetryConfig


def calculate_backoff(attempt: int, config: RetryConfig) -> float:
    """
    Calculate backoff delay for a given attempt.

    Args:
        attempt: Zero-based attempt number
        config: Retry configuration

    Returns:
        Delay in seconds, never above config.max_delay
    """
    if attempt < 0:
        raise ValueError(f"attempt must be non-negative, got {attempt}")

    try:
        delay = config.initial_delay * (config.backoff_multiplier**attempt)
    except OverflowError:
        return config.max_delay

    return min(delay, config.max_delay)


def backoff_schedule(config: RetryConfig, count: int | None = None) -> Iterator[float]:
    """Yield successive delays, the first `count` of them (default: one per retry)."""
    if count is None:
        count = config.max_attempts - 1
    for attempt in range(count):
        yield calculate_backoff(attempt, config)
