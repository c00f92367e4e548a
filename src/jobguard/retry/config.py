"""
Retry configuration and environment overrides.
"""

import logging
import math
import os
import re
from dataclasses import dataclass
from typing import Mapping

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_INITIAL_DELAY = 5.0
DEFAULT_MAX_DELAY = 60.0
DEFAULT_BACKOFF_MULTIPLIER = 2.0

_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ms|us|µs|ns|h|m|s)")
_UNIT_SECONDS = {
    "h": 3600.0,
    "m": 60.0,
    "s": 1.0,
    "ms": 1e-3,
    "us": 1e-6,
    "µs": 1e-6,
    "ns": 1e-9,
}


def parse_duration(value: str) -> float:
    """
    Parse a duration string into seconds.

    Accepts bare numbers ("5", "0.25") and unit strings such as "5s",
    "250ms" or "1m30s".

    Raises:
        ValueError: If the string is not a valid, finite duration
    """
    text = value.strip()
    if not text:
        raise ValueError("empty duration")
    try:
        total = float(text)
    except ValueError:
        total = _parse_units(text)
    if not math.isfinite(total) or total < 0:
        raise ValueError(f"invalid duration: {value!r}")
    return total


def _parse_units(text: str) -> float:
    total = 0.0
    position = 0
    for match in _DURATION_PART.finditer(text):
        if match.start() != position:
            break
        total += float(match.group(1)) * _UNIT_SECONDS[match.group(2)]
        position = match.end()
    if position != len(text):
        raise ValueError(f"invalid duration: {text!r}")
    return total


def env_int(environ: Mapping[str, str], key: str, default: int) -> int:
    """Read a positive integer override, falling back to the default when unset or invalid."""
    raw = environ.get(key)
    if not raw:
        return default
    try:
        value = int(raw.strip())
    except ValueError:
        value = None
    if value is None or value < 1:
        logger.warning(f"Ignoring invalid integer for {key}: {raw!r}, using {default}")
        return default
    return value


def env_duration(environ: Mapping[str, str], key: str, default: float) -> float:
    """Read a positive duration override in seconds, falling back to the default when invalid."""
    raw = environ.get(key)
    if not raw:
        return default
    try:
        value = parse_duration(raw)
    except ValueError:
        value = None
    if value is None or value <= 0:
        logger.warning(f"Ignoring invalid duration for {key}: {raw!r}, using {default}s")
        return default
    return value


@dataclass(frozen=True)
class RetryConfig:
    """
    Configuration for retry behavior.

    Attributes:
        max_attempts: Total invocation budget per logical operation (default: 3)
        initial_delay: First backoff delay in seconds (default: 5.0)
        max_delay: Backoff ceiling in seconds (default: 60.0)
        backoff_multiplier: Growth factor between delays (default: 2.0)
    """

    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    initial_delay: float = DEFAULT_INITIAL_DELAY
    max_delay: float = DEFAULT_MAX_DELAY
    backoff_multiplier: float = DEFAULT_BACKOFF_MULTIPLIER

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {self.max_attempts}")
        for name in ("initial_delay", "max_delay", "backoff_multiplier"):
            if not math.isfinite(getattr(self, name)):
                raise ValueError(f"{name} must be finite, got {getattr(self, name)}")
        if self.initial_delay <= 0:
            raise ValueError(f"initial_delay must be positive, got {self.initial_delay}")
        if self.max_delay < self.initial_delay:
            raise ValueError(
                f"max_delay ({self.max_delay}) must not be below initial_delay ({self.initial_delay})"
            )
        if self.backoff_multiplier < 1.0:
            raise ValueError(
                f"backoff_multiplier must be >= 1.0, got {self.backoff_multiplier}"
            )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "RetryConfig":
        """
        Build a config from TEST_RETRY_* environment variables.

        Meant to be called once at process start; the result is then passed
        explicitly to executors and pollers. Invalid values fall back to the
        defaults with a warning. A max delay below the initial delay lowers
        the initial delay to match.

        Args:
            environ: Mapping to read from (default: os.environ)
        """
        environ = os.environ if environ is None else environ
        initial_delay = env_duration(environ, "TEST_RETRY_INITIAL_DELAY", DEFAULT_INITIAL_DELAY)
        max_delay = env_duration(environ, "TEST_RETRY_MAX_DELAY", DEFAULT_MAX_DELAY)
        if max_delay < initial_delay:
            logger.warning(
                f"Retry max delay {max_delay}s is below initial delay {initial_delay}s, "
                f"using {max_delay}s for both"
            )
            initial_delay = max_delay
        return cls(
            max_attempts=env_int(environ, "TEST_RETRY_MAX_ATTEMPTS", DEFAULT_MAX_ATTEMPTS),
            initial_delay=initial_delay,
            max_delay=max_delay,
        )

    @classmethod
    def no_retry(cls) -> "RetryConfig":
        """Preset for no retry (single attempt only)."""
        return cls(max_attempts=1)
