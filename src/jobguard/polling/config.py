"""
Polling configuration.
"""

import math
import os
from dataclasses import dataclass
from typing import Mapping

from ..retry.config import env_duration

DEFAULT_POLL_INTERVAL = 30.0
DEFAULT_BACKUP_TIMEOUT = 30 * 60.0
DEFAULT_RESTORE_TIMEOUT = 20 * 60.0


@dataclass(frozen=True)
class PollingConfig:
    """
    Configuration for job polling.

    Attributes:
        poll_interval: Fixed wait between status queries in seconds (default: 30.0)
        timeout: Wall-clock budget for reaching a terminal state (default: 30 minutes)
    """

    poll_interval: float = DEFAULT_POLL_INTERVAL
    timeout: float = DEFAULT_BACKUP_TIMEOUT

    def __post_init__(self) -> None:
        if not math.isfinite(self.poll_interval) or self.poll_interval <= 0:
            raise ValueError(
                f"poll_interval must be positive and finite, got {self.poll_interval}"
            )
        if not math.isfinite(self.timeout) or self.timeout <= 0:
            raise ValueError(f"timeout must be positive and finite, got {self.timeout}")

    @classmethod
    def from_env(
        cls,
        prefix: str = "TEST_BACKUP",
        environ: Mapping[str, str] | None = None,
        *,
        timeout: float = DEFAULT_BACKUP_TIMEOUT,
    ) -> "PollingConfig":
        """Build a config from <prefix>_POLL_INTERVAL and <prefix>_TIMEOUT."""
        environ = os.environ if environ is None else environ
        return cls(
            poll_interval=env_duration(
                environ, f"{prefix}_POLL_INTERVAL", DEFAULT_POLL_INTERVAL
            ),
            timeout=env_duration(environ, f"{prefix}_TIMEOUT", timeout),
        )

    @classmethod
    def for_backup(cls) -> "PollingConfig":
        """Preset used when waiting for backup jobs."""
        return cls(timeout=DEFAULT_BACKUP_TIMEOUT)

    @classmethod
    def for_restore(cls) -> "PollingConfig":
        """Preset used when waiting for restore jobs."""
        return cls(timeout=DEFAULT_RESTORE_TIMEOUT)
