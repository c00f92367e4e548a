"""
Tagged result of a single operation invocation.
"""

from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True)
class Success:
    """The operation returned a value."""

    value: Any


@dataclass(frozen=True)
class RetryableFailure:
    """The operation raised an error classified as transient."""

    cause: BaseException


@dataclass(frozen=True)
class FatalFailure:
    """The operation raised an error classified as permanent."""

    cause: BaseException


AttemptOutcome = Union[Success, RetryableFailure, FatalFailure]
