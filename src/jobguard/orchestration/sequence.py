"""
Orchestration sequence: ordered phases with optional fan-out/join.
"""

import logging
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Any, Callable, Mapping

from ..exceptions import SequenceAbortedError
from ..polling.models import PollResult

logger = logging.getLogger(__name__)

PhaseAction = Callable[[Any], Any]
BranchAction = Callable[[Any, Any], Any]


def _settle(value: Any) -> Any:
    """Unwrap poll results so a failed or timed-out poll fails its phase."""
    if isinstance(value, PollResult):
        return value.unwrap()
    return value


@dataclass(frozen=True)
class Phase:
    """A single step: receives the previous phase's output."""

    name: str
    action: PhaseAction

    def run(self, value: Any) -> Any:
        return _settle(self.action(value))


@dataclass(frozen=True)
class FanOutPhase:
    """
    Applies an action to every entry of the previous phase's mapping output.

    Branches run one after another unless `parallel` is set, in which case they
    run on a thread pool and are all joined before the phase completes.
    """

    name: str
    action: BranchAction
    parallel: bool = False
    max_workers: int | None = None

    def run(self, value: Any) -> dict:
        if not isinstance(value, Mapping):
            raise TypeError(
                f"fan-out phase '{self.name}' needs a mapping input, got {type(value).__name__}"
            )
        if self.parallel:
            return self._run_parallel(value)

        results = {}
        for key, item in value.items():
            results[key] = _settle(self.action(key, item))
        return results

    def _run_parallel(self, value: Mapping) -> dict:
        if not value:
            return {}

        with ThreadPoolExecutor(
            max_workers=self.max_workers or len(value),
            thread_name_prefix=f"fanout-{self.name}",
        ) as pool:
            futures: dict[Any, Future] = {
                key: pool.submit(lambda k=key, v=item: _settle(self.action(k, v)))
                for key, item in value.items()
            }
            wait(futures.values())

        failures = [
            (key, future.exception())
            for key, future in futures.items()
            if future.exception() is not None
        ]
        if failures:
            for key, error in failures[1:]:
                logger.error(f"Fan-out '{self.name}' branch {key!r} also failed: {error}")
            raise failures[0][1]

        return {key: future.result() for key, future in futures.items()}


class OrchestrationSequence:
    """
    Runs phases in order, feeding each phase the previous phase's output.

    The first failing phase aborts the sequence. Nothing is rolled back;
    cleanup belongs to the caller.
    """

    def __init__(self, name: str):
        self.name = name
        self.phases: list[Phase | FanOutPhase] = []

    def add_phase(self, name: str, action: PhaseAction) -> "OrchestrationSequence":
        """Append a phase; `action(previous_output)` returns this phase's output."""
        self.phases.append(Phase(name, action))
        return self

    def add_fan_out(
        self,
        name: str,
        action: BranchAction,
        *,
        parallel: bool = False,
        max_workers: int | None = None,
    ) -> "OrchestrationSequence":
        """Append a fan-out phase; `action(key, value)` runs per entry of the previous output."""
        self.phases.append(FanOutPhase(name, action, parallel, max_workers))
        return self

    def run(self, initial: Any = None) -> Any:
        """
        Execute every phase in order.

        Args:
            initial: Input for the first phase

        Returns:
            Output of the last phase

        Raises:
            SequenceAbortedError: A phase failed; the original error is `cause`
        """
        value = initial
        for index, phase in enumerate(self.phases, start=1):
            logger.info(f"[{self.name}] phase {index}/{len(self.phases)}: {phase.name}")
            try:
                value = phase.run(value)
            except Exception as e:
                logger.error(f"[{self.name}] phase '{phase.name}' failed: {e}")
                raise SequenceAbortedError(self.name, phase.name, e) from e

        logger.info(f"[{self.name}] all {len(self.phases)} phases completed")
        return value
