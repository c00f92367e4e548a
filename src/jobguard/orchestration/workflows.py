"""
Backup then restore workflow built on the orchestration sequence.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Iterable, Mapping

from .sequence import OrchestrationSequence
from ..clients.base import BaseJobClient
from ..polling import JobHandle, JobPoller, PollingConfig
from ..retry import RetryConfig, RetryExecutor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BackupTarget:
    """A resource to back up, and how to restore it (no metadata: backup only)."""

    name: str
    resource_arn: str
    resource_type: str
    restore_metadata: Mapping[str, str] | None = field(default=None, hash=False)


@dataclass(frozen=True)
class RestoreOutcome:
    """What the workflow produced for one target."""

    name: str
    backup_job_id: str
    recovery_point_arn: str | None
    restore_job_id: str | None = None
    restored_ref: str | None = None


def backup_and_restore(
    client: BaseJobClient,
    targets: Iterable[BackupTarget],
    *,
    vault_name: str,
    iam_role_arn: str,
    retry_config: RetryConfig | None = None,
    backup_polling: PollingConfig | None = None,
    restore_polling: PollingConfig | None = None,
    parallel: bool = False,
    sleep: Callable[[float], None] = time.sleep,
) -> dict[str, RestoreOutcome]:
    """
    Back up every target, wait for the recovery points, then restore and wait again.

    Args:
        client: Backup service adapter
        targets: Resources to process; names must be unique
        vault_name: Vault receiving the recovery points
        iam_role_arn: Role used by the backup service
        retry_config: Retry policy for every remote call (default: RetryConfig())
        backup_polling: Poll settings for backup jobs (default: 30s / 30 min)
        restore_polling: Poll settings for restore jobs (default: 30s / 20 min)
        parallel: Run the per-target branches of each phase concurrently
        sleep: Blocking wait used for backoff and polling

    Returns:
        Outcome per target name

    Raises:
        SequenceAbortedError: The first failed phase, with the underlying error as cause
    """
    executor = RetryExecutor(retry_config, sleep=sleep)
    backup_polling = backup_polling or PollingConfig.for_backup()
    restore_polling = restore_polling or PollingConfig.for_restore()
    backup_poller = JobPoller(
        client.describe_job,
        poll_interval=backup_polling.poll_interval,
        timeout=backup_polling.timeout,
        retry_executor=executor,
        sleep=sleep,
    )
    restore_poller = JobPoller(
        client.describe_job,
        poll_interval=restore_polling.poll_interval,
        timeout=restore_polling.timeout,
        retry_executor=executor,
        sleep=sleep,
    )

    def start_backup(name: str, target: BackupTarget) -> tuple[BackupTarget, JobHandle]:
        handle = executor.execute(
            f"start backup job for {target.resource_type}",
            lambda: client.start_backup_job(
                target.resource_arn, vault_name, iam_role_arn, target.resource_type
            ),
        )
        return target, handle

    def wait_for_backup(
        name: str, started: tuple[BackupTarget, JobHandle]
    ) -> tuple[BackupTarget, JobHandle, str | None]:
        target, handle = started
        recovery_point = backup_poller.poll_until_terminal(handle).unwrap()
        return target, handle, recovery_point

    def start_restore(
        name: str, backed_up: tuple[BackupTarget, JobHandle, str | None]
    ) -> tuple[RestoreOutcome, JobHandle | None]:
        target, backup_handle, recovery_point = backed_up
        outcome = RestoreOutcome(name, backup_handle.job_id, recovery_point)
        if target.restore_metadata is None:
            return outcome, None
        if recovery_point is None:
            logger.warning(
                f"Skipping restore of {name}: {backup_handle.describe()} "
                f"completed without a recovery point"
            )
            return outcome, None

        handle = executor.execute(
            f"start {target.resource_type} restore",
            lambda: client.start_restore_job(
                recovery_point, target.restore_metadata, iam_role_arn, target.resource_type
            ),
        )
        return outcome, handle

    def wait_for_restore(
        name: str, started: tuple[RestoreOutcome, JobHandle | None]
    ) -> RestoreOutcome:
        outcome, handle = started
        if handle is None:
            return outcome
        restored = restore_poller.poll_until_terminal(handle).unwrap()
        return RestoreOutcome(
            outcome.name,
            outcome.backup_job_id,
            outcome.recovery_point_arn,
            restore_job_id=handle.job_id,
            restored_ref=restored,
        )

    initial = {}
    for target in targets:
        if target.name in initial:
            raise ValueError(f"duplicate backup target name: {target.name}")
        initial[target.name] = target

    sequence = (
        OrchestrationSequence("backup-restore")
        .add_fan_out("start backup jobs", start_backup, parallel=parallel)
        .add_fan_out("wait for backup jobs", wait_for_backup, parallel=parallel)
        .add_fan_out("start restore jobs", start_restore, parallel=parallel)
        .add_fan_out("wait for restore jobs", wait_for_restore, parallel=parallel)
    )
    results = sequence.run(initial)
    logger.info(f"Backup and restore completed for {len(results)} targets")
    return results
