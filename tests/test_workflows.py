"""Tests for the backup/restore workflow - behavior focused with a fake backup service."""

import threading

import pytest

from jobguard.clients import BaseJobClient
from jobguard.exceptions import (
    JobFailedError,
    JobTimeoutError,
    SequenceAbortedError,
    ThrottlingError,
)
from jobguard.orchestration import BackupTarget, RestoreOutcome, backup_and_restore
from jobguard.polling import JobHandle, JobKind, JobState, JobStatus, PollingConfig
from jobguard.retry import RetryConfig


class FakeBackupService(BaseJobClient):
    """In-memory backup service: each job walks through a scripted list of states."""

    def __init__(
        self, backup_states=None, restore_states=None, throttle_starts=0, artifacts=True
    ):
        super().__init__()
        self.backup_states = backup_states or [JobState.RUNNING, JobState.COMPLETED]
        self.restore_states = restore_states or [JobState.PENDING, JobState.COMPLETED]
        self.throttle_starts = throttle_starts
        self.artifacts = artifacts
        self.jobs: dict[str, dict] = {}
        self.started: list[str] = []
        self._lock = threading.Lock()

    @property
    def provider_name(self) -> str:
        return "Fake"

    def _new_job(self, kind: JobKind, resource_type: str, artifact: str, states) -> JobHandle:
        with self._lock:
            if self.throttle_starts:
                self.throttle_starts -= 1
                raise ThrottlingError()
            job_id = f"{kind.value}-{len(self.jobs) + 1}"
            self.jobs[job_id] = {"states": list(states), "polls": 0, "artifact": artifact}
            self.started.append(job_id)
        return JobHandle(job_id, resource_type, kind)

    def start_backup_job(self, resource_arn, vault_name, iam_role_arn, resource_type=""):
        return self._new_job(
            JobKind.BACKUP, resource_type, f"rp:{resource_arn}", self.backup_states
        )

    def start_restore_job(self, recovery_point_arn, metadata, iam_role_arn, resource_type=""):
        return self._new_job(
            JobKind.RESTORE, resource_type, f"restored:{recovery_point_arn}", self.restore_states
        )

    def describe_job(self, handle):
        with self._lock:
            job = self.jobs[handle.job_id]
            index = min(job["polls"], len(job["states"]) - 1)
            job["polls"] += 1
        state = job["states"][index]
        ref = job["artifact"] if self.artifacts and state is JobState.COMPLETED else None
        return JobStatus(state, ref)


TARGETS = [
    BackupTarget("volume", "vol-1", "EBS", {"VolumeSize": "8", "VolumeType": "gp3"}),
    BackupTarget("instance", "i-1", "EC2"),
    BackupTarget("table", "table-1", "DynamoDB", {"TableName": "restored-table"}),
]

FAST_RETRY = RetryConfig(max_attempts=3, initial_delay=0.001, max_delay=0.002)
FAST_POLL = PollingConfig(poll_interval=0.001, timeout=5.0)


def run(service, **kwargs):
    options = dict(
        vault_name="vault",
        iam_role_arn="arn:role",
        retry_config=FAST_RETRY,
        backup_polling=FAST_POLL,
        restore_polling=FAST_POLL,
    )
    options.update(kwargs)
    return backup_and_restore(service, TARGETS, **options)


class TestBackupAndRestore:
    """Test the multi-phase workflow."""

    def test_backs_up_everything_and_restores_targets_with_metadata(self):
        service = FakeBackupService()

        results = run(service)

        assert list(results) == ["volume", "instance", "table"]
        assert results["volume"].recovery_point_arn == "rp:vol-1"
        assert results["volume"].restored_ref == "restored:rp:vol-1"
        assert results["table"].restored_ref == "restored:rp:table-1"
        assert results["instance"] == RestoreOutcome("instance", "backup-2", "rp:i-1")

    def test_phases_run_in_order(self):
        service = FakeBackupService()

        run(service)

        assert service.started == [
            "backup-1",
            "backup-2",
            "backup-3",
            "restore-4",
            "restore-5",
        ]

    @pytest.mark.parametrize("parallel", [False, True])
    def test_same_result_sequential_or_parallel(self, parallel):
        results = run(FakeBackupService(), parallel=parallel)

        assert {name: r.recovery_point_arn for name, r in results.items()} == {
            "volume": "rp:vol-1",
            "instance": "rp:i-1",
            "table": "rp:table-1",
        }

    def test_throttled_start_is_retried(self):
        service = FakeBackupService(throttle_starts=2)

        results = run(service)

        assert results["volume"].restored_ref == "restored:rp:vol-1"

    def test_failed_backup_aborts_before_restore(self):
        service = FakeBackupService(backup_states=[JobState.RUNNING, JobState.ABORTED])

        with pytest.raises(SequenceAbortedError) as exc_info:
            run(service)

        assert exc_info.value.phase == "wait for backup jobs"
        assert isinstance(exc_info.value.cause, JobFailedError)
        assert not any(job.startswith("restore") for job in service.started)

    def test_restore_timeout_is_reported_as_timeout(self):
        service = FakeBackupService(restore_states=[JobState.RUNNING])

        with pytest.raises(SequenceAbortedError) as exc_info:
            run(service, restore_polling=PollingConfig(poll_interval=0.001, timeout=0.01))

        assert exc_info.value.phase == "wait for restore jobs"
        assert isinstance(exc_info.value.cause, JobTimeoutError)

    def test_backup_without_recovery_point_skips_restore_with_warning(self, caplog):
        service = FakeBackupService(artifacts=False)

        with caplog.at_level("WARNING"):
            results = run(service)

        assert results["volume"].restore_job_id is None
        assert not any(job.startswith("restore") for job in service.started)
        assert "Skipping restore of volume" in caplog.text
        assert "Skipping restore of table" in caplog.text
        assert "Skipping restore of instance" not in caplog.text

    def test_rerun_yields_same_artifacts(self):
        """Idempotent service calls produce the same references on a second run."""
        first = run(FakeBackupService())
        second = run(FakeBackupService())

        assert first == second

    def test_duplicate_target_names_rejected(self):
        with pytest.raises(ValueError):
            backup_and_restore(
                FakeBackupService(),
                [TARGETS[0], TARGETS[0]],
                vault_name="vault",
                iam_role_arn="arn:role",
            )
