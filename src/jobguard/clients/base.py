"""
Base job client interface.

Defines the control-plane calls the orchestration layer needs from a backup
service adapter.
"""

from abc import ABC, abstractmethod
from typing import Mapping

from ..polling.models import JobHandle, JobStatus


class BaseJobClient(ABC):
    """
    Abstract base class for backup service clients.

    Every method is a single remote call with no retry of its own; callers wrap
    them in a RetryExecutor.
    """

    def __init__(self, timeout: float = 30.0):
        """
        Initialize the client.

        Args:
            timeout: Request timeout in seconds
        """
        self.timeout = timeout

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the provider name for logging."""
        ...

    @abstractmethod
    def start_backup_job(
        self,
        resource_arn: str,
        vault_name: str,
        iam_role_arn: str,
        resource_type: str = "",
    ) -> JobHandle:
        """
        Start an on-demand backup of a resource.

        Args:
            resource_arn: Resource to back up
            vault_name: Backup vault receiving the recovery point
            iam_role_arn: Role the service assumes for the backup
            resource_type: Label recorded on the returned handle

        Returns:
            Handle of the started backup job
        """
        ...

    @abstractmethod
    def start_restore_job(
        self,
        recovery_point_arn: str,
        metadata: Mapping[str, str],
        iam_role_arn: str,
        resource_type: str = "",
    ) -> JobHandle:
        """
        Start restoring a recovery point.

        Args:
            recovery_point_arn: Recovery point produced by a backup job
            metadata: Service-specific restore parameters
            iam_role_arn: Role the service assumes for the restore
            resource_type: Label recorded on the returned handle

        Returns:
            Handle of the started restore job
        """
        ...

    @abstractmethod
    def describe_job(self, handle: JobHandle) -> JobStatus:
        """
        Query the current state of a backup or restore job.

        Returns:
            Current status; artifact_ref is set once the job has completed
        """
        ...
