"""
HTTP job client adapter.

Talks to a JSON backup-service API that mirrors the backup/restore job
operations of cloud backup services.
"""

import logging
import math
from typing import Mapping

import httpx

from .base import BaseJobClient
from ..exceptions import (
    AccessDeniedError,
    ConflictError,
    RemoteConnectionError,
    RemoteOperationError,
    ResourceNotFoundError,
    ServiceUnavailableError,
    ThrottlingError,
    ValidationError,
)
from ..polling.models import JobHandle, JobKind, JobState, JobStatus
from ..retry.classifier import RETRYABLE_CODES, matches_retryable_pattern

logger = logging.getLogger(__name__)


class HttpJobClient(BaseJobClient):
    """
    Client for a backup-service HTTP API.

    Endpoints:
    - POST /backup-jobs, GET /backup-jobs/{id}
    - POST /restore-jobs, GET /restore-jobs/{id}
    """

    def __init__(
        self,
        base_url: str,
        headers: Mapping[str, str] | None = None,
        timeout: float = 30.0,
    ):
        """
        Initialize HTTP job client.

        Args:
            base_url: API base URL
            headers: Extra headers sent with every request
            timeout: Request timeout in seconds
        """
        super().__init__(timeout)
        self.base_url = base_url.rstrip("/")
        self.headers = dict(headers or {})

    @property
    def provider_name(self) -> str:
        return "BackupService"

    def _get_headers(self) -> dict:
        """Get headers for API requests."""
        return {"Content-Type": "application/json", **self.headers}

    def _error_details(self, response: httpx.Response) -> tuple[str | None, str]:
        """Pull the provider error code and message out of an error body."""
        try:
            body = response.json()
        except ValueError:
            return None, response.text
        if not isinstance(body, dict):
            return None, response.text
        code = body.get("__type") or body.get("code") or body.get("Code")
        if isinstance(code, str) and "#" in code:
            code = code.rsplit("#", 1)[-1]
        message = body.get("message") or body.get("Message") or response.text
        return code, message

    def _handle_error(self, response: httpx.Response) -> None:
        """Convert error responses to domain exceptions."""
        status_code = response.status_code
        if status_code < 400:
            return

        code, message = self._error_details(response)
        context = {"provider": self.provider_name, "status_code": status_code}

        if status_code == 429:
            raise ThrottlingError(
                message, code=code, retry_after=self._retry_after(response), **context
            )
        if status_code >= 500:
            raise ServiceUnavailableError(message, code=code, **context)
        # Throttling and concurrent modification often arrive as plain 4xx
        if code in RETRYABLE_CODES or matches_retryable_pattern(f"{code or ''} {message}"):
            raise RemoteOperationError(message, code=code, retryable=True, **context)
        if status_code == 403:
            raise AccessDeniedError(message, code=code, **context)
        if status_code == 404:
            raise ResourceNotFoundError(message, code=code, **context)
        if status_code == 409:
            raise ConflictError(message, code=code, **context)
        if status_code == 400:
            raise ValidationError(message, code=code, **context)
        raise RemoteOperationError(message, code=code, **context)

    @staticmethod
    def _retry_after(response: httpx.Response) -> float | None:
        """Seconds from a Retry-After header, or None when absent or not numeric."""
        value = response.headers.get("Retry-After")
        if value is None:
            return None
        try:
            seconds = float(value)
        except ValueError:
            return None
        if not math.isfinite(seconds) or seconds < 0:
            return None
        return seconds

    def _request(self, method: str, path: str, payload: dict | None = None) -> dict:
        url = f"{self.base_url}{path}"
        try:
            with httpx.Client(timeout=self.timeout) as client:
                if method == "POST":
                    response = client.post(url, json=payload, headers=self._get_headers())
                else:
                    response = client.get(url, headers=self._get_headers())
        except httpx.TimeoutException as e:
            raise RemoteConnectionError(
                f"Request to {url} timed out after {self.timeout}s",
                provider=self.provider_name,
            ) from e
        except httpx.TransportError as e:
            raise RemoteConnectionError(
                f"Failed to connect to {self.base_url}: {e}",
                provider=self.provider_name,
            ) from e

        self._handle_error(response)
        return response.json()

    def start_backup_job(
        self,
        resource_arn: str,
        vault_name: str,
        iam_role_arn: str,
        resource_type: str = "",
    ) -> JobHandle:
        data = self._request(
            "POST",
            "/backup-jobs",
            {
                "BackupVaultName": vault_name,
                "ResourceArn": resource_arn,
                "IamRoleArn": iam_role_arn,
            },
        )
        handle = JobHandle(data["BackupJobId"], resource_type, JobKind.BACKUP)
        logger.info(f"[{self.provider_name}] Started {handle.describe()} for {resource_arn}")
        return handle

    def start_restore_job(
        self,
        recovery_point_arn: str,
        metadata: Mapping[str, str],
        iam_role_arn: str,
        resource_type: str = "",
    ) -> JobHandle:
        data = self._request(
            "POST",
            "/restore-jobs",
            {
                "RecoveryPointArn": recovery_point_arn,
                "Metadata": dict(metadata),
                "IamRoleArn": iam_role_arn,
            },
        )
        handle = JobHandle(data["RestoreJobId"], resource_type, JobKind.RESTORE)
        logger.info(
            f"[{self.provider_name}] Started {handle.describe()} from {recovery_point_arn}"
        )
        return handle

    def describe_job(self, handle: JobHandle) -> JobStatus:
        if handle.kind is JobKind.RESTORE:
            data = self._request("GET", f"/restore-jobs/{handle.job_id}")
            state = JobState.parse(data["Status"])
            artifact = data.get("CreatedResourceArn")
        else:
            data = self._request("GET", f"/backup-jobs/{handle.job_id}")
            state = JobState.parse(data["State"])
            artifact = data.get("RecoveryPointArn")

        return JobStatus(
            state=state,
            artifact_ref=artifact if state is JobState.COMPLETED else None,
            message=data.get("StatusMessage"),
        )
