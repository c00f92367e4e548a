"""
Jobguard - Orchestration.

Multi-phase workflows composed from retried calls and job polls.
"""

from .sequence import OrchestrationSequence, Phase, FanOutPhase
from .workflows import BackupTarget, RestoreOutcome, backup_and_restore

__all__ = [
    "OrchestrationSequence",
    "Phase",
    "FanOutPhase",
    "BackupTarget",
    "RestoreOutcome",
    "backup_and_restore",
]
