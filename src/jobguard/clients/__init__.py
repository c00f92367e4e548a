"""
Jobguard - Job Clients.

Control-plane adapters that start and describe backup/restore jobs.
"""

from .base import BaseJobClient
from .http import HttpJobClient

__all__ = [
    "BaseJobClient",
    "HttpJobClient",
]
