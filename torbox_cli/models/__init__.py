"""
Data Models Layer.

This package contains Pydantic models that define the core data structures
used throughout the application, such as configuration, jobs and statistics.
"""

from .config import TorboxConfig
from .job import Job, ProgressEvent, ResolvedDownload, SubmissionRequest
from .stats import WorkflowStats

__all__ = [
    "Job",
    "ProgressEvent",
    "ResolvedDownload",
    "SubmissionRequest",
    "TorboxConfig",
    "WorkflowStats",
]
