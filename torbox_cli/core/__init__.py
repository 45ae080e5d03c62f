"""
Core workflow engine.

The `DownloadOrchestrator` submits a link to TorBox, polls the web download
listing until the job is ready and resolves a direct download URL, reporting
progress through a `ProgressSink` along the way.
"""

from .orchestrator import DownloadOrchestrator, WorkflowState
from .progress import ProgressSink, deliver_progress
from .status import JobOutcome, classify_status

__all__ = [
    "DownloadOrchestrator",
    "JobOutcome",
    "ProgressSink",
    "WorkflowState",
    "classify_status",
    "deliver_progress",
]
