"""
Maps TorBox's status vocabulary onto the three outcomes the polling loop
cares about.
"""

from enum import Enum

# TorBox uses several synonyms for "ready to download".
COMPLETION_STATUSES = frozenset({"completed", "ready", "cached", "done"})
FAILURE_STATUSES = frozenset({"error", "failed"})


class JobOutcome(Enum):
    """What a single status reading means for the workflow."""

    SUCCESS = "success"
    FAILURE = "failure"
    CONTINUE = "continue"


def classify_status(status: str, progress: float = 0.0) -> JobOutcome:
    """
    Classifies a raw status token and progress fraction.

    A progress of 1 or more counts as finished even when the token itself is
    not a known completion status, since the vocabulary is not fully known.
    """
    token = (status or "").strip().lower()
    if token in COMPLETION_STATUSES or progress >= 1:
        return JobOutcome.SUCCESS
    if token in FAILURE_STATUSES:
        return JobOutcome.FAILURE
    return JobOutcome.CONTINUE
