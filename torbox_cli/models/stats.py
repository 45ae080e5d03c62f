"""
Dataclass for tracking statistics of a single submit/poll/resolve run.
"""

import time
from dataclasses import dataclass, field
from typing import Optional


@dataclass
class WorkflowStats:
    """Tracks what a workflow did, for the summary shown after a run."""

    attempts: int = 0
    events_emitted: int = 0
    events_dropped: int = 0
    last_status: Optional[str] = None
    last_progress: float = 0.0
    final_state: Optional[str] = None

    _start_time: float = field(default=0.0, repr=False)
    _end_time: Optional[float] = field(default=None, repr=False)

    def __post_init__(self):
        self._start_time = time.monotonic()

    def record_attempt(self, status: str, progress: float) -> None:
        self.attempts += 1
        self.last_status = status
        self.last_progress = progress

    def finish(self, state: str) -> None:
        self.final_state = state
        self._end_time = time.monotonic()

    @property
    def elapsed(self) -> float:
        """Seconds since the run started, frozen once it finished."""
        end = self._end_time if self._end_time is not None else time.monotonic()
        return end - self._start_time
