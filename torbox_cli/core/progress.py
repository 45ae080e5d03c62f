"""
The progress sink contract and the boundary that keeps sink failures out of
the workflow.
"""

import logging
from collections.abc import Callable
from typing import Optional, Protocol, runtime_checkable

from torbox_cli.models.job import ProgressEvent

log = logging.getLogger(__name__)


@runtime_checkable
class ProgressSink(Protocol):
    """Anything that wants to hear about workflow status changes."""

    def notify(self, status: str, message: str) -> None: ...


class CallbackProgressSink:
    """Adapts a plain `(status, message)` callable to the sink protocol."""

    def __init__(self, callback: Callable[[str, str], None]):
        self._callback = callback

    def notify(self, status: str, message: str) -> None:
        self._callback(status, message)


class RecordingProgressSink:
    """Keeps every event in order. Useful for scripting and tests."""

    def __init__(self):
        self.events: list[ProgressEvent] = []

    def notify(self, status: str, message: str) -> None:
        self.events.append(ProgressEvent(status=status, message=message))


def deliver_progress(
    sink: Optional[ProgressSink], status: str, message: str
) -> bool:
    """
    Fire-and-forget delivery of one event.

    Returns True if the sink accepted the event. Any exception raised by the
    sink is logged and discarded; a missing sink is not an error.
    """
    if sink is None:
        return False
    try:
        sink.notify(status, message)
    except Exception as e:
        log.debug(f"Progress sink dropped event '{status}': {e}")
        return False
    return True
