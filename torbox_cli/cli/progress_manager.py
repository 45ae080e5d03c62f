"""
Renders workflow progress events as a Rich live spinner in the terminal.
"""

import logging

from rich.console import Console
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TaskID, TextColumn, TimeElapsedColumn

from torbox_cli.core.status import COMPLETION_STATUSES, FAILURE_STATUSES
from torbox_cli.models.job import ProgressEvent

log = logging.getLogger("torbox_cli")


def status_style(status: str) -> str:
    token = (status or "").lower()
    if token in COMPLETION_STATUSES:
        return "green"
    if token in FAILURE_STATUSES:
        return "red"
    if token == "queued":
        return "cyan"
    return "yellow"


class ProgressManager:
    """
    A progress sink that shows the latest status next to a spinner.

    A line is printed above the spinner each time the status token changes,
    so the scrollback keeps a short history of the run.
    """

    def __init__(self, console: Console, transient: bool = True):
        self.console = console
        self.progress = Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}", justify="left"),
            "•",
            TimeElapsedColumn(),
            console=console,
            transient=transient,
        )
        self.history: list[ProgressEvent] = []
        self._task_id: TaskID | None = None

    async def __aenter__(self) -> "ProgressManager":
        self.progress.start()
        self._task_id = self.progress.add_task("Submitting to TorBox...", total=None)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        self.progress.stop()

    def notify(self, status: str, message: str) -> None:
        previous = self.history[-1].status if self.history else None
        self.history.append(ProgressEvent(status=status, message=message))

        style = status_style(status)
        message = escape(message)
        if self._task_id is not None:
            self.progress.update(
                self._task_id, description=f"[{style}]{message}[/{style}]"
            )
        if status != previous:
            self.progress.console.print(f"[{style}]•[/{style}] {message}")
        log.debug(f"Progress: {status} | {message}")
