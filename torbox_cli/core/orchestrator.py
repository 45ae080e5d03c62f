"""
Drives a single TorBox web download from submission to a direct download URL.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Optional

from pydantic import ValidationError

from torbox_cli.api.client import TorboxAPIClient
from torbox_cli.exceptions import (
    CredentialMissingError,
    InvalidSubmissionError,
    JobVanishedError,
    PollTimeoutError,
    RemoteJobFailedError,
    TorboxCliError,
    WorkflowCancelledError,
)
from torbox_cli.models.config import DEFAULT_MAX_POLL_ATTEMPTS, DEFAULT_POLL_INTERVAL
from torbox_cli.models.job import Job, JobId, ResolvedDownload, SubmissionRequest
from torbox_cli.models.stats import WorkflowStats
from torbox_cli.storage.credentials import CredentialStore

from .progress import ProgressSink, deliver_progress
from .status import JobOutcome, classify_status

log = logging.getLogger(__name__)

QUEUED_MESSAGE = "Download queued, waiting for processing..."


class WorkflowState(Enum):
    """States of a submit/poll/resolve run."""

    IDLE = "idle"
    SUBMITTING = "submitting"
    QUEUED = "queued"
    POLLING = "polling"
    COMPLETED = "completed"
    FAILED = "failed"
    TIMED_OUT = "timed_out"
    NOT_FOUND = "not_found"
    CANCELLED = "cancelled"


FAILURE_STATES = frozenset(
    {WorkflowState.FAILED, WorkflowState.TIMED_OUT, WorkflowState.NOT_FOUND}
)
TERMINAL_STATES = FAILURE_STATES | {WorkflowState.COMPLETED, WorkflowState.CANCELLED}


class DownloadOrchestrator:
    """
    Runs the submit -> poll -> resolve workflow for one link.

    An instance handles exactly one workflow. Once `submit` returns or raises,
    the orchestrator is in a terminal state and cannot be reused.

    Polling happens at a fixed interval with a bounded number of attempts.
    The delay between attempts is injectable through `sleep` so that callers
    (and tests) control how time passes. With the default delay, `cancel()`
    wakes the loop immediately and the run ends with WorkflowCancelledError.
    """

    def __init__(
        self,
        api_client: TorboxAPIClient,
        credentials: CredentialStore,
        progress_sink: Optional[ProgressSink] = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        max_attempts: int = DEFAULT_MAX_POLL_ATTEMPTS,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

        self.api_client = api_client
        self.credentials = credentials
        self.progress_sink = progress_sink
        self.poll_interval = poll_interval
        self.max_attempts = max_attempts
        self.stats = WorkflowStats()

        self._sleep = sleep
        self._state = WorkflowState.IDLE
        self._cancelled = asyncio.Event()

    @property
    def state(self) -> WorkflowState:
        return self._state

    def cancel(self) -> None:
        """Requests that polling stop before the next attempt."""
        self._cancelled.set()

    def _transition(self, new_state: WorkflowState) -> None:
        log.debug(f"Workflow state: {self._state.value} -> {new_state.value}")
        self._state = new_state
        if new_state in TERMINAL_STATES:
            self.stats.finish(new_state.value)

    def _emit(self, status: str, message: str) -> None:
        if deliver_progress(self.progress_sink, status, message):
            self.stats.events_emitted += 1
        elif self.progress_sink is not None:
            self.stats.events_dropped += 1

    def _raise_if_cancelled(self) -> None:
        if self._cancelled.is_set():
            raise WorkflowCancelledError("Download cancelled while waiting for TorBox.")

    async def _wait(self) -> None:
        if self._sleep is not None:
            await self._sleep(self.poll_interval)
        else:
            try:
                await asyncio.wait_for(self._cancelled.wait(), self.poll_interval)
            except asyncio.TimeoutError:
                pass
        self._raise_if_cancelled()

    async def submit(
        self, link: str, display_name: Optional[str] = None
    ) -> ResolvedDownload:
        """
        Submits `link` to TorBox, waits for it to be cached and resolves a
        direct download URL.

        Raises:
            InvalidSubmissionError: The link is empty.
            CredentialMissingError: No API key is configured.
            SubmissionRejectedError, MissingJobIdError: The submission failed.
            StatusQueryFailedError, JobVanishedError, RemoteJobFailedError,
            PollTimeoutError: Polling failed.
            LinkResolutionFailedError: The final link could not be obtained.
            WorkflowCancelledError: `cancel()` was called mid-run.
        """
        if self._state is not WorkflowState.IDLE:
            raise RuntimeError("This orchestrator has already run a workflow.")

        try:
            request = SubmissionRequest(link=link, display_name=display_name)
        except ValidationError as e:
            self._transition(WorkflowState.FAILED)
            message = e.errors()[0]["msg"].removeprefix("Value error, ")
            raise InvalidSubmissionError(message) from e

        credential = self.credentials.get()
        if not credential:
            self._transition(WorkflowState.FAILED)
            raise CredentialMissingError(
                "TorBox API key not configured. Run 'torbox-cli init <API_KEY>' first."
            )

        try:
            job_id = await self._create(credential, request)
            job = await self._poll(credential, job_id)
            url = await self.api_client.request_download_link(
                credential, job.job_id, job.resolved_file_id
            )
        except (WorkflowCancelledError, asyncio.CancelledError):
            self._transition(WorkflowState.CANCELLED)
            raise
        except TorboxCliError as e:
            if self._state not in FAILURE_STATES:
                self._transition(WorkflowState.FAILED)
            log.debug(f"Workflow ended in {self._state.value}: {e}")
            raise

        log.debug(f"Resolved download link for web download {job.job_id}")
        return ResolvedDownload(
            url=url,
            job_id=job.job_id,
            file_id=job.resolved_file_id,
            attempts=self.stats.attempts,
        )

    async def _create(self, credential: str, request: SubmissionRequest) -> JobId:
        self._transition(WorkflowState.SUBMITTING)
        job_id = await self.api_client.create_web_download(
            credential, request.link, request.display_name
        )
        log.debug(f"TorBox accepted submission as web download {job_id}")

        self._transition(WorkflowState.QUEUED)
        self._emit("queued", QUEUED_MESSAGE)
        return job_id

    async def _poll(self, credential: str, job_id: JobId) -> Job:
        for attempt in range(1, self.max_attempts + 1):
            self._raise_if_cancelled()

            jobs = await self.api_client.list_web_downloads(credential)
            job = next((j for j in jobs if j.matches(job_id)), None)
            if job is None:
                self._transition(WorkflowState.NOT_FOUND)
                raise JobVanishedError(f"Download {job_id} not found in TorBox")

            if self._state is not WorkflowState.POLLING:
                self._transition(WorkflowState.POLLING)

            self.stats.record_attempt(job.status, job.progress)
            self._emit(job.status, f"Status: {job.status} ({job.percent}%)")

            outcome = classify_status(job.status, job.progress)
            if outcome is JobOutcome.SUCCESS:
                self._transition(WorkflowState.COMPLETED)
                return job
            if outcome is JobOutcome.FAILURE:
                self._transition(WorkflowState.FAILED)
                raise RemoteJobFailedError(
                    f"Download failed: {job.error or 'Unknown error'}"
                )

            log.debug(
                f"Attempt {attempt}/{self.max_attempts}: {job.status} ({job.percent}%)"
            )
            if attempt < self.max_attempts:
                await self._wait()

        self._transition(WorkflowState.TIMED_OUT)
        raise PollTimeoutError(
            f"Download timed out after {self.max_attempts} status checks. "
            "Check the TorBox dashboard."
        )
