"""
Pydantic models for the web download workflow: the submission input, the
job snapshots parsed from TorBox listings, progress events and the final
resolved download.
"""

from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, field_validator

JobId = Union[int, str]

# Sentinel file reference used when a finished job exposes no file ID at all.
DEFAULT_FILE_ID: JobId = 0


class SubmissionRequest(BaseModel):
    """A link to submit, with an optional display name for TorBox."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    link: str
    display_name: Optional[str] = None

    @field_validator("link")
    @classmethod
    def validate_link(cls, v: str) -> str:
        if not v:
            raise ValueError("Link cannot be empty.")
        return v

    @field_validator("display_name")
    @classmethod
    def blank_name_to_none(cls, v: Optional[str]) -> Optional[str]:
        return v or None


class Job(BaseModel):
    """
    A snapshot of one web download as reported by the TorBox listing.

    TorBox is not consistent about field names, so `from_entry` accepts
    either `download_state` or `status` for the status token, and either the
    first entry of `files` or a job-level `file_id` for the file reference.
    """

    model_config = ConfigDict(frozen=True)

    job_id: JobId
    status: str = "unknown"
    progress: float = 0.0
    file_id: Optional[JobId] = None
    name: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def from_entry(cls, entry: dict[str, Any]) -> "Job":
        """Builds a Job from a raw `data[]` entry of the listing endpoint."""
        status = entry.get("download_state") or entry.get("status") or "unknown"

        try:
            progress = float(entry.get("progress") or 0)
        except (TypeError, ValueError):
            progress = 0.0

        file_id = None
        files = entry.get("files") or []
        if files and isinstance(files[0], dict):
            file_id = files[0].get("id")
        file_id = file_id or entry.get("file_id")

        return cls(
            job_id=entry.get("id"),
            status=str(status),
            progress=progress,
            file_id=file_id,
            name=entry.get("name"),
            error=entry.get("error") or None,
        )

    def matches(self, job_id: JobId) -> bool:
        """IDs come back as ints or strings depending on the endpoint."""
        return str(self.job_id) == str(job_id)

    @property
    def percent(self) -> int:
        """Progress as a whole percentage, rounding halves up."""
        return int(self.progress * 100 + 0.5)

    @property
    def resolved_file_id(self) -> JobId:
        return self.file_id if self.file_id is not None else DEFAULT_FILE_ID


class ProgressEvent(BaseModel):
    """A single status notification for the progress sink."""

    model_config = ConfigDict(frozen=True)

    status: str
    message: str


class ResolvedDownload(BaseModel):
    """The successful outcome of a workflow: a direct download URL."""

    model_config = ConfigDict(frozen=True)

    url: str
    job_id: Optional[JobId] = None
    file_id: Optional[JobId] = None
    attempts: int = 0
