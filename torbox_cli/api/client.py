"""
Async client for the three TorBox web download endpoints used by the
submit/poll/resolve workflow.
"""

import asyncio
import logging
import time
from typing import Any, Dict, List, Optional

import aiohttp

from torbox_cli.exceptions import (
    LinkResolutionFailedError,
    MissingJobIdError,
    StatusQueryFailedError,
    SubmissionRejectedError,
)
from torbox_cli.models.config import DEFAULT_API_BASE
from torbox_cli.models.job import Job, JobId

log = logging.getLogger(__name__)


def _is_success(status: int) -> bool:
    return 200 <= status < 300


def _error_detail(payload: Dict[str, Any], fallback: str) -> str:
    """Picks the human-readable error text TorBox attached, if any."""
    return payload.get("detail") or payload.get("error") or fallback


class TorboxAPIClient:
    """
    Stateless async wrapper around the TorBox web download API.

    Every method is a single request/response exchange, takes the API key
    explicitly and may be called again safely. The only thing the client
    holds on to is its aiohttp session.
    """

    CREATE_ENDPOINT = "webdl/createwebdownload"
    LIST_ENDPOINT = "webdl/mylist"
    REQUEST_DL_ENDPOINT = "webdl/requestdl"

    def __init__(
        self,
        api_base: str = DEFAULT_API_BASE,
        timeout: float = 60.0,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        """
        Initializes the API client.

        Args:
            api_base: Base URL of the TorBox API, without a trailing slash.
            timeout: Total timeout in seconds for a single request.
            session: An existing session to use instead of creating one. The
                client does not close sessions it did not create.
        """
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout
        self._session = session
        self._owns_session = session is None

    async def _initialize_session(self) -> aiohttp.ClientSession:
        """Ensures an active aiohttp session is available."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                headers={"User-Agent": "torbox-cli"},
                timeout=aiohttp.ClientTimeout(total=self.timeout, connect=15),
            )
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        """Gracefully closes the aiohttp session."""
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self) -> "TorboxAPIClient":
        await self._initialize_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def _url(self, endpoint: str) -> str:
        return f"{self.api_base}/{endpoint}"

    @staticmethod
    def _auth_headers(credential: str) -> Dict[str, str]:
        return {"Authorization": f"Bearer {credential}"}

    @staticmethod
    async def _read_json(response: aiohttp.ClientResponse) -> Dict[str, Any]:
        """Reads a JSON envelope, treating unparsable bodies as empty."""
        try:
            payload = await response.json(content_type=None)
        except (aiohttp.ContentTypeError, ValueError):
            log.debug(f"Non-JSON response body (HTTP {response.status})")
            return {}
        return payload if isinstance(payload, dict) else {}

    async def create_web_download(
        self, credential: str, link: str, name: Optional[str] = None
    ) -> JobId:
        """
        Submits a link to TorBox and returns the new web download ID.

        Raises:
            SubmissionRejectedError: TorBox answered with a non-success status
                or the request could not be sent.
            MissingJobIdError: The response carried no web download ID.
        """
        session = await self._initialize_session()

        # An explicit content type forces multipart/form-data encoding.
        form = aiohttp.FormData()
        form.add_field("link", link, content_type="text/plain")
        if name:
            form.add_field("name", name, content_type="text/plain")

        start_time = time.monotonic()
        try:
            async with session.post(
                self._url(self.CREATE_ENDPOINT),
                data=form,
                headers=self._auth_headers(credential),
            ) as r:
                status = r.status
                payload = await self._read_json(r)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise SubmissionRejectedError(f"Failed to submit to TorBox: {e}") from e

        log.debug(
            f"POST {self.CREATE_ENDPOINT} -> {status} "
            f"in {(time.monotonic() - start_time) * 1000:.0f}ms"
        )

        if not _is_success(status):
            raise SubmissionRejectedError(
                _error_detail(payload, "Failed to submit to TorBox")
            )

        data = payload.get("data")
        job_id = None
        if isinstance(data, dict):
            job_id = data.get("webdownload_id") or data.get("id")

        if not job_id:
            raise MissingJobIdError("No web download ID returned from TorBox")
        return job_id

    async def list_web_downloads(self, credential: str) -> List[Job]:
        """
        Fetches a fresh (cache-bypassing) listing of the account's web downloads.

        Raises:
            StatusQueryFailedError: The listing could not be retrieved.
        """
        session = await self._initialize_session()

        try:
            async with session.get(
                self._url(self.LIST_ENDPOINT),
                params={"bypass_cache": "true"},
                headers=self._auth_headers(credential),
            ) as r:
                status = r.status
                payload = await self._read_json(r)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise StatusQueryFailedError(
                f"Failed to check download status: {e}"
            ) from e

        if not _is_success(status):
            raise StatusQueryFailedError(
                _error_detail(payload, f"Failed to check download status (HTTP {status})")
            )

        data = payload.get("data") or []
        if isinstance(data, dict):
            data = [data]

        jobs = []
        for entry in data:
            if not isinstance(entry, dict) or entry.get("id") is None:
                log.debug(f"Skipping malformed listing entry: {entry!r}")
                continue
            jobs.append(Job.from_entry(entry))
        return jobs

    async def request_download_link(
        self, credential: str, job_id: JobId, file_id: JobId
    ) -> str:
        """
        Asks TorBox for a direct download URL for one file of a finished job.

        The API key travels as the `token` query parameter on this endpoint;
        no Authorization header is sent.

        Raises:
            LinkResolutionFailedError: Non-success response, transport error,
                or no URL in the payload.
        """
        session = await self._initialize_session()

        params = {
            "token": credential,
            "web_id": str(job_id),
            "file_id": str(file_id),
            "zip_link": "false",
        }

        try:
            async with session.get(
                self._url(self.REQUEST_DL_ENDPOINT), params=params
            ) as r:
                status = r.status
                payload = await self._read_json(r)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise LinkResolutionFailedError(
                f"Failed to get download link: {e}"
            ) from e

        if not _is_success(status):
            raise LinkResolutionFailedError(
                _error_detail(payload, "Failed to get download link")
            )

        url = payload.get("data") or payload.get("url") or payload.get("download_url")
        if not isinstance(url, str) or not url:
            raise LinkResolutionFailedError("No download URL returned from TorBox")
        return url
