"""Shared fakes for the TorBox workflow tests."""

from __future__ import annotations

import asyncio
from collections import deque
from typing import Any, Iterable

import pytest

from torbox_cli.models.job import Job


class FakeAPIClient:
    """Stands in for TorboxAPIClient and records every call in order."""

    def __init__(
        self,
        *,
        job_id: Any = 42,
        listings: Iterable[Any] = (),
        url: Any = "https://cdn.torbox.app/dl/file.zip",
    ) -> None:
        self.job_id = job_id
        self._listings = deque(listings)
        self._last_listing: Any = []
        self.url = url
        self.calls: list[tuple[Any, ...]] = []

    async def __aenter__(self) -> "FakeAPIClient":
        return self

    async def __aexit__(self, _exc_type, _exc, _tb) -> None:
        return None

    def count(self, name: str) -> int:
        return sum(1 for call in self.calls if call[0] == name)

    async def create_web_download(self, credential, link, name=None):
        self.calls.append(("create", credential, link, name))
        if isinstance(self.job_id, Exception):
            raise self.job_id
        return self.job_id

    async def list_web_downloads(self, credential):
        self.calls.append(("list", credential))
        # The last configured listing repeats once the queue runs dry.
        listing = self._listings.popleft() if self._listings else self._last_listing
        self._last_listing = listing
        if isinstance(listing, Exception):
            raise listing
        return [Job.from_entry(entry) for entry in listing]

    async def request_download_link(self, credential, job_id, file_id):
        self.calls.append(("resolve", credential, job_id, file_id))
        if isinstance(self.url, Exception):
            raise self.url
        return self.url


class FakeSleep:
    """Records requested delays without waiting."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)
        await asyncio.sleep(0)


class FakeResponse:
    def __init__(self, *, status: int = 200, payload: Any = None) -> None:
        self.status = status
        self._payload = payload

    async def json(self, content_type: str | None = "application/json") -> Any:
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload

    async def __aenter__(self) -> "FakeResponse":
        return self

    async def __aexit__(self, _exc_type, _exc, _tb) -> None:
        return None


class FakeSession:
    """Replays canned responses for post/get and records the requests."""

    def __init__(self, outcomes: Iterable[Any]) -> None:
        self._outcomes = deque(outcomes)
        self.requests: list[dict[str, Any]] = []
        self.closed = False

    def _next(self, method: str, url: str, **kwargs: Any) -> Any:
        self.requests.append({"method": method, "url": url, **kwargs})
        if not self._outcomes:
            raise RuntimeError("No more responses configured")
        result = self._outcomes.popleft()
        if isinstance(result, Exception):
            raise result
        return result

    def post(self, url: str, **kwargs: Any) -> Any:
        return self._next("POST", url, **kwargs)

    def get(self, url: str, **kwargs: Any) -> Any:
        return self._next("GET", url, **kwargs)

    async def close(self) -> None:
        self.closed = True


def job_entry(job_id: Any = 42, **fields: Any) -> dict[str, Any]:
    return {"id": job_id, **fields}


@pytest.fixture
def make_api_client():
    return FakeAPIClient


@pytest.fixture
def fake_sleep() -> FakeSleep:
    return FakeSleep()


@pytest.fixture
def make_session():
    return FakeSession


@pytest.fixture
def make_response():
    return FakeResponse


@pytest.fixture
def entry():
    return job_entry
