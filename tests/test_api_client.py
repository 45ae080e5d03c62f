from __future__ import annotations

import asyncio

import aiohttp
import pytest

from torbox_cli.api.client import TorboxAPIClient
from torbox_cli.exceptions import (
    LinkResolutionFailedError,
    MissingJobIdError,
    StatusQueryFailedError,
    SubmissionRejectedError,
)

BASE = "https://api.torbox.app/v1/api"


def _client(session) -> TorboxAPIClient:
    return TorboxAPIClient(BASE + "/", session=session)


def _form_fields(form: aiohttp.FormData) -> dict[str, str]:
    return {field[0]["name"]: field[2] for field in form._fields}


@pytest.mark.asyncio
async def test_create_posts_multipart_form_with_bearer_auth(
    make_session, make_response
) -> None:
    session = make_session(
        [make_response(payload={"success": True, "data": {"webdownload_id": 321}})]
    )

    job_id = await _client(session).create_web_download(
        "key-1", "https://example.com/a.zip", "A file"
    )

    assert job_id == 321
    request = session.requests[0]
    assert request["method"] == "POST"
    assert request["url"] == f"{BASE}/webdl/createwebdownload"
    assert request["headers"] == {"Authorization": "Bearer key-1"}
    assert _form_fields(request["data"]) == {
        "link": "https://example.com/a.zip",
        "name": "A file",
    }


@pytest.mark.asyncio
async def test_create_omits_empty_name(make_session, make_response) -> None:
    session = make_session([make_response(payload={"data": {"id": "w-1"}})])

    job_id = await _client(session).create_web_download("key", "https://example.com/a")

    assert job_id == "w-1"
    assert _form_fields(session.requests[0]["data"]) == {"link": "https://example.com/a"}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("payload", "message"),
    [
        ({"detail": "quota exceeded"}, "quota exceeded"),
        ({"error": "BAD_TOKEN"}, "BAD_TOKEN"),
        ({}, "Failed to submit to TorBox"),
        (ValueError("not json"), "Failed to submit to TorBox"),
    ],
)
async def test_create_rejection_detail(make_session, make_response, payload, message) -> None:
    session = make_session([make_response(status=403, payload=payload)])

    with pytest.raises(SubmissionRejectedError) as excinfo:
        await _client(session).create_web_download("key", "https://example.com/a")

    assert str(excinfo.value) == message


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", [{"data": {}}, {"data": None}, {"success": True}])
async def test_create_without_job_id(make_session, make_response, payload) -> None:
    session = make_session([make_response(payload=payload)])

    with pytest.raises(MissingJobIdError):
        await _client(session).create_web_download("key", "https://example.com/a")


@pytest.mark.asyncio
async def test_create_transport_error_is_a_rejection(make_session) -> None:
    session = make_session([aiohttp.ClientConnectionError("connection refused")])

    with pytest.raises(SubmissionRejectedError, match="connection refused"):
        await _client(session).create_web_download("key", "https://example.com/a")


@pytest.mark.asyncio
async def test_list_bypasses_cache_and_parses_jobs(make_session, make_response) -> None:
    session = make_session(
        [
            make_response(
                payload={
                    "data": [
                        {"id": 1, "download_state": "downloading", "progress": 0.5},
                        {"id": 2, "status": "completed", "files": [{"id": 9}]},
                        {"name": "no id"},
                        "garbage",
                    ]
                }
            )
        ]
    )

    jobs = await _client(session).list_web_downloads("key-2")

    request = session.requests[0]
    assert request["method"] == "GET"
    assert request["url"] == f"{BASE}/webdl/mylist"
    assert request["params"] == {"bypass_cache": "true"}
    assert request["headers"] == {"Authorization": "Bearer key-2"}
    assert [(j.job_id, j.status, j.progress) for j in jobs] == [
        (1, "downloading", 0.5),
        (2, "completed", 0.0),
    ]
    assert jobs[1].resolved_file_id == 9


@pytest.mark.asyncio
async def test_list_accepts_single_object_and_empty_data(make_session, make_response) -> None:
    session = make_session(
        [
            make_response(payload={"data": {"id": 1, "status": "cached"}}),
            make_response(payload={"data": None}),
        ]
    )
    client = _client(session)

    assert [j.job_id for j in await client.list_web_downloads("key")] == [1]
    assert await client.list_web_downloads("key") == []


@pytest.mark.asyncio
async def test_list_non_success(make_session, make_response) -> None:
    session = make_session([make_response(status=500, payload={})])

    with pytest.raises(StatusQueryFailedError, match="Failed to check download status"):
        await _client(session).list_web_downloads("key")


@pytest.mark.asyncio
async def test_list_transport_error(make_session) -> None:
    session = make_session([aiohttp.ServerDisconnectedError()])

    with pytest.raises(StatusQueryFailedError):
        await _client(session).list_web_downloads("key")


@pytest.mark.asyncio
async def test_request_link_uses_query_token_without_auth_header(
    make_session, make_response
) -> None:
    session = make_session(
        [make_response(payload={"data": "https://cdn.torbox.app/dl/x"})]
    )

    url = await _client(session).request_download_link("key-3", 42, 7)

    assert url == "https://cdn.torbox.app/dl/x"
    request = session.requests[0]
    assert request["url"] == f"{BASE}/webdl/requestdl"
    assert request["params"] == {
        "token": "key-3",
        "web_id": "42",
        "file_id": "7",
        "zip_link": "false",
    }
    assert "headers" not in request


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [{"url": "https://cdn/u"}, {"download_url": "https://cdn/u"}, {"data": None, "url": "https://cdn/u"}],
)
async def test_request_link_alternate_fields(make_session, make_response, payload) -> None:
    session = make_session([make_response(payload=payload)])

    assert await _client(session).request_download_link("key", 1, 0) == "https://cdn/u"


@pytest.mark.asyncio
async def test_request_link_without_url(make_session, make_response) -> None:
    session = make_session([make_response(payload={"success": True, "data": {}})])

    with pytest.raises(LinkResolutionFailedError, match="No download URL"):
        await _client(session).request_download_link("key", 1, 0)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("payload", "message"),
    [
        ({"detail": "File not found"}, "File not found"),
        ({"error": "DOWNLOAD_NOT_CACHED"}, "DOWNLOAD_NOT_CACHED"),
        ({}, "Failed to get download link"),
    ],
)
async def test_request_link_error_detail(make_session, make_response, payload, message) -> None:
    session = make_session([make_response(status=400, payload=payload)])

    with pytest.raises(LinkResolutionFailedError) as excinfo:
        await _client(session).request_download_link("key", 1, 0)

    assert str(excinfo.value) == message


@pytest.mark.asyncio
async def test_does_not_close_injected_session(make_session) -> None:
    session = make_session([])

    async with TorboxAPIClient(session=session):
        pass

    assert session.closed is False


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("call", "error"),
    [
        (lambda c: c.create_web_download("key", "https://example.com/a"), SubmissionRejectedError),
        (lambda c: c.list_web_downloads("key"), StatusQueryFailedError),
        (lambda c: c.request_download_link("key", 1, 0), LinkResolutionFailedError),
    ],
)
async def test_request_timeout_maps_to_step_error(make_session, call, error) -> None:
    session = make_session([asyncio.TimeoutError()])

    with pytest.raises(error) as excinfo:
        await call(_client(session))

    assert isinstance(excinfo.value.__cause__, asyncio.TimeoutError)


@pytest.mark.asyncio
async def test_body_read_timeout_maps_to_step_error(make_session, make_response) -> None:
    session = make_session([make_response(payload=asyncio.TimeoutError())])

    with pytest.raises(StatusQueryFailedError):
        await _client(session).list_web_downloads("key")
