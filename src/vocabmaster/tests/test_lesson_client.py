"""Tests for the lesson backend client."""
from typing import List

import httpx
import pytest

from vocabmaster.models.errors import TransportFailure
from vocabmaster.services.lesson_client import LessonClient

BASE_URL = "http://lessons.test"


def make_client(handler, requests: List[httpx.Request]) -> LessonClient:
    def record(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return handler(request)

    return LessonClient(base_url=BASE_URL, timeout=1, transport=httpx.MockTransport(record))


@pytest.mark.asyncio
async def test_fetch_lesson(lesson, payload_factory) -> None:
    """A lesson is fetched from the unit's lesson path."""
    requests: List[httpx.Request] = []
    client = make_client(lambda request: httpx.Response(200, json=payload_factory(lesson)), requests)

    async with client:
        fetched = await client.fetch_lesson("u1")

    assert fetched == lesson
    assert len(requests) == 1
    assert requests[0].method == "GET"
    assert requests[0].url == f"{BASE_URL}/api/units/u1/lesson"


@pytest.mark.asyncio
@pytest.mark.parametrize("response", [
    httpx.Response(404, json={"error": "not found"}),
    httpx.Response(500, text="boom"),
    httpx.Response(200, text="not json"),
    httpx.Response(200, json=None),
    httpx.Response(200, json={}),
    httpx.Response(200, json={"id": "u1", "title": "Animals", "words": []}),
    httpx.Response(200, json={"id": "u1", "title": "Animals", "words": [{"id": "w1"}]}),
])
async def test_fetch_lesson_failures_collapse_to_none(response: httpx.Response) -> None:
    """Missing, empty and broken lessons all look the same to the caller."""
    client = make_client(lambda request: response, [])

    async with client:
        assert await client.fetch_lesson("missing") is None


@pytest.mark.asyncio
async def test_fetch_lesson_transport_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout("timed out", request=request)

    client = make_client(handler, [])

    async with client:
        assert await client.fetch_lesson("u1") is None


@pytest.mark.asyncio
async def test_notify_completion() -> None:
    """Completion is a body-less POST to the unit's complete path."""
    requests: List[httpx.Request] = []
    client = make_client(lambda request: httpx.Response(204), requests)

    async with client:
        await client.notify_completion("u1")

    assert len(requests) == 1
    assert requests[0].method == "POST"
    assert requests[0].url == f"{BASE_URL}/api/units/u1/complete"
    assert requests[0].content == b""


@pytest.mark.asyncio
async def test_notify_completion_bad_status() -> None:
    client = make_client(lambda request: httpx.Response(503), [])

    async with client:
        with pytest.raises(TransportFailure) as exc_info:
            await client.notify_completion("u1")

    assert exc_info.value.unit_id == "u1"
    assert exc_info.value.reason == "status 503"


@pytest.mark.asyncio
async def test_notify_completion_transport_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = make_client(handler, [])

    async with client:
        with pytest.raises(TransportFailure):
            await client.notify_completion("u1")


@pytest.mark.asyncio
async def test_custom_paths() -> None:
    requests: List[httpx.Request] = []
    client = LessonClient(
        base_url=BASE_URL,
        lesson_path="/v2/lessons/{unit_id}",
        complete_path="/v2/lessons/{unit_id}/done",
        transport=httpx.MockTransport(lambda request: requests.append(request) or httpx.Response(200)),
    )

    async with client:
        await client.notify_completion("u9")

    assert requests[0].url.path == "/v2/lessons/u9/done"


@pytest.mark.asyncio
@pytest.mark.parametrize("unit_id,raw_path", [
    ("unit?1", b"/api/units/unit%3F1/lesson"),
    ("a#b", b"/api/units/a%23b/lesson"),
    ("u\t1", b"/api/units/u%091/lesson"),
])
async def test_fetch_lesson_encodes_unit_id(unit_id: str, raw_path: bytes, lesson, payload_factory) -> None:
    """Unit ids stay inside their path segment."""
    requests: List[httpx.Request] = []
    client = make_client(lambda request: httpx.Response(200, json=payload_factory(lesson)), requests)

    async with client:
        fetched = await client.fetch_lesson(unit_id)

    assert fetched == lesson
    assert requests[0].url.raw_path == raw_path


@pytest.mark.asyncio
async def test_notify_completion_encodes_unit_id() -> None:
    requests: List[httpx.Request] = []
    client = make_client(lambda request: httpx.Response(204), requests)

    async with client:
        await client.notify_completion("a#b")

    assert requests[0].url.raw_path == b"/api/units/a%23b/complete"
