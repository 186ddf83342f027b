import asyncio

import httpx
import pytest

from task_console.errors import TransportError
from task_console.http_utils import error_payload, request_async


def test_error_payload_json():
    resp = httpx.Response(400, json={"error": "bad id"})
    assert error_payload(resp) == {"error": "bad id"}


def test_error_payload_text_and_empty():
    assert error_payload(httpx.Response(500, text="boom")) == "boom"
    assert error_payload(httpx.Response(500)) is None


@pytest.mark.asyncio
async def test_request_async_raises_with_payload():
    client = httpx.AsyncClient(
        transport=httpx.MockTransport(lambda r: httpx.Response(409, text="duplicate"))
    )
    with pytest.raises(TransportError) as info:
        await request_async(client, "POST", "http://x/tasks")
    assert info.value.payload == "duplicate"
    assert info.value.status_code == 409


@pytest.mark.asyncio
async def test_request_async_does_not_retry_http_errors():
    calls = 0

    def handler(request):
        nonlocal calls
        calls += 1
        return httpx.Response(500)

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    with pytest.raises(TransportError):
        await request_async(client, "GET", "http://x/tasks", retries=3, backoff_factor=0)
    assert calls == 1


@pytest.mark.asyncio
async def test_request_async_retries_connection_errors(monkeypatch):
    calls = 0

    def handler(request):
        nonlocal calls
        calls += 1
        if calls < 3:
            raise httpx.ConnectError("refused", request=request)
        return httpx.Response(200, json=[])

    sleeps: list[float] = []

    async def fake_sleep(s):
        sleeps.append(s)

    monkeypatch.setattr(asyncio, "sleep", fake_sleep)
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    resp = await request_async(client, "GET", "http://x/tasks", retries=3, backoff_factor=0.1)
    assert resp.json() == []
    assert calls == 3
    assert len(sleeps) == 2


@pytest.mark.asyncio
async def test_request_async_single_attempt_by_default():
    calls = 0

    def handler(request):
        nonlocal calls
        calls += 1
        raise httpx.ConnectError("refused", request=request)

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    with pytest.raises(TransportError) as info:
        await request_async(client, "GET", "http://x/tasks")
    assert calls == 1
    assert info.value.payload is None
