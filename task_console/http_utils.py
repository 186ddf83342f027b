import asyncio
import json
from typing import Any

import httpx

from .errors import TransportError


def error_payload(response: httpx.Response) -> Any:
    """Return the error body of ``response`` as sent by the server.

    JSON bodies are decoded, anything else is returned as text. An empty body
    yields ``None``.
    """
    if not response.content:
        return None
    try:
        return response.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return response.text or None


async def request_async(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    *,
    timeout: float | None = None,
    retries: int = 1,
    backoff_factor: float = 0.5,
    **kwargs: Any,
) -> httpx.Response:
    """Perform an HTTP request and translate failures into ``TransportError``.

    Only connection-level failures are attempted again, up to ``retries``
    attempts in total. A response with an error status is never retried.
    """
    if timeout is not None:
        kwargs["timeout"] = timeout
    for attempt in range(1, retries + 1):
        try:
            response = await client.request(method, url, **kwargs)
        except httpx.TransportError as exc:
            if attempt == retries:
                raise TransportError(f"{method} {url} failed: {exc}") from exc
            await asyncio.sleep(backoff_factor * 2 ** (attempt - 1))
            continue
        if response.is_error:
            raise TransportError(
                f"{method} {url} returned {response.status_code}",
                payload=error_payload(response),
                status_code=response.status_code,
            )
        return response
    raise RuntimeError("unreachable")
