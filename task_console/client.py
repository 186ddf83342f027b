"""Async client for the remote task store and executor service."""

from __future__ import annotations

import logging
from typing import Any, List
from urllib.parse import quote

import httpx
from pydantic import ValidationError as PydanticValidationError

from .errors import TransportError
from .http_utils import request_async
from .metrics import track_request
from .models import ExecutionAck, Task

logger = logging.getLogger(__name__)


def _item_path(task_id: str) -> str:
    return "/" + quote(task_id, safe="")


class TaskStoreClient:
    """List, create, delete, search and execute tasks over HTTP.

    ``base_url`` points at the task collection, e.g.
    ``http://localhost:30080/tasks``; every operation path is relative to it.
    The client keeps no state besides the underlying connection pool.
    """

    def __init__(
        self,
        base_url: str | None = None,
        *,
        timeout: float | None = None,
        retries: int | None = None,
        backoff_factor: float = 0.5,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        from .config import load_config

        cfg = load_config()
        self.base_url = (base_url or cfg["api_url"]).rstrip("/")
        if not self.base_url:
            raise ValueError("TaskStoreClient requires api_url")
        self.timeout = timeout if timeout is not None else cfg.get("timeout")
        self.retries = retries if retries is not None else cfg.get("retries", 1)
        self.backoff_factor = backoff_factor
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient()

    async def __aenter__(self) -> "TaskStoreClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _request(self, method: str, path: str = "", **kwargs: Any) -> httpx.Response:
        url = f"{self.base_url}{path}"
        logger.debug("%s %s", method, url)
        return await request_async(
            self._client,
            method,
            url,
            timeout=self.timeout,
            retries=self.retries,
            backoff_factor=self.backoff_factor,
            **kwargs,
        )

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise TransportError(
                f"Malformed response from {response.request.url}",
                status_code=response.status_code,
            ) from exc

    def _tasks(self, response: httpx.Response) -> List[Task]:
        data = self._decode(response)
        if not isinstance(data, list):
            raise TransportError("Expected a list of tasks")
        try:
            return [Task.model_validate(item) for item in data]
        except PydanticValidationError as exc:
            raise TransportError("Malformed task in response") from exc

    def _task(self, response: httpx.Response) -> Task:
        data = self._decode(response)
        try:
            return Task.model_validate(data)
        except PydanticValidationError as exc:
            raise TransportError("Malformed task in response") from exc

    @track_request(name="list")
    async def list(self) -> List[Task]:
        """Return every task known to the service."""
        return self._tasks(await self._request("GET"))

    @track_request(name="get")
    async def get(self, task_id: str) -> Task:
        """Return the task identified by ``task_id``."""
        return self._task(await self._request("GET", _item_path(task_id)))

    @track_request(name="create_or_update")
    async def create_or_update(self, task: Task) -> Task:
        """Store ``task``, replacing any task with the same id.

        Returns the server's canonical representation.
        """
        return self._task(await self._request("POST", json=task.to_payload()))

    @track_request(name="remove")
    async def remove(self, task_id: str) -> str:
        """Delete ``task_id`` and return the server's confirmation text."""
        response = await self._request("DELETE", _item_path(task_id))
        return response.text

    @track_request(name="search")
    async def search(self, name: str) -> List[Task]:
        """Return tasks whose name matches ``name`` by the server's rules."""
        return self._tasks(await self._request("GET", "/search", params={"name": name}))

    @track_request(name="execute")
    async def execute(self, task_id: str) -> ExecutionAck:
        """Start a run of ``task_id``.

        The acknowledgement does not carry the run's output; it shows up in the
        task's execution history on the next ``list`` or ``search``.
        """
        data = self._decode(await self._request("PUT", "/execute", json={"id": task_id}))
        try:
            return ExecutionAck.model_validate(data)
        except PydanticValidationError as exc:
            raise TransportError("Malformed execution acknowledgement") from exc


__all__ = ["TaskStoreClient"]
