import sys
import json
from pathlib import Path

import httpx
import pytest

# Ensure package root is on sys.path
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from task_console.client import TaskStoreClient  # noqa: E402
from task_console.console import TaskConsole, set_default_console  # noqa: E402

BASE_URL = "http://tasks.test/tasks"


class FakeTaskService:
    """In-memory stand-in for the remote task service.

    Every request is recorded as ``(method, path)`` in ``calls``. Setting
    ``fail`` to a ``(status_code, body)`` pair makes the next matching
    operation return that error.
    """

    def __init__(self, tasks=None):
        self.tasks = {t["id"]: dict(t) for t in (tasks or [])}
        self.calls: list[tuple[str, str]] = []
        self.fail: dict[str, tuple[int, object]] = {}

    def _error(self, op):
        if op not in self.fail:
            return None
        status, body = self.fail.pop(op)
        if isinstance(body, str):
            return httpx.Response(status, text=body)
        return httpx.Response(status, json=body)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        self.calls.append((request.method, path))
        if request.method == "GET" and path == "/tasks":
            return self._error("list") or httpx.Response(200, json=list(self.tasks.values()))
        if request.method == "GET" and path == "/tasks/search":
            term = request.url.params.get("name", "")
            found = [t for t in self.tasks.values() if term in t["name"]]
            return self._error("search") or httpx.Response(200, json=found)
        if request.method == "POST" and path == "/tasks":
            error = self._error("create")
            if error:
                return error
            body = json.loads(request.content)
            body.setdefault("taskExecutions", [])
            self.tasks[body["id"]] = body
            return httpx.Response(200, json=body)
        if request.method == "PUT" and path == "/tasks/execute":
            error = self._error("execute")
            if error:
                return error
            task_id = json.loads(request.content)["id"]
            if task_id not in self.tasks:
                return httpx.Response(404, text="Task not found")
            self.tasks[task_id]["taskExecutions"].append(
                {
                    "startTime": "2024-01-01T00:00:00",
                    "endTime": "2024-01-01T00:00:01",
                    "output": f"ran {self.tasks[task_id]['command']}",
                }
            )
            return httpx.Response(200, json={"id": task_id, "status": "started"})
        task_id = path.rsplit("/", 1)[-1]
        if request.method == "GET":
            if task_id not in self.tasks:
                return httpx.Response(404, text="Task not found")
            return httpx.Response(200, json=self.tasks[task_id])
        if request.method == "DELETE":
            error = self._error("remove")
            if error:
                return error
            if self.tasks.pop(task_id, None) is None:
                return httpx.Response(404, text="Task not found")
            return httpx.Response(200, text="Task deleted")
        return httpx.Response(405)

    def ops(self):
        return [method for method, _ in self.calls]


def make_task(task_id, name, owner="alice", command="echo hi", executions=None):
    return {
        "id": task_id,
        "name": name,
        "owner": owner,
        "command": command,
        "taskExecutions": executions or [],
    }


@pytest.fixture
def service():
    return FakeTaskService(
        [make_task("1", "build-x"), make_task("2", "deploy-y", owner="bob")]
    )


@pytest.fixture
def store_client(service):
    http = httpx.AsyncClient(transport=httpx.MockTransport(service))
    return TaskStoreClient(base_url=BASE_URL, client=http)


@pytest.fixture
def console(store_client):
    return TaskConsole(store_client, status_ttl=60)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in (
        "TASK_CONSOLE_CONFIG",
        "TASK_CONSOLE_API_URL",
        "TASK_CONSOLE_TIMEOUT",
        "TASK_CONSOLE_RETRIES",
        "TASK_CONSOLE_STATUS_TTL",
        "TASK_CONSOLE_LOG_LEVEL",
    ):
        monkeypatch.delenv(var, raising=False)
    yield
    set_default_console(None)
