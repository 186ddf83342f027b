"""Task console state machine.

The console owns the locally displayed task list, the draft used by the
creation form, the search term and a transient status message. Every mutation
goes through :class:`~task_console.client.TaskStoreClient` and is followed by
a full re-fetch of the task list; local state is never patched speculatively.
"""

from __future__ import annotations

import asyncio
import inspect
import json
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Iterator, List, Set, Tuple, Union

from .client import TaskStoreClient
from .errors import TransportError, ValidationError
from .models import REQUIRED_FIELDS, Task

logger = logging.getLogger(__name__)

Confirm = Callable[[str], Union[bool, Awaitable[bool]]]


class StatusKind(str, Enum):
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class Status:
    text: str
    kind: StatusKind

    @property
    def is_error(self) -> bool:
        return self.kind is StatusKind.ERROR


def render_error(exc: TransportError, default: str) -> str:
    """Return the text shown to the user for ``exc``.

    String payloads are shown verbatim and structured payloads are
    pretty-printed. Without a payload ``default`` is used.
    """
    payload = exc.payload
    if payload is None or payload == "":
        return default
    if isinstance(payload, str):
        return payload
    return json.dumps(payload, indent=2)


def validate_draft(draft: Task) -> None:
    """Raise :class:`ValidationError` unless every required field is set."""
    missing = draft.missing_fields()
    if missing:
        raise ValidationError(missing)


class TaskConsole:
    """Track the remote task store and mediate user actions against it."""

    def __init__(
        self,
        client: TaskStoreClient | None = None,
        *,
        status_ttl: float | None = None,
    ) -> None:
        if status_ttl is None:
            from .config import load_config

            status_ttl = load_config()["status_ttl"]
        self.client = client or TaskStoreClient()
        self.status_ttl = status_ttl
        self.tasks: List[Task] = []
        self.draft = Task()
        self.search_term = ""
        self.active_search: str | None = None
        self.status: Status | None = None
        self._clear_handle: asyncio.TimerHandle | None = None
        self._in_flight: Set[Tuple[str, str]] = set()
        self._refreshing = 0

    # -- status -----------------------------------------------------------

    def _set_status(self, text: str, kind: StatusKind) -> None:
        self.status = Status(text, kind)
        if self._clear_handle is not None:
            self._clear_handle.cancel()
            self._clear_handle = None
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:  # no loop: the status stays until superseded
            return
        self._clear_handle = loop.call_later(self.status_ttl, self._clear_status)

    def _clear_status(self) -> None:
        self.status = None
        self._clear_handle = None

    def _success(self, text: str) -> None:
        logger.info(text)
        self._set_status(text, StatusKind.SUCCESS)

    def _failure(self, exc: TransportError, default: str) -> None:
        logger.warning("%s: %s", default, exc)
        self._set_status(render_error(exc, default), StatusKind.ERROR)

    # -- form state -------------------------------------------------------

    def update_draft(self, **fields: str) -> Task:
        """Update draft fields as the creation form is edited."""
        unknown = set(fields) - set(REQUIRED_FIELDS)
        if unknown:
            raise ValueError(f"Unknown draft fields: {', '.join(sorted(unknown))}")
        self.draft = self.draft.model_copy(update=fields)
        return self.draft

    def set_search_term(self, term: str) -> None:
        self.search_term = term

    def find(self, task_id: str) -> Task | None:
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None

    @contextmanager
    def _guard(self, action: str, resource: str) -> Iterator[bool]:
        key = (action, resource)
        if key in self._in_flight:
            logger.debug("%s already in flight for %r", action, resource)
            self._set_status(f"{action.capitalize()} already in progress", StatusKind.ERROR)
            yield False
            return
        self._in_flight.add(key)
        try:
            yield True
        finally:
            self._in_flight.discard(key)

    @property
    def loading(self) -> bool:
        """True while any request to the task service is outstanding."""
        return bool(self._in_flight) or self._refreshing > 0

    # -- actions ----------------------------------------------------------

    async def start(self) -> bool:
        """Load the initial task list."""
        return await self.refresh()

    async def refresh(self) -> bool:
        """Replace the task list with the authoritative remote list."""
        self._refreshing += 1
        try:
            tasks = await self.client.list()
        except TransportError as exc:
            self._failure(exc, "Error fetching tasks")
            return False
        finally:
            self._refreshing -= 1
        self.tasks = tasks
        self.active_search = None
        return True

    async def create(self) -> bool:
        """Submit the draft and reload the task list."""
        draft = self.draft
        try:
            validate_draft(draft)
        except ValidationError as exc:
            self._set_status(str(exc), StatusKind.ERROR)
            return False
        with self._guard("create", draft.id) as acquired:
            if not acquired:
                return False
            try:
                created = await self.client.create_or_update(draft)
            except TransportError as exc:
                self._failure(exc, "Error creating task")
                return False
            self._success(f'Task "{created.name}" created successfully')
            self.draft = Task()
        await self.refresh()
        return True

    async def execute(self, task_id: str) -> bool:
        """Start a run of ``task_id`` and reload the task list."""
        if self.find(task_id) is None:
            self._set_status(f"Unknown task: {task_id}", StatusKind.ERROR)
            return False
        with self._guard("execute", task_id) as acquired:
            if not acquired:
                return False
            try:
                ack = await self.client.execute(task_id)
            except TransportError as exc:
                self._failure(exc, "Error executing task")
                return False
            self._success(f"Task executed: {ack.id}")
        await self.refresh()
        return True

    async def delete(self, task_id: str, *, confirm: Confirm) -> bool:
        """Delete ``task_id`` once ``confirm`` agrees, then reload the list."""
        answer: Any = confirm(task_id)
        if inspect.isawaitable(answer):
            answer = await answer
        if not answer:
            logger.info("Deletion of %s cancelled", task_id)
            return False
        with self._guard("delete", task_id) as acquired:
            if not acquired:
                return False
            try:
                await self.client.remove(task_id)
            except TransportError as exc:
                self._failure(exc, "Error deleting task")
                return False
            self._success("Task deleted successfully")
        await self.refresh()
        return True

    async def search(self) -> bool:
        """Filter the task list by the current search term."""
        term = self.search_term
        if not term:
            return await self.refresh()
        with self._guard("search", "") as acquired:
            if not acquired:
                return False
            try:
                tasks = await self.client.search(term)
            except TransportError as exc:
                self._failure(exc, "Error searching tasks")
                return False
        self.tasks = tasks
        self.active_search = term
        self._success(f"Found {len(tasks)} task(s)")
        return True

    async def reset(self) -> bool:
        """Clear the search term and reload the full task list."""
        self.search_term = ""
        return await self.refresh()

    async def close(self) -> None:
        if self._clear_handle is not None:
            self._clear_handle.cancel()
            self._clear_handle = None
        await self.client.aclose()


_default_console: TaskConsole | None = None


def get_default_console() -> TaskConsole:
    """Return the process-wide console, creating it on first use."""
    global _default_console
    if _default_console is None:
        _default_console = TaskConsole()
    return _default_console


def set_default_console(console: TaskConsole | None) -> None:
    global _default_console
    _default_console = console


__all__ = [
    "Status",
    "StatusKind",
    "TaskConsole",
    "get_default_console",
    "render_error",
    "set_default_console",
    "validate_draft",
]
