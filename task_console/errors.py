"""Exceptions raised by the task console."""

from __future__ import annotations

from typing import Any, Iterable


class TaskConsoleError(Exception):
    """Base class for task console errors."""


class ValidationError(TaskConsoleError):
    """A draft is missing one or more required fields."""

    def __init__(self, missing_fields: Iterable[str]) -> None:
        self.missing_fields = tuple(missing_fields)
        super().__init__("Please fill all fields")


class TransportError(TaskConsoleError):
    """The remote task service could not be reached or rejected a request.

    ``payload`` holds the error body returned by the server, either a string or
    the decoded JSON structure, and is ``None`` when no body was received.
    """

    def __init__(
        self,
        message: str,
        *,
        payload: Any = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.payload = payload
        self.status_code = status_code


__all__ = ["TaskConsoleError", "ValidationError", "TransportError"]
