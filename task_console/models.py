"""Data models exchanged with the remote task service."""

from __future__ import annotations

from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field, field_validator

REQUIRED_FIELDS = ("id", "name", "owner", "command")


class TaskExecution(BaseModel):
    """One historical run of a task.

    The timestamps are stored exactly as the server sent them.
    """

    model_config = ConfigDict(populate_by_name=True)

    start_time: Any = Field(default=None, alias="startTime")
    end_time: Any = Field(default=None, alias="endTime")
    output: str = ""

    @field_validator("output", mode="before")
    @classmethod
    def _null_output(cls, value: Any) -> Any:
        return "" if value is None else value


class Task(BaseModel):
    """A named, owned shell command together with its execution history."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = ""
    name: str = ""
    owner: str = ""
    command: str = ""
    task_executions: List[TaskExecution] = Field(
        default_factory=list, alias="taskExecutions"
    )

    @field_validator("name", "owner", "command", mode="before")
    @classmethod
    def _null_text(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("task_executions", mode="before")
    @classmethod
    def _null_history(cls, value: Any) -> Any:
        return [] if value is None else value

    @property
    def last_execution(self) -> TaskExecution | None:
        return self.task_executions[-1] if self.task_executions else None

    def missing_fields(self) -> List[str]:
        """Return the required fields that are still empty."""
        return [field for field in REQUIRED_FIELDS if not getattr(self, field)]

    def to_payload(self) -> Dict[str, Any]:
        """Return the JSON body sent to the task service."""
        return self.model_dump(by_alias=True, mode="json")


class ExecutionAck(BaseModel):
    """Acknowledgement returned when a task execution is started."""

    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    id: str


__all__ = ["REQUIRED_FIELDS", "Task", "TaskExecution", "ExecutionAck"]
