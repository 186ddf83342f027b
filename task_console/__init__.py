"""Task console package root.

Browser and terminal console for a remote task store: create, search, execute
and delete shell-command tasks and inspect their execution history.
"""

from .client import TaskStoreClient
from .config import load_config
from .console import (
    Status,
    StatusKind,
    TaskConsole,
    get_default_console,
    set_default_console,
)
from .errors import TaskConsoleError, TransportError, ValidationError
from .models import ExecutionAck, Task, TaskExecution


__all__ = [
    "ExecutionAck",
    "Status",
    "StatusKind",
    "Task",
    "TaskConsole",
    "TaskConsoleError",
    "TaskExecution",
    "TaskStoreClient",
    "TransportError",
    "ValidationError",
    "get_default_console",
    "load_config",
    "set_default_console",
]
