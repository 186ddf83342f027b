"""Prometheus metrics for calls made to the remote task service.

Every :class:`~task_console.client.TaskStoreClient` operation is labelled by
its operation name (``list``, ``search``, ``execute``, ...). A call that raises
``TransportError`` counts as a failure.
"""

import functools
import time

from prometheus_client import Counter, Histogram, start_http_server

__all__ = [
    "REQUEST_LATENCY",
    "REQUEST_SUCCESS",
    "REQUEST_FAILURE",
    "start_metrics_server",
    "track_request",
]

REQUEST_LATENCY = Histogram(
    "task_store_request_seconds",
    "Round-trip time of task service calls",
    ["operation"],
)

REQUEST_SUCCESS = Counter(
    "task_store_request_success_total",
    "Task service calls answered with a usable response",
    ["operation"],
)

REQUEST_FAILURE = Counter(
    "task_store_request_failure_total",
    "Task service calls that were unreachable, rejected or malformed",
    ["operation"],
)


def start_metrics_server(port: int = 8000) -> None:
    """Serve the task service call metrics on ``port``."""
    start_http_server(port)


def track_request(func=None, *, name: str | None = None):
    """Time an async task service call and count its outcome.

    ``@track_request`` labels by the coroutine's name;
    ``@track_request(name="list")`` overrides the label, which the client uses
    because its method names shadow builtins.
    """

    def decorator(func):
        operation = name or func.__name__

        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            started = time.monotonic()
            try:
                result = await func(*args, **kwargs)
            except Exception:
                REQUEST_FAILURE.labels(operation).inc()
                raise
            else:
                REQUEST_SUCCESS.labels(operation).inc()
                return result
            finally:
                REQUEST_LATENCY.labels(operation).observe(time.monotonic() - started)

        return wrapper

    return decorator if func is None else decorator(func)
