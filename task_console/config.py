"""Configuration helpers for the task console."""

from __future__ import annotations

import os
from typing import Any, Dict

import yaml

DEFAULT_API_URL = "http://localhost:30080/tasks"
DEFAULT_STATUS_TTL = 4.0


def load_config(path: str | None = None) -> Dict[str, Any]:
    """Load configuration from ``path`` or ``TASK_CONSOLE_CONFIG`` env var.

    Values found in the YAML file are overridden by environment variables:
    ``TASK_CONSOLE_API_URL`` points at the remote task collection,
    ``TASK_CONSOLE_TIMEOUT`` sets a request timeout (unset means the transport
    default), ``TASK_CONSOLE_RETRIES`` the number of connection attempts,
    ``TASK_CONSOLE_STATUS_TTL`` how long status messages stay visible and
    ``TASK_CONSOLE_LOG_LEVEL`` the CLI log level.
    """

    cfg: Dict[str, Any] = {}
    path = path or os.getenv("TASK_CONSOLE_CONFIG")
    if path and os.path.exists(path):
        with open(path, "r") as fh:
            cfg = yaml.safe_load(fh) or {}

    cfg["api_url"] = os.getenv(
        "TASK_CONSOLE_API_URL", cfg.get("api_url", DEFAULT_API_URL)
    )

    if "TASK_CONSOLE_TIMEOUT" in os.environ:
        cfg["timeout"] = float(os.environ["TASK_CONSOLE_TIMEOUT"])
    elif cfg.get("timeout") is not None:
        cfg["timeout"] = float(cfg["timeout"])
    else:
        cfg["timeout"] = None

    if "TASK_CONSOLE_RETRIES" in os.environ:
        cfg["retries"] = int(os.environ["TASK_CONSOLE_RETRIES"])
    else:
        cfg["retries"] = int(cfg.get("retries", 1))

    if "TASK_CONSOLE_STATUS_TTL" in os.environ:
        cfg["status_ttl"] = float(os.environ["TASK_CONSOLE_STATUS_TTL"])
    else:
        cfg["status_ttl"] = float(cfg.get("status_ttl", DEFAULT_STATUS_TTL))

    cfg["log_level"] = os.getenv(
        "TASK_CONSOLE_LOG_LEVEL", cfg.get("log_level", "INFO")
    ).upper()

    return cfg
