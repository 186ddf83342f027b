"""Entry points for the command-line interface.

Besides ``serve``, which starts the browser console, the CLI drives the same
console actions from a terminal: list, search, create, run and delete tasks.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

import typer

from ..config import load_config
from ..console import TaskConsole
from ..metrics import start_metrics_server
from ..models import Task

app = typer.Typer(help="Manage tasks on the remote task service")

Action = Callable[[TaskConsole], Awaitable[bool]]


def _make_console() -> TaskConsole:
    return TaskConsole()


def _run(action: Action, *, load: bool = True) -> TaskConsole:
    """Run ``action`` against a fresh console and exit on failure."""

    async def _go() -> tuple[TaskConsole, bool]:
        console = _make_console()
        try:
            if load and not await console.start():
                return console, False
            return console, await action(console)
        finally:
            await console.close()

    console, ok = asyncio.run(_go())
    status = console.status
    if status is not None and status.is_error:
        typer.echo(f"error: {status.text}", err=True)
        raise typer.Exit(code=1)
    if status is not None:
        typer.echo(status.text)
    if not ok:
        raise typer.Exit(code=1)
    return console


def _print_tasks(tasks: list[Task]) -> None:
    for task in tasks:
        typer.echo(f"{task.id}\t{task.name}\t{task.owner}\t{task.command}")
        last = task.last_execution
        if last is not None:
            typer.echo(f"\tlast output: {last.output or 'No output'}")


@app.callback()
def _global_options(
    metrics_port: int | None = typer.Option(
        None,
        "--metrics-port",
        help="Expose Prometheus metrics on PORT before executing the command",
    ),
) -> None:
    """Handle global options for the CLI."""

    logging.basicConfig(level=load_config()["log_level"])
    if metrics_port is not None:
        start_metrics_server(metrics_port)


@app.command("serve")
def serve(
    host: str = typer.Option("127.0.0.1", "--host"),
    port: int = typer.Option(8080, "--port"),
) -> None:
    """Serve the browser console."""

    import uvicorn

    from ..dashboard import app as dashboard_app

    uvicorn.run(dashboard_app, host=host, port=port)


@app.command("list")
def list_tasks() -> None:
    """List all tasks."""

    console = _run(lambda c: c.refresh(), load=False)
    _print_tasks(console.tasks)


@app.command("search")
def search_tasks(term: str) -> None:
    """List tasks whose name matches ``TERM``."""

    def action(console: TaskConsole) -> Awaitable[bool]:
        console.set_search_term(term)
        return console.search()

    console = _run(action, load=False)
    _print_tasks(console.tasks)


@app.command("create")
def create_task(
    task_id: str = typer.Option(..., "--id", help="Unique task id"),
    name: str = typer.Option(..., "--name"),
    owner: str = typer.Option(..., "--owner"),
    command: str = typer.Option(..., "--command", help="Shell command to run"),
) -> None:
    """Create or replace a task."""

    def action(console: TaskConsole) -> Awaitable[bool]:
        console.update_draft(id=task_id, name=name, owner=owner, command=command)
        return console.create()

    _run(action, load=False)


@app.command("run")
def run_task(task_id: str) -> None:
    """Execute ``TASK_ID`` and show its latest output."""

    console = _run(lambda c: c.execute(task_id))
    task = console.find(task_id)
    if task is not None:
        _print_tasks([task])


@app.command("delete")
def delete_task(
    task_id: str,
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    """Delete ``TASK_ID`` after confirmation."""

    def confirm(task_id: str) -> bool:
        return yes or typer.confirm(
            f"Are you sure you want to delete task {task_id}?", abort=True
        )

    _run(lambda c: c.delete(task_id, confirm=confirm), load=False)


def main(args: list[str] | None = None) -> None:
    """CLI entry point used by ``console_scripts`` or directly."""

    app(args, standalone_mode=args is None)


__all__ = ["app", "main"]
