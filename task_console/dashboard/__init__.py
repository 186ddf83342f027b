from __future__ import annotations

from contextlib import asynccontextmanager
from html import escape
from urllib.parse import quote

from fastapi import FastAPI, Form
from fastapi.responses import HTMLResponse, RedirectResponse

from ..console import TaskConsole, get_default_console
from ..models import Task


@asynccontextmanager
async def lifespan(app: FastAPI):
    console = get_default_console()
    await console.start()
    yield
    await console.close()


app = FastAPI(lifespan=lifespan)


def _render_status(console: TaskConsole) -> str:
    status = console.status
    if status is None:
        return ""
    return (
        f"<div class='status status-{status.kind.value}'>"
        f"<pre>{escape(status.text, quote=False)}</pre></div>"
    )


def _render_task(task: Task) -> str:
    task_id = escape(quote(task.id, safe=""), quote=True)
    last = task.last_execution
    output = ""
    if last is not None:
        output = (
            "<div class='last-execution'><strong>Last Execution Output:</strong>"
            f"<pre>{escape(last.output or 'No output', quote=False)}</pre></div>"
        )
    return (
        "<li>"
        f"<strong>{escape(task.name, quote=False)}</strong> - "
        f"<em>{escape(task.owner, quote=False)}</em>"
        f"<div>Command: <code>{escape(task.command, quote=False)}</code></div>"
        f"<div>Executions: {len(task.task_executions)}</div>"
        f"{output}"
        f"<form method='post' action='/execute/{task_id}'>"
        "<button type='submit'>Execute</button></form>"
        f"<form method='get' action='/delete/{task_id}'>"
        "<button type='submit'>Delete</button></form>"
        "</li>"
    )


@app.get("/", response_class=HTMLResponse)
def dashboard() -> HTMLResponse:
    console = get_default_console()
    draft = console.draft
    fields = "\n".join(
        f"<input name='{field}' placeholder='{field.title()}' "
        f"value='{escape(getattr(draft, field), quote=True)}'>"
        for field in ("id", "name", "owner", "command")
    )
    items = "\n".join(_render_task(task) for task in console.tasks) or "<li>No tasks</li>"
    searching = (
        f"<p>Showing results for '{escape(console.active_search, quote=False)}'</p>"
        if console.active_search
        else ""
    )
    body = """
    <html><body>
    <h1>Task Manager</h1>
    {loading}
    {status}
    <h2>Add New Task</h2>
    <form method='post' action='/tasks'>
    {fields}
    <button type='submit'>Add Task</button>
    </form>
    <form method='post' action='/search'>
    <input name='term' placeholder='Search by name' value='{term}'>
    <button type='submit'>Search</button>
    </form>
    <form method='post' action='/reset'><button type='submit'>Reset</button></form>
    {searching}
    <ul>{items}</ul>
    </body></html>
    """.format(
        loading="<p class='loading'>Loading...</p>" if console.loading else "",
        status=_render_status(console),
        fields=fields,
        term=escape(console.search_term, quote=True),
        searching=searching,
        items=items,
    )
    return HTMLResponse(body)


@app.post("/tasks")
async def create(
    id: str = Form(""),
    name: str = Form(""),
    owner: str = Form(""),
    command: str = Form(""),
) -> RedirectResponse:
    console = get_default_console()
    console.update_draft(id=id, name=name, owner=owner, command=command)
    await console.create()
    return RedirectResponse("/", status_code=303)


@app.post("/search")
async def search(term: str = Form("")) -> RedirectResponse:
    console = get_default_console()
    console.set_search_term(term)
    await console.search()
    return RedirectResponse("/", status_code=303)


@app.post("/reset")
async def reset() -> RedirectResponse:
    await get_default_console().reset()
    return RedirectResponse("/", status_code=303)


@app.post("/refresh")
async def refresh() -> RedirectResponse:
    await get_default_console().refresh()
    return RedirectResponse("/", status_code=303)


@app.post("/execute/{task_id:path}")
async def execute(task_id: str) -> RedirectResponse:
    await get_default_console().execute(task_id)
    return RedirectResponse("/", status_code=303)


@app.get("/delete/{task_id:path}", response_class=HTMLResponse)
def confirm_delete(task_id: str) -> HTMLResponse:
    safe_id = escape(quote(task_id, safe=""), quote=True)
    body = f"""
    <html><body>
    <p>Are you sure you want to delete this task?</p>
    <form method='post' action='/delete/{safe_id}'>
    <button type='submit' name='answer' value='yes'>Yes</button>
    <button type='submit' name='answer' value='no'>No</button>
    </form>
    </body></html>
    """
    return HTMLResponse(body)


@app.post("/delete/{task_id:path}")
async def delete(task_id: str, answer: str = Form("no")) -> RedirectResponse:
    await get_default_console().delete(task_id, confirm=lambda _: answer == "yes")
    return RedirectResponse("/", status_code=303)


__all__ = ["app", "dashboard", "create", "search", "reset", "refresh", "execute", "delete"]
