"""
Timer CLI commands.

Start, stop and inspect the timer, and list categorization choices.
"""

from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from typing import Any, Optional, TypeVar

import typer
from rich.table import Table

from worklog.api.errors import ApiError
from worklog.api.models import StopRequest, TimeLogRecord
from worklog.cli.state import CliState, console, fail, get_state
from worklog.core.categorization import CategorizationChoices, CategorizationForm, load_choices
from worklog.core.controller import TimerController
from worklog.core.errors import TimerError
from worklog.runtime import open_runtime
from worklog.utils.formatting import format_duration

T = TypeVar("T")


def _run(coro: Coroutine[Any, Any, T]) -> T:
    try:
        return asyncio.run(coro)
    except (TimerError, ApiError) as exc:
        fail(str(exc))


def _print_notices(controller: TimerController) -> None:
    for notice in controller.notifications:
        detail = f" ({notice.name})" if notice.name else ""
        console.print(f"[yellow]{notice.title}:[/yellow] {notice.message} Log {notice.log_id}{detail}.")
    controller.notifications.clear()


# =============================================================================
# START
# =============================================================================


def start(ctx: typer.Context) -> None:
    """Start a new, uncategorized timer."""
    record = _run(_start(get_state(ctx)))
    console.print(f"[green]Timer started[/green] (log {record.id})")


async def _start(state: CliState) -> TimeLogRecord:
    async with open_runtime(state.settings, transport=state.transport) as runtime:
        _print_notices(runtime.controller)
        return await runtime.controller.start()


# =============================================================================
# STOP
# =============================================================================


def stop(
    ctx: typer.Context,
    project: Optional[int] = typer.Option(None, "--project", "-p", help="Project id to log time against"),
    task: Optional[int] = typer.Option(None, "--task", "-t", help="Task id within the project"),
    note: str = typer.Option("", "--note", "-n", help="Optional description"),
) -> None:
    """Categorize and stop the running timer."""
    record, shown = _run(_stop(get_state(ctx), project, task, note))
    duration = record.server_duration
    recorded = format_duration(duration) if duration is not None else shown
    console.print(f"[green]Timer stopped[/green] (log {record.id}, {recorded} recorded)")


async def _stop(
    state: CliState,
    project: int | None,
    task: int | None,
    note: str,
) -> tuple[TimeLogRecord, str]:
    async with open_runtime(state.settings, transport=state.transport) as runtime:
        controller = runtime.controller
        _print_notices(controller)
        controller.open_categorization()

        if project is None or task is None:
            # Rejected by the controller before any remote call.
            request = StopRequest(project_id=project, task_id=task, description=note)
        else:
            form = CategorizationForm(await load_choices(runtime.directory))
            if project not in {p.id for p in form.project_options}:
                controller.cancel_categorization()
                fail(f"Project {project} is not open for time logging")
            form.select_project(project)
            try:
                form.select_task(task)
            except ValueError as exc:
                controller.cancel_categorization()
                fail(str(exc))
            form.note = note
            request = form.to_request()

        shown = controller.formatted_time
        return await controller.stop(request), shown


# =============================================================================
# STATUS
# =============================================================================


def status(ctx: typer.Context) -> None:
    """Show the timer, reconciled against the server."""
    _run(_status(get_state(ctx)))


async def _status(state: CliState) -> None:
    async with open_runtime(state.settings, transport=state.transport) as runtime:
        controller = runtime.controller
        _print_notices(controller)
        if controller.is_running:
            console.print(
                f"[green]Running[/green] {controller.formatted_time} (log {controller.active_log_id})"
            )
        else:
            console.print("[dim]No timer running[/dim]")


# =============================================================================
# CHOICES
# =============================================================================


def choices(
    ctx: typer.Context,
    project: Optional[int] = typer.Option(None, "--project", "-p", help="List open tasks of this project"),
) -> None:
    """List the projects and tasks time can be logged against."""
    loaded = _run(_choices(get_state(ctx)))

    projects = Table(title="Projects")
    projects.add_column("ID", justify="right")
    projects.add_column("Name")
    projects.add_column("Status")
    for item in loaded.open_projects:
        projects.add_row(str(item.id), item.name, item.status or "-")
    console.print(projects)

    if project is None:
        return
    tasks = Table(title=f"Tasks of project {project}")
    tasks.add_column("ID", justify="right")
    tasks.add_column("Task")
    tasks.add_column("Status")
    for item in loaded.tasks_for(project):
        tasks.add_row(str(item.id), item.label, item.status or "-")
    console.print(tasks)


async def _choices(state: CliState) -> CategorizationChoices:
    async with open_runtime(state.settings, transport=state.transport) as runtime:
        return await load_choices(runtime.directory)
