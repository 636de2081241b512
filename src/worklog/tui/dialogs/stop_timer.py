"""Stop-categorization dialog.

A running timer can only be stopped against a project and a task. The dialog
loads the merged choices, keeps the task list scoped to the chosen project and
only enables confirm once both are picked.
"""

from __future__ import annotations

from typing import Any

from textual.containers import Horizontal, Vertical
from textual.widgets import Button, Input, Select, Static

from worklog.api.client import ProjectDirectory
from worklog.api.errors import ApiError
from worklog.core.categorization import CategorizationForm, load_choices
from worklog.core.controller import TimerController
from worklog.core.errors import TimerError

from .base import BaseDialog


def _selected(value: Any) -> int | None:
    # Select's blank sentinel differs between Textual releases.
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return None


class StopTimerDialog(BaseDialog):
    """Collects project, task and note, then stops the timer."""

    DIALOG_TITLE = "Stop timer"

    DEFAULT_CSS = """
    StopTimerDialog Select, StopTimerDialog Input {
        margin-bottom: 1;
    }

    StopTimerDialog .dialog-buttons {
        height: auto;
        align: right middle;
    }

    StopTimerDialog .dialog-buttons Button {
        margin-left: 1;
    }
    """

    def __init__(self, controller: TimerController, directory: ProjectDirectory):
        super().__init__()
        self.controller = controller
        self.directory = directory
        self.form = CategorizationForm()

    def compose_content(self):
        with Vertical(classes="dialog-content"):
            yield Static(f"Elapsed: {self.controller.formatted_time}", id="elapsed")
            yield Select([], prompt="Project", id="project")
            yield Select([], prompt="Task", id="task", disabled=True)
            yield Input(placeholder="Note (optional)", id="note")
            yield Static("", id="error", classes="dialog-error")
            with Horizontal(classes="dialog-buttons"):
                yield Button("Cancel", id="cancel")
                yield Button("Stop timer", id="confirm", variant="primary", disabled=True)

    def on_mount(self) -> None:
        self.run_worker(self._load_choices(), exclusive=True)

    async def _load_choices(self) -> None:
        try:
            choices = await load_choices(self.directory)
        except ApiError as exc:
            self._show_error(f"Could not load projects: {exc}")
            return
        self.form = CategorizationForm(choices)
        self.query_one("#project", Select).set_options(
            (project.name, project.id) for project in self.form.project_options
        )

    def on_select_changed(self, event: Select.Changed) -> None:
        value = _selected(event.value)
        if event.select.id == "project":
            self.form.select_project(value)
            tasks = self.query_one("#task", Select)
            tasks.set_options((task.label, task.id) for task in self.form.task_options)
            tasks.disabled = value is None
        elif event.select.id == "task":
            try:
                self.form.select_task(value)
            except ValueError:
                # Stale change from the previous project's options.
                self.form.select_task(None)
        self._sync_confirm()

    def _sync_confirm(self) -> None:
        confirm = self.query_one("#confirm", Button)
        confirm.disabled = not self.form.can_confirm or self.controller.is_loading

    def _show_error(self, message: str) -> None:
        self.query_one("#error", Static).update(message)

    async def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "cancel":
            self.action_cancel()
        elif event.button.id == "confirm":
            await self.confirm()

    async def confirm(self) -> None:
        """Stop the timer; on failure the dialog stays open with the error."""
        if not self.form.can_confirm or self.controller.is_loading:
            return
        self.form.note = self.query_one("#note", Input).value
        self.query_one("#confirm", Button).disabled = True
        self._show_error("")
        try:
            record = await self.controller.stop(self.form.to_request())
        except TimerError as exc:
            self._show_error(str(exc))
            self.app.notify(str(exc), title="Stop failed", severity="error")
            self._sync_confirm()
            return
        self.dismiss(record)

    def action_cancel(self) -> None:
        if self.controller.is_loading:
            return
        self.controller.cancel_categorization()
        self.dismiss(None)
