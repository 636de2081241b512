"""Main WorklogTUI application.

The store and controller are built once here, at the application root, and
shared with every widget and dialog.
"""

from __future__ import annotations

import httpx
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import Footer, Header, Static

from worklog.api.models import TimeLogRecord
from worklog.config.settings import Settings
from worklog.core.errors import TimerError
from worklog.core.events import (
    TimerClosedExternally,
    TimerEvent,
    TimerStarted,
    TimerStopped,
)
from worklog.runtime import Runtime, build_runtime

from .dialogs import StopTimerDialog
from .widgets import TimerDisplay


class WorklogTUI(App):
    """Worklog terminal user interface."""

    TITLE = "Worklog"
    SUB_TITLE = "Time tracking"

    CSS = """
    #status {
        padding: 1 2;
        color: $text-muted;
    }
    """

    BINDINGS = [
        Binding("s", "start_timer", "Start", show=True),
        Binding("x", "stop_timer", "Stop", show=True),
        Binding("r", "reconcile", "Refresh", show=True),
        Binding("ctrl+q", "quit", "Quit", show=True),
    ]

    def __init__(
        self,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        runtime: Runtime | None = None,
    ):
        super().__init__()
        if runtime is None:
            if settings is None:
                raise ValueError("settings or runtime is required")
            runtime = build_runtime(settings, transport=transport, listen=True)
        self.runtime = runtime
        self.controller = runtime.controller
        self._remove_listener = None

    def compose(self) -> ComposeResult:
        yield Header()
        yield TimerDisplay(id="timer")
        yield Static("", id="status")
        yield Footer()

    async def on_mount(self) -> None:
        self._remove_listener = self.controller.on_event(self._on_timer_event)
        await self.controller.mount()
        self.run_worker(self.runtime.start_push(), name="push", group="push", exclusive=True)
        self._show_notices()
        self.refresh_timer()

    async def on_unmount(self) -> None:
        if self._remove_listener is not None:
            self._remove_listener()
        await self.runtime.aclose()

    def refresh_timer(self) -> None:
        for display in self.query(TimerDisplay):
            display.show(
                self.controller.formatted_time,
                running=self.controller.is_running,
                loading=self.controller.is_loading,
            )
        for status in self.query("#status").results(Static):
            if self.controller.is_running:
                status.update(f"Log {self.controller.active_log_id} running. Press x to stop.")
            else:
                status.update("No timer running. Press s to start.")

    def _on_timer_event(self, event: TimerEvent) -> None:
        if isinstance(event, TimerStarted):
            self.notify(f"Timer started (log {event.log_id})")
        elif isinstance(event, TimerStopped):
            self.notify(f"Timer stopped (log {event.log_id})")
        elif isinstance(event, TimerClosedExternally):
            if isinstance(self.screen, StopTimerDialog):
                self.screen.dismiss(None)
            self._show_notices()
        self.refresh_timer()

    def _show_notices(self) -> None:
        for notice in self.controller.notifications:
            self.notify(notice.message, title=notice.title, severity="warning")
        self.controller.notifications.clear()

    async def action_start_timer(self) -> None:
        try:
            await self.controller.start()
        except TimerError as exc:
            self.notify(str(exc), title="Start failed", severity="error")
        self.refresh_timer()

    def action_stop_timer(self) -> None:
        try:
            self.controller.open_categorization()
        except TimerError as exc:
            self.notify(str(exc), severity="error")
            return
        self.push_screen(
            StopTimerDialog(self.controller, self.runtime.directory),
            self._on_stop_dialog_closed,
        )

    def _on_stop_dialog_closed(self, record: TimeLogRecord | None) -> None:
        self.refresh_timer()

    async def action_reconcile(self) -> None:
        await self.controller.reconcile()
        self.refresh_timer()
