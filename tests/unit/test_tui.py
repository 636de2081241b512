"""TUI tests driven through Textual's pilot."""

import pytest

from worklog.api.push import TIMER_STOPPED_EVENT
from worklog.config.settings import Settings
from worklog.core.lifecycle import TimerPhase
from worklog.core.store import IDLE_STATE
from worklog.runtime import build_runtime
from worklog.tui.app import WorklogTUI
from worklog.tui.dialogs import StopTimerDialog
from worklog.tui.widgets import TimerDisplay

from ..conftest import FakeSocket


@pytest.fixture
def settings(tmp_path):
    return Settings(
        api={"base_url": "http://worklog.test/api/v1", "user_id": 5, "push_enabled": False},
        timer={
            "state_file": tmp_path / "timer-storage.json",
            "tick_interval": 3600,
            "reconcile_interval": 0,
        },
    )


# =============================================================================
# TUI TESTS
# =============================================================================


class TestWorklogTUI:
    """Header timer and stop dialog."""

    @pytest.mark.asyncio
    async def test_start_from_keyboard(self, settings, backend):
        app = WorklogTUI(settings, transport=backend.transport)

        async with app.run_test() as pilot:
            await pilot.press("s")
            await pilot.pause()

            assert app.controller.is_running is True
            assert app.controller.active_log_id == 7
            assert app.query_one(TimerDisplay).has_class("-running")

    @pytest.mark.asyncio
    async def test_cancel_dialog_keeps_timer(self, settings, backend):
        app = WorklogTUI(settings, transport=backend.transport)

        async with app.run_test() as pilot:
            await pilot.press("s")
            await pilot.pause()
            await pilot.press("x")
            await pilot.pause()
            assert isinstance(app.screen, StopTimerDialog)
            assert app.controller.phase is TimerPhase.AWAITING_CATEGORIZATION

            await pilot.press("escape")
            await pilot.pause()

            assert not isinstance(app.screen, StopTimerDialog)
            assert app.controller.phase is TimerPhase.RUNNING

    @pytest.mark.asyncio
    async def test_confirm_stops_timer(self, settings, backend):
        app = WorklogTUI(settings, transport=backend.transport)

        async with app.run_test() as pilot:
            await pilot.press("s")
            await pilot.pause()
            await pilot.press("x")
            await pilot.pause()
            dialog = app.screen
            await app.workers.wait_for_complete()

            assert [p.id for p in dialog.form.project_options] == [3]
            dialog.form.select_project(3)
            dialog.form.select_task(9)
            await dialog.confirm()
            await pilot.pause()

            assert app.runtime.store.state == IDLE_STATE
            assert backend.logs[7]["taskId"] == 9
            assert not isinstance(app.screen, StopTimerDialog)

    @pytest.mark.asyncio
    async def test_stop_without_timer_notifies(self, settings, backend):
        app = WorklogTUI(settings, transport=backend.transport)

        async with app.run_test() as pilot:
            await pilot.press("x")
            await pilot.pause()

            assert not isinstance(app.screen, StopTimerDialog)
            assert backend.requests == []

    @pytest.mark.asyncio
    async def test_push_closes_dialog(self, settings, backend):
        """A timer stopped on the server dismisses the open stop dialog."""
        settings.api.push_enabled = True
        socket = FakeSocket()
        runtime = build_runtime(settings, transport=backend.transport, listen=True, push_client=socket)
        app = WorklogTUI(runtime=runtime)

        async with app.run_test() as pilot:
            await app.workers.wait_for_complete()
            assert socket.connected is True
            await pilot.press("s")
            await pilot.pause()
            await pilot.press("x")
            await pilot.pause()
            assert isinstance(app.screen, StopTimerDialog)

            await socket.deliver(TIMER_STOPPED_EVENT, {"logId": 7, "timeSpent": 12})
            await pilot.pause()

            assert not isinstance(app.screen, StopTimerDialog)
            assert app.controller.is_running is False
            assert app.query_one(TimerDisplay).has_class("-running") is False
