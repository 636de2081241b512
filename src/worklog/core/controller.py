"""Timer controller.

Owns the ticking loop, turns user intent into remote time-log calls and keeps
the local store consistent with the server:

- ``mount()`` hydrates the display from the persisted anchor and reconciles
  a rehydrated running timer against the server (ghost timers are cleared).
- ``start()`` opens an uncategorized remote log and starts ticking.
- ``stop()`` finalizes the open log with its project/task and resets.
- ``tick()`` recomputes elapsed time from the absolute start instant, so late
  or skipped ticks never accumulate drift.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from typing import Any

from worklog.api.client import TimeLogService
from worklog.api.errors import ApiError
from worklog.api.models import RemoteStopEvent, StopRequest, TimeLogRecord
from worklog.core.errors import (
    CategorizationRequiredError,
    TimerAlreadyRunningError,
    TimerBusyError,
    TimerNotRunningError,
    TimerOperationError,
)
from worklog.core.events import (
    LogsInvalidated,
    TimerClosedExternally,
    TimerEvent,
    TimerFailed,
    TimerStarted,
    TimerStopped,
    TimerTicked,
)
from worklog.core.lifecycle import TimerLifecycle, TimerPhase
from worklog.core.notifications import NotificationCenter, TimerNotification
from worklog.core.store import TimerState, TimerStore
from worklog.core.ticker import Ticker
from worklog.utils.formatting import format_duration
from worklog.utils.logging import clear_timer_context, get_logger, set_timer_context

EventCallback = Callable[[TimerEvent], None]


class TimerController:
    """Controller for the single process-wide timer.

    Parameters
    ----------
    store : TimerStore
        Shared timer store, already hydrated.
    service : TimeLogService
        Remote authority for time logs.
    tick_interval : float
        Seconds between display ticks.
    reconcile_interval : float
        Seconds between background reconciliations while running; 0 disables.
    notifications : NotificationCenter | None
        Where out-of-band stop notices are posted.
    """

    def __init__(
        self,
        store: TimerStore,
        service: TimeLogService,
        *,
        tick_interval: float = 1.0,
        reconcile_interval: float = 0.0,
        notifications: NotificationCenter | None = None,
    ):
        self.store = store
        self.service = service
        self.lifecycle = TimerLifecycle()
        self.notifications = notifications or NotificationCenter()
        self.logger = get_logger("worklog.controller")
        self.last_error: str | None = None

        self._callbacks: list[EventCallback] = []
        self._mounted = False
        self._formatted_time = format_duration(store.state.elapsed_time)
        self._ticker = Ticker(self.tick, tick_interval, name="timer-tick")
        self._reconciler = (
            Ticker(self.reconcile, reconcile_interval, name="timer-reconcile")
            if reconcile_interval > 0
            else None
        )
        store.subscribe(self._on_state_change)
        set_timer_context(store.state.active_log_id)

    # ==================== READ-ONLY SIGNAL ====================

    @property
    def state(self) -> TimerState:
        return self.store.state

    @property
    def is_running(self) -> bool:
        return self.store.state.is_running

    @property
    def active_log_id(self) -> int | None:
        return self.store.state.active_log_id

    @property
    def elapsed_seconds(self) -> int:
        return self.store.state.elapsed_time

    @property
    def formatted_time(self) -> str:
        return self._formatted_time

    @property
    def phase(self) -> TimerPhase:
        return self.lifecycle.phase

    @property
    def is_loading(self) -> bool:
        """A start or stop request is in flight; submit buttons stay disabled."""
        return self.lifecycle.is_busy

    @property
    def ticking(self) -> bool:
        return self._ticker.running

    def on_event(self, callback: EventCallback) -> Callable[[], None]:
        """Register an event callback; returns a function that removes it."""
        self._callbacks.append(callback)

        def remove() -> None:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return remove

    # ==================== LIFETIME ====================

    async def mount(self) -> None:
        """Bring the controller up against the hydrated store.

        Shows the elapsed time of a rehydrated timer immediately, then asks
        the server whether that log is still open.
        """
        if self._mounted:
            return
        self._mounted = True

        if self.store.state.is_running:
            # Already RUNNING when remounted after close().
            if self.lifecycle.phase is TimerPhase.IDLE:
                self.lifecycle.resume_running()
            self.tick()
            await self.reconcile()
            if self.store.state.is_running:
                self._enter_running()
        else:
            self._publish_time()

    async def close(self) -> None:
        """Tear down every ticker. Safe to call more than once."""
        await self._ticker.stop()
        if self._reconciler is not None:
            await self._reconciler.stop()
        self._mounted = False
        clear_timer_context()

    async def __aenter__(self) -> TimerController:
        await self.mount()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    # ==================== TICKING ====================

    def tick(self) -> int:
        """Recompute elapsed seconds from the start instant and publish them."""
        state = self.store.state
        if state.is_running:
            self.store.update_elapsed_time(state.elapsed_at(self.store.clock()))
        return self._publish_time()

    def _publish_time(self) -> int:
        elapsed = self.store.state.elapsed_time
        self._emit(TimerTicked(elapsed_seconds=elapsed, formatted_time=self._formatted_time))
        return elapsed

    def _on_state_change(self, state: TimerState) -> None:
        self._formatted_time = format_duration(state.elapsed_time)
        set_timer_context(state.active_log_id)

    def _enter_running(self) -> None:
        self._ticker.start()
        if self._reconciler is not None:
            self._reconciler.start()

    def _leave_running(self) -> None:
        self._ticker.cancel()
        if self._reconciler is not None:
            self._reconciler.cancel()

    # ==================== START / STOP ====================

    async def start(self) -> TimeLogRecord:
        """Open a new uncategorized remote log and start ticking.

        Raises:
            TimerBusyError: a start or stop is already in flight
            TimerAlreadyRunningError: a timer is already open
            TimerOperationError: the remote create failed; state stays idle
        """
        if self.lifecycle.is_busy:
            raise TimerBusyError("A timer request is already in progress")
        if self.store.state.is_running or self.lifecycle.phase is not TimerPhase.IDLE:
            raise TimerAlreadyRunningError("A timer is already running")

        self.lifecycle.request_start()
        self.last_error = None
        try:
            record = await self.service.create()
        except ApiError as exc:
            self.lifecycle.start_failed()
            self._fail("start", exc)
            raise TimerOperationError("start", exc) from exc
        except BaseException:
            self.lifecycle.start_failed()
            raise

        # Prefer the server's start instant so the displayed time matches the
        # duration the server computes at finalize time.
        self.store.start_timer(record.id, started_at=record.start_time)
        self.lifecycle.start_succeeded()
        self._enter_running()
        self.tick()

        self.logger.info("timer.started", log_id=record.id, start_time=self.store.state.start_time)
        self._emit(TimerStarted(log_id=record.id, record=record))
        return record

    def open_categorization(self) -> None:
        """Enter AwaitingCategorization; the timer keeps running meanwhile."""
        self._adopt_running_timer()
        if self.lifecycle.phase is TimerPhase.RUNNING:
            self.lifecycle.open_categorization()

    def cancel_categorization(self) -> None:
        """Leave the dialog; the running timer is untouched."""
        if self.lifecycle.phase is TimerPhase.AWAITING_CATEGORIZATION:
            self.lifecycle.cancel_categorization()

    async def stop(self, request: StopRequest) -> TimeLogRecord:
        """Finalize the open log against ``request``'s project and task.

        On failure the running state is preserved; retrying targets the same
        log id and is therefore safe.

        Raises:
            TimerBusyError: a start or stop is already in flight
            TimerNotRunningError: no timer is open
            CategorizationRequiredError: project or task missing
            TimerOperationError: the remote finalize failed
        """
        log_id = self._adopt_running_timer()
        if request.project_id is None or request.task_id is None:
            raise CategorizationRequiredError("Both a project and a task are required to stop the timer")

        self.lifecycle.request_stop()
        self.last_error = None
        try:
            record = await self.service.finalize(log_id, request)
        except ApiError as exc:
            self.lifecycle.stop_failed()
            self._fail("stop", exc, log_id=log_id)
            raise TimerOperationError("stop", exc) from exc
        except BaseException:
            self.lifecycle.stop_failed()
            raise

        self._leave_running()
        self.store.stop_timer()
        self.store.reset_timer()
        self.lifecycle.stop_succeeded()

        self.logger.info(
            "timer.stopped",
            log_id=log_id,
            project_id=request.project_id,
            task_id=request.task_id,
            duration=record.server_duration,
        )
        self._emit(TimerStopped(log_id=log_id, record=record))
        self._emit(LogsInvalidated(log_id=log_id))
        return record

    def _adopt_running_timer(self) -> int:
        """Check stop preconditions and return the open log id.

        A persisted timer is adopted when the controller was never mounted.
        """
        if self.lifecycle.is_busy:
            raise TimerBusyError("A timer request is already in progress")
        state = self.store.state
        if not state.is_running or state.active_log_id is None:
            raise TimerNotRunningError("No timer is running")
        if self.lifecycle.phase is TimerPhase.IDLE:
            self.lifecycle.resume_running()
        return state.active_log_id

    def _fail(self, operation: str, exc: Exception, **context: Any) -> None:
        self.last_error = f"Failed to {operation} timer: {exc}"
        self.logger.error(f"timer.{operation}_failed", error=str(exc), **context)
        self._emit(TimerFailed(operation=operation, error=self.last_error))

    # ==================== RECONCILIATION ====================

    async def reconcile(self) -> bool:
        """Check the open log against the server.

        Returns True when the server reports the log as ended and the local
        timer was reset. Lookup failures are inconclusive and change nothing.
        """
        state = self.store.state
        log_id = state.active_log_id
        if not state.is_running or log_id is None or self.lifecycle.is_busy:
            return False

        try:
            record = await self.service.get(log_id)
        except ApiError as exc:
            self.logger.warning("reconcile.inconclusive", log_id=log_id, error=str(exc))
            return False

        if not record.is_closed:
            self.logger.debug("reconcile.still_open", log_id=log_id)
            return False
        # A stop or a new start may have happened while the lookup was pending.
        if self.lifecycle.is_busy or self.store.state.active_log_id != log_id:
            return False

        self.logger.info("reconcile.ghost_cleared", log_id=log_id, end_time=record.end_time)
        self._close_externally(
            log_id,
            source="reconcile",
            name=record.name,
            time_spent=record.server_duration,
            end_time=record.end_time,
        )
        return True

    def handle_remote_stop(self, payload: RemoteStopEvent | dict[str, Any]) -> bool:
        """Apply a server push saying a timer was stopped out-of-band.

        Returns True when it matched the open log and the timer was reset.
        """
        event = (
            payload
            if isinstance(payload, RemoteStopEvent)
            else RemoteStopEvent.model_validate(payload)
        )
        state = self.store.state
        if not state.is_running or state.active_log_id != event.log_id:
            self.logger.debug("push.ignored", log_id=event.log_id, active_log_id=state.active_log_id)
            return False
        if self.lifecycle.is_busy:
            # Our own in-flight stop settles the outcome.
            return False

        self.logger.info("push.timer_stopped", log_id=event.log_id)
        self._close_externally(
            event.log_id,
            source="push",
            name=event.name,
            time_spent=event.time_spent,
            end_time=event.end_time,
        )
        return True

    def _close_externally(
        self,
        log_id: int,
        *,
        source: str,
        name: str | None = None,
        time_spent: int | None = None,
        end_time: datetime | None = None,
    ) -> None:
        self._leave_running()
        self.store.reset_timer()
        if self.lifecycle.has_open_timer:
            self.lifecycle.closed_externally()

        self.notifications.add(
            TimerNotification(
                title="Timer stopped",
                message="Your timer was stopped on the server.",
                log_id=log_id,
                name=name,
                time_spent=time_spent,
                end_time=end_time,
            )
        )
        self._emit(TimerClosedExternally(log_id=log_id, source=source, end_time=end_time))
        self._emit(LogsInvalidated(log_id=log_id))
        self._publish_time()

    # ==================== EVENTS ====================

    def _emit(self, event: TimerEvent) -> None:
        for callback in list(self._callbacks):
            try:
                callback(event)
            except Exception as exc:
                self.logger.exception("controller.callback_failed", event=type(event).__name__, error=str(exc))
