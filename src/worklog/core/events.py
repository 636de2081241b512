"""Timer events emitted by the controller.

Display surfaces subscribe with ``TimerController.on_event`` and react to
these instead of polling.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any

from worklog.api.models import TimeLogRecord


@dataclass
class TimerEvent:
    """Base class for all timer events."""

    timestamp: float = field(default_factory=time.time, kw_only=True)


@dataclass
class TimerStarted(TimerEvent):
    """Fired when the remote log was opened and the timer is running."""

    log_id: int
    record: TimeLogRecord | None = None


@dataclass
class TimerTicked(TimerEvent):
    """Fired on every tick and every state change with the display value."""

    elapsed_seconds: int
    formatted_time: str


@dataclass
class TimerStopped(TimerEvent):
    """Fired when the log was finalized by this client."""

    log_id: int
    record: TimeLogRecord


@dataclass
class TimerClosedExternally(TimerEvent):
    """Fired when reconciliation or a server push closed the timer."""

    log_id: int
    source: str  # reconcile, push
    end_time: Any = None


@dataclass
class TimerFailed(TimerEvent):
    """Fired when a start or stop request failed."""

    operation: str
    error: str


@dataclass
class LogsInvalidated(TimerEvent):
    """Cached log listings are stale and must be refetched."""

    log_id: int
