"""
Timer core: store, lifecycle, controller and categorization logic.
"""

from worklog.core.categorization import (
    CategorizationChoices,
    CategorizationForm,
    load_choices,
    merge_unique,
    selectable_projects,
    selectable_tasks,
)
from worklog.core.controller import TimerController
from worklog.core.errors import (
    CategorizationRequiredError,
    StatePersistenceError,
    TimerAlreadyRunningError,
    TimerBusyError,
    TimerError,
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
from worklog.core.store import (
    IDLE_STATE,
    SnapshotPersistence,
    TimerState,
    TimerStore,
    utc_now,
)
from worklog.core.ticker import Ticker

__all__ = [
    # Store
    "TimerState",
    "TimerStore",
    "SnapshotPersistence",
    "IDLE_STATE",
    "utc_now",
    # Controller
    "TimerController",
    "TimerLifecycle",
    "TimerPhase",
    "Ticker",
    # Categorization
    "CategorizationChoices",
    "CategorizationForm",
    "load_choices",
    "merge_unique",
    "selectable_projects",
    "selectable_tasks",
    # Notifications
    "NotificationCenter",
    "TimerNotification",
    # Events
    "TimerEvent",
    "TimerStarted",
    "TimerTicked",
    "TimerStopped",
    "TimerClosedExternally",
    "TimerFailed",
    "LogsInvalidated",
    # Errors
    "TimerError",
    "TimerAlreadyRunningError",
    "TimerNotRunningError",
    "TimerBusyError",
    "CategorizationRequiredError",
    "TimerOperationError",
    "StatePersistenceError",
]
