"""Timer lifecycle state machine.

Idle -> Starting -> Running -> AwaitingCategorization -> Stopping -> Idle,
with failure edges that return to the phase a request started from. The
machine is the single guard against overlapping start/stop requests: a
request is only accepted from the phases listed as its source.
"""

from __future__ import annotations

from enum import Enum

from transitions import Machine

from worklog.utils.logging import get_logger


class TimerPhase(str, Enum):
    """Controller-level timer phases."""

    IDLE = "idle"
    STARTING = "starting"
    RUNNING = "running"
    AWAITING_CATEGORIZATION = "awaiting_categorization"
    STOPPING = "stopping"


TRANSITIONS = [
    {
        "trigger": "request_start",
        "source": TimerPhase.IDLE.value,
        "dest": TimerPhase.STARTING.value,
    },
    {
        "trigger": "start_succeeded",
        "source": TimerPhase.STARTING.value,
        "dest": TimerPhase.RUNNING.value,
    },
    {
        "trigger": "start_failed",
        "source": TimerPhase.STARTING.value,
        "dest": TimerPhase.IDLE.value,
    },
    {
        "trigger": "resume_running",
        "source": TimerPhase.IDLE.value,
        "dest": TimerPhase.RUNNING.value,
    },
    {
        "trigger": "open_categorization",
        "source": TimerPhase.RUNNING.value,
        "dest": TimerPhase.AWAITING_CATEGORIZATION.value,
    },
    {
        "trigger": "cancel_categorization",
        "source": TimerPhase.AWAITING_CATEGORIZATION.value,
        "dest": TimerPhase.RUNNING.value,
    },
    {
        "trigger": "request_stop",
        "source": [
            TimerPhase.RUNNING.value,
            TimerPhase.AWAITING_CATEGORIZATION.value,
        ],
        "dest": TimerPhase.STOPPING.value,
        "before": "_remember_origin",
    },
    {
        "trigger": "stop_succeeded",
        "source": TimerPhase.STOPPING.value,
        "dest": TimerPhase.IDLE.value,
    },
    # A failed stop returns to whichever phase it was requested from.
    {
        "trigger": "stop_failed",
        "source": TimerPhase.STOPPING.value,
        "dest": TimerPhase.AWAITING_CATEGORIZATION.value,
        "conditions": "_stopped_from_dialog",
    },
    {
        "trigger": "stop_failed",
        "source": TimerPhase.STOPPING.value,
        "dest": TimerPhase.RUNNING.value,
    },
    {
        "trigger": "closed_externally",
        "source": [
            TimerPhase.RUNNING.value,
            TimerPhase.AWAITING_CATEGORIZATION.value,
        ],
        "dest": TimerPhase.IDLE.value,
    },
]


class TimerLifecycle:
    """Finite state machine for the controller's view of the timer.

    Triggers not allowed from the current phase raise
    ``transitions.MachineError``; callers check ``phase`` first.
    """

    def __init__(self) -> None:
        self.logger = get_logger("worklog.lifecycle")
        self.state: str = TimerPhase.IDLE.value
        self.history: list[str] = []
        self._stop_origin: str | None = None

        self._machine = Machine(
            model=self,
            states=[phase.value for phase in TimerPhase],
            transitions=TRANSITIONS,
            initial=TimerPhase.IDLE.value,
            auto_transitions=False,
            ignore_invalid_triggers=False,
            after_state_change="_record_transition",
            send_event=False,
        )

    def _remember_origin(self) -> None:
        self._stop_origin = self.state

    def _stopped_from_dialog(self) -> bool:
        return self._stop_origin == TimerPhase.AWAITING_CATEGORIZATION.value

    def _record_transition(self) -> None:
        self.history.append(self.state)
        self.logger.debug("lifecycle.transition", phase=self.state)

    @property
    def phase(self) -> TimerPhase:
        return TimerPhase(self.state)

    @property
    def is_busy(self) -> bool:
        """A start or stop request is in flight."""
        return self.phase in (TimerPhase.STARTING, TimerPhase.STOPPING)

    @property
    def has_open_timer(self) -> bool:
        return self.phase in (
            TimerPhase.RUNNING,
            TimerPhase.AWAITING_CATEGORIZATION,
        )
