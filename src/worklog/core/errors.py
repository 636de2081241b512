"""Timer error hierarchy.

Precondition errors are raised before any network call and leave state
untouched. ``TimerOperationError`` wraps a failed remote call.
"""

from __future__ import annotations


class TimerError(Exception):
    """Base class for timer lifecycle errors."""


class TimerAlreadyRunningError(TimerError):
    """start() while a timer is already open."""


class TimerNotRunningError(TimerError):
    """stop() or categorization while no timer is open."""


class TimerBusyError(TimerError):
    """A start or stop request is already in flight."""


class CategorizationRequiredError(TimerError, ValueError):
    """stop() without both a project and a task."""


class TimerOperationError(TimerError):
    """The remote service failed a start or stop request."""

    def __init__(self, operation: str, cause: Exception):
        super().__init__(f"Failed to {operation} timer: {cause}")
        self.operation = operation
        self.cause = cause


class StatePersistenceError(Exception):
    """Raised when the timer snapshot cannot be written."""
