"""Modal dialogs for the Worklog TUI."""

from .base import BaseDialog
from .stop_timer import StopTimerDialog

__all__ = ["BaseDialog", "StopTimerDialog"]
