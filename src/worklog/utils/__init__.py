"""
Shared utilities module.
"""

from worklog.utils.formatting import elapsed_seconds, format_duration
from worklog.utils.logging import (
    clear_timer_context,
    configure_from_settings,
    configure_logging,
    get_logger,
    set_timer_context,
    timed_operation,
)

__all__ = [
    "configure_logging",
    "configure_from_settings",
    "get_logger",
    "set_timer_context",
    "clear_timer_context",
    "timed_operation",
    "format_duration",
    "elapsed_seconds",
]
