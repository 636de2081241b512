"""Duration formatting helpers shared by the CLI and the TUI."""

from __future__ import annotations

import math
from datetime import datetime, timedelta


def format_duration(seconds: int | float | None) -> str:
    """Format a number of seconds as zero-padded ``HH:MM:SS``.

    Negative and missing values render as ``00:00:00``. Hours are not wrapped
    at 24, a 30 hour timer reads ``30:00:00``.
    """
    total = max(0, int(seconds or 0))
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def elapsed_seconds(start: datetime, now: datetime) -> int:
    """Whole seconds between ``start`` and ``now``, floored and clamped at 0."""
    delta = (now - start) / timedelta(seconds=1)
    return max(0, math.floor(delta))
