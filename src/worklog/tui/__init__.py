"""Worklog terminal UI."""

from .app import WorklogTUI

__all__ = ["WorklogTUI"]
