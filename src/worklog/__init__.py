"""Worklog - project/task time tracking with a reconciled, drift-free timer."""

__version__ = "0.1.0"
