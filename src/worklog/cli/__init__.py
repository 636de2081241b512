"""CLI module for Worklog.

Typer application exposing ``start``, ``stop``, ``status``, ``choices`` and
``ui``.
"""

from worklog.cli.main import app
from worklog.cli.state import CliState

__all__ = ["app", "CliState"]
