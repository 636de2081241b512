"""Shared CLI context and console output helpers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, NoReturn

import httpx
import typer
from rich.console import Console
from rich.markup import escape

from worklog.config.settings import Settings

console = Console()
err_console = Console(stderr=True)


@dataclass
class CliState:
    """Per-invocation context shared with every command through ``ctx.obj``."""

    settings: Settings | None = None
    transport: httpx.AsyncBaseTransport | None = None
    overrides: dict[str, Any] = field(default_factory=dict)


def get_state(ctx: typer.Context) -> CliState:
    state = ctx.obj
    if not isinstance(state, CliState) or state.settings is None:
        fail("Settings were not loaded")
    return state


def fail(message: str) -> NoReturn:
    """Print an error and exit with status 1."""
    err_console.print(f"[bold red]Error:[/bold red] {escape(message)}")
    raise typer.Exit(1)
