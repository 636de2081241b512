"""
Worklog command line entry point.

Every invocation behaves like a page reload: the timer snapshot is hydrated
from disk, reconciled against the server, acted upon and persisted again.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

import typer
from pydantic import ValidationError

from worklog import __version__
from worklog.cli.commands import timer, ui
from worklog.cli.state import CliState, fail
from worklog.config.settings import ConfigFileError, config_service
from worklog.utils.logging import configure_from_settings

app = typer.Typer(
    name="worklog",
    help="Project/task time tracking from the terminal.",
    no_args_is_help=True,
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"worklog {__version__}")
        raise typer.Exit()


def _verbosity(count: int) -> str | None:
    if count <= 0:
        return None
    return "info" if count == 1 else "debug"


@app.callback()
def main(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to a YAML config file"),
    verbose: int = typer.Option(0, "--verbose", "-v", count=True, help="Increase log verbosity"),
    state_file: Optional[Path] = typer.Option(None, "--state-file", help="Timer snapshot location"),
    base_url: Optional[str] = typer.Option(None, "--base-url", help="Time-log service base URL"),
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show version and exit"
    ),
) -> None:
    """Load settings and configure logging for the invoked command."""
    state = ctx.obj if isinstance(ctx.obj, CliState) else CliState()

    overrides: dict[str, Any] = dict(state.overrides)
    level = _verbosity(verbose)
    if level:
        overrides.setdefault("general", {})["verbosity"] = level
    if state_file:
        overrides.setdefault("timer", {})["state_file"] = state_file
    if base_url:
        overrides.setdefault("api", {})["base_url"] = base_url

    try:
        settings = config_service.load(config_file=config, overrides=overrides)
    except (ConfigFileError, ValidationError) as exc:
        fail(f"Invalid configuration: {exc}")

    configure_from_settings(settings)
    state.settings = settings
    ctx.obj = state


app.command("start")(timer.start)
app.command("stop")(timer.stop)
app.command("status")(timer.status)
app.command("choices")(timer.choices)
app.add_typer(ui.app, name="ui")
