"""
TUI CLI commands.

Launch the terminal UI with its header timer.
"""

import typer

from worklog.cli.state import fail, get_state

app = typer.Typer(help="Launch the terminal UI.")


@app.callback(invoke_without_command=True)
def ui_callback(ctx: typer.Context) -> None:
    """Launch the TUI."""
    if ctx.invoked_subcommand is None:
        launch_tui(ctx)


@app.command("launch")
def launch(ctx: typer.Context) -> None:
    """Launch the Worklog TUI."""
    launch_tui(ctx)


def launch_tui(ctx: typer.Context) -> None:
    """Run the TUI against the loaded settings."""
    from worklog.tui.app import WorklogTUI

    state = get_state(ctx)
    typer.echo("Starting Worklog TUI...")
    WorklogTUI(state.settings, transport=state.transport).run()


@app.command("check")
def check_tui() -> None:
    """Check if TUI dependencies are available."""
    dependencies = {
        "textual": "TUI framework",
        "rich": "Rich text rendering",
        "socketio": "Timer push notifications",
    }

    missing = []
    for pkg, desc in dependencies.items():
        try:
            __import__(pkg)
            typer.echo(f"ok {pkg}: {desc}")
        except ImportError:
            typer.echo(f"missing {pkg}: {desc}")
            missing.append(pkg)

    if missing:
        fail(f"Missing TUI dependencies: {', '.join(missing)}")
    typer.echo("\nAll TUI dependencies are available")
    typer.echo("Run 'worklog ui' to launch")
