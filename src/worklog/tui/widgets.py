"""Header timer widget."""

from __future__ import annotations

from rich.text import Text
from textual.widgets import Static


class TimerDisplay(Static):
    """Persistent HH:MM:SS clock shown in the header."""

    DEFAULT_CSS = """
    TimerDisplay {
        width: 100%;
        height: 3;
        content-align: center middle;
        text-style: bold;
        border: round $panel;
    }

    TimerDisplay.-running {
        border: round $success;
        color: $success;
    }

    TimerDisplay.-loading {
        color: $warning;
    }
    """

    def __init__(self, *, id: str | None = None, classes: str | None = None):
        super().__init__("00:00:00", id=id, classes=classes)

    def show(self, formatted_time: str, running: bool = False, loading: bool = False) -> None:
        """Render the clock for the given controller signal."""
        self.set_class(running, "-running")
        self.set_class(loading, "-loading")
        marker = "●" if running else "○"
        label = Text(f"{marker} {formatted_time}")
        if loading:
            label.append("  …", style="dim")
        self.update(label)
