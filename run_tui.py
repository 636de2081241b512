#!/usr/bin/env python3
"""Launcher script for the Worklog TUI."""

import sys
from pathlib import Path

# Add src to path
src_path = Path(__file__).parent / "src"
sys.path.insert(0, str(src_path))

if __name__ == "__main__":
    from worklog.config import get_settings
    from worklog.tui.app import WorklogTUI
    from worklog.utils.logging import configure_from_settings

    settings = get_settings()
    configure_from_settings(settings)
    print("Starting Worklog TUI...")
    WorklogTUI(settings).run()
