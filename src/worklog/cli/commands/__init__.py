"""
CLI commands module.

Command submodules are imported directly by main.py.
"""

__all__ = [
    "timer",
    "ui",
]
