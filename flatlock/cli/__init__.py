"""CLI module for flatlock.

Options can be given as arguments or FLATLOCK_* environment variables.
"""

from .main import cli, format_dependencies, main

__all__ = [
    "cli",
    "main",
    "format_dependencies",
]
