"""Rich console utilities for the flatlock command line.

Tables go to stdout through `console`; errors and summaries go to stderr
through `err_console` so that piped listings stay machine-readable.
"""

from typing import Any, List, Optional, Tuple

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.theme import Theme

from .tool_checks import ToolRegistry


custom_theme = Theme(
    {
        "info": "cyan",
        "warning": "yellow",
        "error": "bold red",
        "success": "bold green",
        "highlight": "magenta",
    }
)

console = Console(theme=custom_theme, soft_wrap=True, highlight=False)
err_console = Console(theme=custom_theme, stderr=True, highlight=False)


def print_error(message: str, title: Optional[str] = None) -> None:
    """
    Print an error to stderr.

    Args:
        message: Error message
        title: Optional prefix, e.g. the exception class
    """
    prefix = f"Error ({title})" if title else "Error"
    err_console.print(f"[error]{prefix}:[/error] {escape(message)}")


def print_warning(message: str) -> None:
    err_console.print(f"[warning]Warning:[/warning] {escape(message)}")


def print_summary_table(
    title: str,
    data: List[Tuple[str, Any]],
    show_if_empty: bool = False,
) -> None:
    """
    Print a summary table to stderr.

    Args:
        title: Table title
        data: List of (label, value) tuples
        show_if_empty: Whether to show the table if all values are 0/empty
    """
    if not show_if_empty:
        data = [(label, value) for label, value in data if value]

    if not data:
        return

    table = Table(title=title, show_header=True, header_style="bold")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    for label, value in data:
        table.add_row(label, str(value))

    err_console.print(table)


def print_tool_table(registry: ToolRegistry) -> None:
    """Print which package manager CLIs are installed."""
    table = Table(title="Package managers", show_header=True, header_style="bold")
    table.add_column("Tool", style="cyan")
    table.add_column("Status")
    table.add_column("Lockfiles")
    table.add_column("Path / install")

    for status in registry.statuses.values():
        lockfiles = ", ".join(str(t) for t in status.info.lockfile_types) if status.info else ""
        if status.available:
            state = "[success]available[/success]"
            detail = status.path or ""
        else:
            state = "[warning]missing[/warning]"
            detail = status.info.homepage if status.info else ""
        table.add_row(status.name, state, lockfiles, detail)

    console.print(table)
