"""
Console output utilities for regkeeper using Rich.

User-facing status lines, the support table and the issue summary.
Diagnostics go through :mod:`regkeeper.utils.logger` instead.
"""

from __future__ import annotations

import os
import sys
import threading
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from rich.table import Table
from rich.theme import Theme
from rich.console import Console

REGKEEPER_THEME = Theme(
    {
        "success": "bold green",
        "error": "bold red",
        "warning": "bold yellow",
        "info": "bold cyan",
        "dim": "dim",
        "highlight": "bold magenta",
    }
)

_console: Optional[Console] = None
_console_lock = threading.Lock()


def _should_use_color() -> bool:
    """Return True if colored output should be enabled."""
    if os.environ.get("NO_COLOR"):
        return False
    if os.environ.get("CI"):
        return False
    try:
        return sys.stdout.isatty()
    except (AttributeError, OSError):
        return False


def _get_console() -> Console:
    """Return a singleton Rich Console instance."""
    global _console

    if _console is None:
        with _console_lock:
            if _console is None:
                use_color = _should_use_color()
                _console = Console(
                    theme=REGKEEPER_THEME,
                    no_color=not use_color,
                    highlight=use_color,
                )
    return _console


def reconfigure_console() -> None:
    """Drop the cached console so the next call re-reads the environment."""
    global _console
    with _console_lock:
        _console = None


def get_raw_console() -> Console:
    """Return the underlying Rich Console instance."""
    return _get_console()


def print_success(message: str, *, prefix: str = "[OK]") -> None:
    """Print a success message."""
    _get_console().print(f"{prefix} {message}", style="success")


def print_error(message: str, *, prefix: str = "[ERROR]") -> None:
    """Print an error message."""
    _get_console().print(f"{prefix} {message}", style="error")


def print_warning(message: str, *, prefix: str = "[WARNING]") -> None:
    """Print a warning message."""
    _get_console().print(f"{prefix} {message}", style="warning")


def print_table(
    data: List[Dict[str, Any]],
    *,
    headers: Optional[List[str]] = None,
    title: Optional[str] = None,
    caption: Optional[str] = None,
    column_styles: Optional[Dict[str, Dict[str, Any]]] = None,
    row_styler: Optional[Callable[[Dict[str, Any]], Optional[str]]] = None,
) -> None:
    """Render structured data as a Rich table.

    Args:
        data: List of row dictionaries.
        headers: Column order. Defaults to keys of the first row.
        title: Optional table title.
        caption: Optional table caption.
        column_styles: Per-column style configuration.
        row_styler: Optional callback returning a row style.
    """
    if not data:
        return

    if headers is None:
        headers = list(data[0].keys())

    table = Table(title=title, caption=caption, show_header=True, header_style="bold")

    column_styles = column_styles or {}
    for header in headers:
        config = column_styles.get(header, {})
        table.add_column(
            header,
            style=config.get("style"),
            justify=config.get("justify", "default"),
            no_wrap=config.get("no_wrap", False),
            overflow=config.get("overflow", "fold"),
        )

    for row in data:
        values = [str(row.get(h, "")) for h in headers]
        style = row_styler(row) if row_styler else None
        table.add_row(*values, style=style)

    _get_console().print(table)


def print_issue_summary(issues: Mapping[str, Sequence[str]]) -> None:
    """Print per-entry issue notes grouped by catalog id."""
    if not issues:
        return

    console = _get_console()
    console.print(
        f"\nIssues encountered for {len(issues)} repositories:", style="warning"
    )
    for package_id, notes in issues.items():
        console.print(f"  {package_id}:", style="highlight")
        for note in notes:
            console.print(f"    - {note}", markup=False)


def format_support_flag(supported: bool) -> str:
    """Return a Rich-markup label for an epoch support flag."""
    return "[green]yes[/green]" if supported else "[dim]no[/dim]"
