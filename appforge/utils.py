"""Shared utility functions for appforge.

Provides command execution, JSON loading, application name/path helpers and
Rich-based console reporting used by the CLI and the server launcher.
"""

from __future__ import annotations

import json
import os
import subprocess
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.rule import Rule
from rich.table import Table

console = Console()

# ---------------------------------------------------------------------------
# Command execution
# ---------------------------------------------------------------------------


def run_command(
    cmd: list[str],
    cwd: str | Path | None = None,
    env: dict[str, str] | None = None,
) -> int:
    """Run a command in the foreground, inheriting the parent's streams.

    Args:
        cmd: List of arguments, program first.
        cwd: Working directory for the child process.
        env: Optional extra environment variables merged on top of ``os.environ``.

    Returns:
        The child's exit status.  ``130`` if interrupted with Ctrl-C.
    """
    merged_env: dict[str, str] | None = None
    if env:
        merged_env = {**os.environ, **env}

    try:
        completed = subprocess.run(
            cmd,
            cwd=str(cwd) if cwd else None,
            env=merged_env,
            check=False,
        )
    except KeyboardInterrupt:
        return 130
    return completed.returncode


# ---------------------------------------------------------------------------
# Application name / path helpers
# ---------------------------------------------------------------------------


def contains_path(value: str) -> bool:
    """Return ``True`` if *value* looks like a path rather than a bare name."""
    return os.sep in value or "/" in value


def split_app_path(value: str) -> tuple[Path, Path, str]:
    """Split an application path into ``(parent, app_path, app_name)``.

    Examples::

        split_app_path("/home/john/blog") -> (Path("/home/john"), Path("/home/john/blog"), "blog")
    """
    app_path = Path(value).expanduser().resolve()
    return app_path.parent, app_path, app_path.name


def is_number(value: str) -> bool:
    """Return ``True`` if *value* parses as an integer."""
    try:
        int(value)
    except ValueError:
        return False
    return True


# ---------------------------------------------------------------------------
# JSON I/O
# ---------------------------------------------------------------------------


def load_json(path: str | Path) -> dict[str, Any]:
    """Load and parse a JSON file.

    Raises:
        FileNotFoundError: If the file does not exist.
        json.JSONDecodeError: If the file is not valid JSON.
    """
    raw = Path(path).read_text(encoding="utf-8")
    data = json.loads(raw)
    if not isinstance(data, dict):
        return {"_root": data}
    return data


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


def print_banner(title: str, color: str = "bright_cyan") -> None:
    """Print a full-width rule with *title*."""
    console.print()
    console.print(Rule(f"[bold {color}] {title} [/bold {color}]", style=color))
    console.print()


def print_summary_table(data: dict[str, Any], title: str = "Summary") -> None:
    """Print a two-column key/value summary table."""
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Item", style="dim", no_wrap=True)
    table.add_column("Value")

    for key, value in data.items():
        table.add_row(escape(key), escape(str(value)))

    console.print(table)
    console.print()


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{escape(message)}[/bold green]")


def print_error(message: str) -> None:
    """Print a red error message."""
    console.print(f"[bold red]{escape(message)}[/bold red]")


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow]{escape(message)}[/bold yellow]")
