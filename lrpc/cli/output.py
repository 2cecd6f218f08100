"""Rich-based output utilities for the lrpc CLI."""

import json
from typing import Any

from rich.console import Console
from rich.markup import escape

# Results go to stdout, diagnostics to stderr
console = Console()
err_console = Console(stderr=True)


def print_json(data: Any) -> None:
    """Pretty-print data as JSON to stdout."""
    console.print_json(json.dumps(data))


def print_error(message: str) -> None:
    """Print an error message in red to stderr."""
    err_console.print(f"[bold red]Error:[/bold red] {escape(message)}", highlight=False)


def print_info(message: str) -> None:
    """Print an informational message to stderr."""
    err_console.print(f"[dim]{escape(message)}[/dim]", highlight=False)
