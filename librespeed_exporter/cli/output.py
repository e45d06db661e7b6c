"""Output formatting utilities for CLI."""

from typing import Any

from rich.console import Console
from rich.table import Table

console = Console()
console_err = Console(stderr=True)


def print_dict(data: dict[str, Any], title: str | None = None) -> None:
    """Print dictionary as a formatted table.

    Args:
        data: Dictionary to display
        title: Optional table title
    """
    table = Table(title=title, show_header=False)
    table.add_column("Key", style="cyan", no_wrap=True)
    table.add_column("Value", style="white")

    for key, value in data.items():
        table.add_row(key, "" if value is None else str(value))

    console.print(table)


def print_success(message: str) -> None:
    """Print success message with checkmark.

    Args:
        message: Success message to display
    """
    console.print(f"[green]✓[/green] {message}")


def print_error(message: str) -> None:
    """Print error message with X mark.

    Args:
        message: Error message to display
    """
    console_err.print(f"[red]✗[/red] {message}")
