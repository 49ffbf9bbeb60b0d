"""Rich-based console display utilities."""

from contextlib import contextmanager
from typing import Any, Generator

from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table

console = Console()
error_console = Console(stderr=True)


def create_processing_progress() -> Progress:
    """Progress bar for batch processing operations."""
    return Progress(
        SpinnerColumn(),
        TextColumn("[bold cyan]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        "•",
        TimeElapsedColumn(),
        console=console,
        transient=False,
    )


@contextmanager
def status_spinner(message: str) -> Generator[None, None, None]:
    """Simple spinner for indeterminate operations.

    Usage:
        with status_spinner("Fetching stations..."):
            do_something()
    """
    with console.status(message, spinner="dots"):
        yield


def print_summary_table(title: str, data: dict[str, Any]) -> None:
    """Print a formatted summary table.

    Args:
        title: Table title
        data: Dictionary of metric names to values
    """
    table = Table(title=title)
    table.add_column("Metric", style="cyan", no_wrap=True)
    table.add_column("Value", style="green")
    for key, value in data.items():
        table.add_row(key, str(value))
    console.print(table)


def print_error(message: str) -> None:
    """Print an error message in red on stderr."""
    error_console.print(f"[bold red]Error:[/bold red] {message}", highlight=False)


def print_success(message: str) -> None:
    """Print a success message in green."""
    console.print(f"[bold green]✓[/bold green] {message}")


def print_warning(message: str) -> None:
    """Print a warning message in yellow."""
    console.print(f"[bold yellow]Warning:[/bold yellow] {message}")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[bold blue]ℹ[/bold blue] {message}")
