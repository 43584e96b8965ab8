"""Console output helpers built on rich."""

from rich.console import Console

_console = Console()
_err_console = Console(stderr=True)


def get_console() -> Console:
    """Get the shared stdout console."""
    return _console


def print_success(message: str) -> None:
    """Print a success message."""
    _console.print(f"[green]✓[/green] {message}")


def print_info(message: str) -> None:
    """Print an informational message."""
    _console.print(f"[cyan]ℹ[/cyan] {message}")


def print_warning(message: str, err: bool = False) -> None:
    """Print a warning message, to stderr when ``err`` is set."""
    (_err_console if err else _console).print(f"[yellow]⚠[/yellow] {message}")


def print_error(message: str) -> None:
    """Print an error message to stderr."""
    _err_console.print(f"[red]✗[/red] {message}")
