"""Rich console helpers for terminal output and logging."""

import logging
from typing import Any

from rich.console import Console as RichConsole
from rich.logging import RichHandler


class Console:
    """Wrapper around rich.Console with convenience methods."""

    def __init__(self) -> None:
        self._console = RichConsole()
        self._json_mode = False

    def set_json_mode(self, enabled: bool) -> None:
        """Enable or disable JSON mode (suppresses rich output)."""
        self._json_mode = enabled

    def print(self, *args: Any, **kwargs: Any) -> None:
        """Print to console (suppressed in JSON mode)."""
        if not self._json_mode:
            self._console.print(*args, **kwargs)

    def print_success(self, message: str) -> None:
        """Print a success message in green."""
        if not self._json_mode:
            self._console.print(f"[green]✓[/green] {message}")

    def print_error(self, message: str) -> None:
        """Print an error message in red."""
        if not self._json_mode:
            self._console.print(f"[red]✗[/red] {message}")

    def print_info(self, message: str) -> None:
        """Print an info message in blue."""
        if not self._json_mode:
            self._console.print(f"[blue]ℹ[/blue] {message}")


# Global console instance
console = Console()


def setup_logging(verbose: bool = False) -> logging.Logger:
    """Route the package logger through rich.

    Args:
        verbose: Show DEBUG output (including sdkmanager output).

    Returns:
        The configured package logger.
    """
    logger = logging.getLogger("unity_provision")
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)

    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        handler = RichHandler(
            console=RichConsole(stderr=True),
            show_path=False,
            markup=False,
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)

    return logger
