"""Reporting channel shared by every task invocation.

Decouples task execution from presentation. Tasks never print; they report
through a Reporter, and the Reporter decides how output looks.
"""

from typing import Protocol

from rich.console import Console
from rich.markup import escape

from aqua.utils.logging import logger


class Reporter(Protocol):
    """Global error/log channel interface."""

    def log(self, *args: object) -> None:
        """Informational output."""
        ...

    def warn(self, *args: object) -> None:
        """Warning output; the invocation continues or is skipped."""
        ...

    def error(self, *args: object) -> None:
        """A failure surfaced to the host. Must be called at most once per invocation."""
        ...


def format_args(args: tuple[object, ...]) -> str:
    """Join reporter arguments the way console.log does (space separated)."""
    parts = []
    for arg in args:
        if isinstance(arg, BaseException):
            parts.append(str(arg) or type(arg).__name__)
        elif arg is None:
            continue
        else:
            parts.append(str(arg))
    return " ".join(parts)


class ConsoleReporter:
    """Rich console reporter. This is the DEFAULT channel.

    Errors are also counted so the CLI can pick an exit code; they print
    even in quiet mode.
    """

    def __init__(self, console: Console | None = None, quiet: bool = False, colors: bool = True):
        if console is None:
            from aqua.pipeline.ui import console as shared_console

            console = shared_console
        self.console = console
        self.quiet = quiet
        self.colors = colors
        self.error_count = 0
        self.warning_count = 0

    def _print(self, prefix: str, style: str, message: str) -> None:
        if self.colors:
            self.console.print(f"[{style}]{prefix}[/{style}] {escape(message)}")
        else:
            self.console.print(f"{prefix} {message}", markup=False, highlight=False)

    def log(self, *args: object) -> None:
        message = format_args(args)
        logger.debug(message)
        if not self.quiet:
            if self.colors:
                self.console.print(message)
            else:
                self.console.print(message, markup=False, highlight=False)

    def warn(self, *args: object) -> None:
        self.warning_count += 1
        message = format_args(args)
        logger.debug(f"warn: {message}")
        if not self.quiet:
            self._print("WARNING:", "warning", message)

    def error(self, *args: object) -> None:
        self.error_count += 1
        message = format_args(args)
        logger.debug(f"error: {message}")
        self._print("ERROR:", "error", message)

    @property
    def failed(self) -> bool:
        """True once any error has been reported."""
        return self.error_count > 0
