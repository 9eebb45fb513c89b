"""
mcspy/cli/ui/console.py - Rich console utilities

Report output goes to stdout (``console``); informational notes, progress
and logs go to stderr (``err_console``) so reports can be piped.
"""

import logging
import platform

from rich.console import Console
from rich.logging import RichHandler

from mcspy.core.parallel.quiet import is_quiet

HEADER_RULE = "._____________________________________________________________________________"


def get_console(stderr: bool = False) -> Console:
    """Create a Rich Console"""
    is_windows = platform.system().lower() == "windows"

    return Console(
        stderr=stderr,
        color_system="auto",
        highlight=False,
        soft_wrap=True,
        markup=True,
        emoji=not is_windows,
    )


# Global console instances
console = get_console()
err_console = get_console(stderr=True)


def get_logger(name: str = "mcspy") -> logging.Logger:
    """Return a logger with a Rich handler on stderr

    Args:
        name: Logger name (default: "mcspy")

    Returns:
        logging.Logger
    """
    logger = logging.getLogger(name)

    # Already configured
    if logger.handlers:
        return logger

    handler = RichHandler(console=err_console, rich_tracebacks=True, show_path=False)
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    logger.addHandler(handler)
    logger.propagate = False

    return logger


def configure_logging(verbose: bool = False) -> logging.Logger:
    """Set the mcspy log level (WARNING by default, INFO when verbose)"""
    logger = get_logger()
    logger.setLevel(logging.INFO if verbose else logging.WARNING)
    return logger


def print_header(title: str) -> None:
    """Print a section header"""
    if is_quiet():
        return
    console.print()
    console.print(HEADER_RULE, style="bright_black", markup=False)
    console.print(f"|  [green]{_escape(title)}[/green]", emoji=False)


def print_note(message: str) -> None:
    """Print an informational note on stderr"""
    if is_quiet():
        return
    err_console.print(message, style="bright_black", markup=False, emoji=False)


def print_warning(message: str) -> None:
    """Print a warning on stderr (shown even in quiet mode)"""
    err_console.print(message, style="yellow", markup=False, emoji=False)


def print_error(message: str) -> None:
    """Print an error on stderr"""
    err_console.print(message, style="red", markup=False, emoji=False)


def print_text(text: str) -> None:
    """Print text to stdout verbatim (no markup, no wrapping)"""
    console.print(text, markup=False, highlight=False, emoji=False, soft_wrap=True, end="")


def _escape(text: str) -> str:
    from rich.markup import escape

    return escape(text)
