"""
mcspy/cli/ui - console output helpers
"""

from .console import (
    configure_logging,
    console,
    err_console,
    get_logger,
    print_error,
    print_header,
    print_note,
    print_text,
    print_warning,
)
from .progress import ScanTracker, scan_progress

__all__ = [
    "ScanTracker",
    "configure_logging",
    "console",
    "err_console",
    "get_logger",
    "print_error",
    "print_header",
    "print_note",
    "print_text",
    "print_warning",
    "scan_progress",
]
