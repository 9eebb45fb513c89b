"""
mcspy/core/parallel/quiet.py - Console output suppression

``--quiet`` runs the command inside quiet_mode(). Output helpers check
is_quiet() and log records below ERROR are filtered out.

Example:
    from mcspy.core.parallel.quiet import quiet_mode, is_quiet

    with quiet_mode():
        run_report(config)

    if not is_quiet():
        console.print("message")
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Generator
from contextlib import contextmanager

# Thread-local quiet state
_quiet_state = threading.local()

# Filter reference count (nested / concurrent quiet_mode)
_filter_refcount = 0
_filter_lock = threading.Lock()

LOGGER_NAME = "mcspy"


class _QuietFilter(logging.Filter):
    """Drop records below ERROR while the emitting thread is quiet"""

    def filter(self, record: logging.LogRecord) -> bool:
        return not (is_quiet() and record.levelno < logging.ERROR)


_quiet_filter = _QuietFilter()


def is_quiet() -> bool:
    """Whether the current thread suppresses console output"""
    return getattr(_quiet_state, "quiet", False)


def set_quiet(value: bool) -> None:
    """Set the quiet state of the current thread"""
    _quiet_state.quiet = value


def _handlers() -> list[logging.Handler]:
    return list(logging.getLogger(LOGGER_NAME).handlers) + list(logging.getLogger().handlers)


@contextmanager
def quiet_mode() -> Generator[None, None, None]:
    """Suppress console output inside the block

    The log filter is attached to the mcspy and root handlers with reference
    counting, so an inner quiet_mode() exiting does not remove the filter of
    an outer one.
    """
    global _filter_refcount

    old_value = is_quiet()
    set_quiet(True)

    with _filter_lock:
        _filter_refcount += 1
        if _filter_refcount == 1:
            for handler in _handlers():
                handler.addFilter(_quiet_filter)

    try:
        yield
    finally:
        set_quiet(old_value)
        with _filter_lock:
            _filter_refcount -= 1
            if _filter_refcount == 0:
                for handler in _handlers():
                    handler.removeFilter(_quiet_filter)
