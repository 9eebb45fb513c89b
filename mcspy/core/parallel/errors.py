"""
mcspy/core/parallel/errors.py - Recovered error collection

Failures that do not abort a scan (unreachable server, slab timeout) are
collected here so the command can print one summary note at the end instead
of failing.

Example:
    collector = ErrorCollector("cachedump")

    try:
        raw = client.exchange(server, "stats cachedump 3 0")
    except ConnectionFailure as e:
        collector.collect(e, str(server), slab=3)

    if collector.has_errors:
        print(collector.get_summary())
"""

from __future__ import annotations

import logging
import socket
import threading
from dataclasses import dataclass
from datetime import datetime

from mcspy.core.exceptions import ConnectionFailure, StorageError

from .types import ErrorCategory

logger = logging.getLogger(__name__)


@dataclass
class CollectedError:
    """A recovered failure

    Attributes:
        timestamp: When the failure was recorded
        server: Server address
        operation: Operation name (e.g. "cachedump")
        category: Failure category
        message: Error message
        slab: Slab id, when the failure is slab specific
    """

    timestamp: datetime
    server: str
    operation: str
    category: ErrorCategory
    message: str
    slab: int | None = None

    def __str__(self) -> str:
        loc = self.server if self.slab is None else f"{self.server} slab {self.slab}"
        return f"[{self.category.value.upper()}] {loc} - {self.operation}: {self.message}"


def categorize_error(error: Exception) -> ErrorCategory:
    """Map an exception to an ErrorCategory"""
    if isinstance(error, ConnectionFailure):
        error = error.cause or error
    if isinstance(error, (socket.timeout, TimeoutError)):
        return ErrorCategory.TIMEOUT
    if isinstance(error, (ConnectionError, OSError, ConnectionFailure)):
        return ErrorCategory.UNREACHABLE
    if isinstance(error, StorageError):
        return ErrorCategory.STORAGE
    return ErrorCategory.UNKNOWN


class ErrorCollector:
    """Thread-safe collector of recovered failures"""

    def __init__(self, operation: str):
        self.operation = operation
        self._errors: list[CollectedError] = []
        self._lock = threading.Lock()

    def collect(self, error: Exception, server: str, slab: int | None = None) -> None:
        """Record a failure"""
        collected = CollectedError(
            timestamp=datetime.now(),
            server=server,
            operation=self.operation,
            category=categorize_error(error),
            message=str(error),
            slab=slab,
        )
        with self._lock:
            self._errors.append(collected)
        logger.info(str(collected))

    @property
    def errors(self) -> list[CollectedError]:
        with self._lock:
            return list(self._errors)

    @property
    def has_errors(self) -> bool:
        with self._lock:
            return bool(self._errors)

    @property
    def failed_servers(self) -> list[str]:
        """Servers with at least one failure, in first-failure order"""
        seen: dict[str, None] = {}
        for error in self.errors:
            seen.setdefault(error.server, None)
        return list(seen)

    def get_summary(self) -> str:
        """One-line summary for the terminal"""
        errors = self.errors
        if not errors:
            return ""

        by_server: dict[str, int] = {}
        for error in errors:
            by_server[error.server] = by_server.get(error.server, 0) + 1

        parts = [f"{server} ({count})" for server, count in by_server.items()]
        return f"{self.operation}: {len(errors)} failed request(s) skipped - " + ", ".join(parts)
