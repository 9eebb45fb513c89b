"""
mcspy/cli/ui/progress.py - Scan progress display

Thread-safe progress tracker for per-server scans, rendered on stderr with
success/failure counts.

Example:
    with scan_progress("Scanning slabs") as tracker:
        records = scanner.scan(progress_tracker=tracker)

    success, failed, total = tracker.stats
"""

from __future__ import annotations

import threading
from collections.abc import Generator
from contextlib import contextmanager
from typing import TYPE_CHECKING

from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    ProgressColumn,
    SpinnerColumn,
    Task,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)
from rich.text import Text

from mcspy.core.parallel.quiet import is_quiet

if TYPE_CHECKING:
    from rich.console import Console

from .console import err_console


class SuccessFailColumn(ProgressColumn):
    """Custom column showing success/fail counts: '4✓ 1✗'"""

    def __init__(self, tracker: ScanTracker) -> None:
        super().__init__()
        self._tracker = tracker

    def render(self, task: Task) -> Text:
        success, failed, _ = self._tracker.stats
        text = Text()
        text.append(f"{success}", style="green")
        text.append("✓ ", style="green")
        text.append(f"{failed}", style="red")
        text.append("✗", style="red")
        return text


class ScanTracker:
    """Thread-safe per-server progress tracker

    A tracker without a Progress (quiet mode) only counts.
    """

    def __init__(self, progress: Progress | None = None, task_id: TaskID | None = None) -> None:
        self._progress = progress
        self._task_id = task_id
        self._lock = threading.Lock()
        self._success = 0
        self._failed = 0
        self._total = 0

    def attach(self, progress: Progress, task_id: TaskID) -> None:
        self._progress = progress
        self._task_id = task_id

    def set_total(self, total: int) -> None:
        """Set the number of servers to scan"""
        with self._lock:
            self._total = total
            if self._progress is not None and self._task_id is not None:
                self._progress.update(self._task_id, total=total)

    def on_server_complete(self, success: bool) -> None:
        """Record one finished server (callable from worker threads)"""
        with self._lock:
            if success:
                self._success += 1
            else:
                self._failed += 1
            if self._progress is not None and self._task_id is not None:
                self._progress.update(self._task_id, completed=self._success + self._failed)

    @property
    def stats(self) -> tuple[int, int, int]:
        """(success, failed, total)"""
        with self._lock:
            return (self._success, self._failed, self._total)


@contextmanager
def scan_progress(
    description: str,
    console: Console | None = None,
) -> Generator[ScanTracker, None, None]:
    """Context manager showing scan progress on stderr

    In quiet mode nothing is rendered but the tracker still counts.
    """
    tracker = ScanTracker()
    if is_quiet():
        yield tracker
        return

    progress = Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        SuccessFailColumn(tracker),
        TextColumn("/"),
        MofNCompleteColumn(),
        BarColumn(),
        TimeElapsedColumn(),
        console=console or err_console,
        transient=True,
    )
    with progress:
        tracker.attach(progress, progress.add_task(description, total=None))
        yield tracker
