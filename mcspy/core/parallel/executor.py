"""
mcspy/core/parallel/executor.py - Bounded per-server executor

Runs one task per server on a ThreadPoolExecutor. Parallelism is only ever
across servers: a task receives a single server and does all of that
server's work sequentially.

Results are returned in submission order regardless of completion order.

Example:
    def scan_server(server):
        return [record for slab in slabs for record in scan_slab(server, slab)]

    executor = ServerExecutor(ParallelConfig(max_workers=4))
    result = executor.execute(scan_server, config.servers)
    records = [r for chunk in result.get_data() for r in chunk]
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import TYPE_CHECKING, TypeVar

from mcspy.core.config import ServerAddress
from mcspy.core.exceptions import is_fatal

from .errors import categorize_error
from .quiet import is_quiet, set_quiet
from .types import ParallelExecutionResult, TaskError, TaskResult

if TYPE_CHECKING:
    from mcspy.cli.ui.progress import ScanTracker

logger = logging.getLogger(__name__)

T = TypeVar("T")

MAX_WORKERS_LIMIT = 32


@dataclass
class ParallelConfig:
    """Parallel execution settings

    Attributes:
        max_workers: Maximum concurrent servers (1~32)
    """

    max_workers: int = 1

    def __post_init__(self) -> None:
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {self.max_workers}")
        if self.max_workers > MAX_WORKERS_LIMIT:
            self.max_workers = MAX_WORKERS_LIMIT


class ServerExecutor:
    """Run one task per server with a bounded worker pool"""

    def __init__(self, config: ParallelConfig | None = None):
        self.config = config or ParallelConfig()

    def execute(
        self,
        func: Callable[[ServerAddress], T],
        servers: Sequence[ServerAddress],
        progress_tracker: ScanTracker | None = None,
    ) -> ParallelExecutionResult[T]:
        """Run ``func(server)`` for every server

        Task exceptions become failed TaskResults, except fatal ones
        (StorageError, unexpected errors) which are re-raised after all
        submitted tasks have finished.

        Args:
            func: Per-server task
            servers: Servers in submission order
            progress_tracker: Optional tracker notified on every completion

        Returns:
            ParallelExecutionResult with results in submission order
        """
        if not servers:
            logger.warning("No servers to run")
            return ParallelExecutionResult()

        workers = min(self.config.max_workers, len(servers))
        logger.info(f"Running {len(servers)} server task(s), max_workers={workers}")

        results: list[TaskResult[T] | None] = [None] * len(servers)
        fatal: Exception | None = None
        start_time = time.monotonic()

        # propagate the parent thread quiet state to workers
        parent_quiet = is_quiet()

        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = {
                executor.submit(self._execute_single, func, server, parent_quiet): i
                for i, server in enumerate(servers)
            }

            for future in as_completed(futures):
                index = futures[future]
                result = future.result()
                results[index] = result

                if progress_tracker:
                    progress_tracker.on_server_complete(result.success)

                if result.error and result.error.original_exception:
                    if is_fatal(result.error.original_exception) and fatal is None:
                        fatal = result.error.original_exception

        if fatal is not None:
            raise fatal

        exec_result = ParallelExecutionResult(results=tuple(r for r in results if r is not None))
        total_time = (time.monotonic() - start_time) * 1000
        logger.info(
            f"Server tasks finished: {exec_result.success_count} ok, {exec_result.error_count} failed, {total_time:.0f}ms"
        )
        return exec_result

    @staticmethod
    def _execute_single(
        func: Callable[[ServerAddress], T],
        server: ServerAddress,
        quiet: bool = False,
    ) -> TaskResult[T]:
        """Run one task inside a worker thread"""
        set_quiet(quiet)
        start_time = time.monotonic()
        try:
            data = func(server)
            return TaskResult(
                identifier=str(server),
                success=True,
                data=data,
                duration_ms=(time.monotonic() - start_time) * 1000,
            )
        except Exception as e:
            return TaskResult(
                identifier=str(server),
                success=False,
                error=TaskError(
                    identifier=str(server),
                    category=categorize_error(e),
                    message=str(e),
                    original_exception=e,
                ),
                duration_ms=(time.monotonic() - start_time) * 1000,
            )
