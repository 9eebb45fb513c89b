"""
mcspy/core/parallel/types.py - Parallel execution result types
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar("T")


class ErrorCategory(Enum):
    """Failure categories"""

    UNREACHABLE = "unreachable"
    TIMEOUT = "timeout"
    STORAGE = "storage"
    UNKNOWN = "unknown"


@dataclass
class TaskError:
    """Error information of a failed task"""

    identifier: str
    category: ErrorCategory
    message: str
    original_exception: Exception | None = None

    def __str__(self) -> str:
        return f"[{self.identifier}] {self.category.value}: {self.message}"


@dataclass
class TaskResult(Generic[T]):
    """Result of one task

    Attributes:
        identifier: Task identifier (server address)
        success: Whether the task finished without raising
        data: Returned data on success
        error: Error information on failure
        duration_ms: Elapsed time in milliseconds
    """

    identifier: str
    success: bool
    data: T | None = None
    error: TaskError | None = None
    duration_ms: float = 0.0


@dataclass
class ParallelExecutionResult(Generic[T]):
    """Aggregated results of a parallel run, in submission order"""

    results: tuple[TaskResult[T], ...] = field(default_factory=tuple)

    @property
    def success_count(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def error_count(self) -> int:
        return sum(1 for r in self.results if not r.success)

    def get_data(self) -> list[T]:
        """Data of successful tasks"""
        return [r.data for r in self.results if r.success and r.data is not None]

    def get_errors(self) -> list[TaskError]:
        """Errors of failed tasks"""
        return [r.error for r in self.results if r.error is not None]
