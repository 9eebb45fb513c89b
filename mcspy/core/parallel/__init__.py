"""
mcspy/core/parallel - per-server parallel execution

Example:
    from mcspy.core.parallel import ParallelConfig, ServerExecutor

    result = ServerExecutor(ParallelConfig(max_workers=4)).execute(scan_server, servers)
    print(f"ok: {result.success_count}, failed: {result.error_count}")
"""

from .errors import CollectedError, ErrorCollector, categorize_error
from .executor import ParallelConfig, ServerExecutor
from .quiet import is_quiet, quiet_mode, set_quiet
from .types import ErrorCategory, ParallelExecutionResult, TaskError, TaskResult

__all__ = [
    "CollectedError",
    "ErrorCategory",
    "ErrorCollector",
    "ParallelConfig",
    "ParallelExecutionResult",
    "ServerExecutor",
    "TaskError",
    "TaskResult",
    "categorize_error",
    "is_quiet",
    "quiet_mode",
    "set_quiet",
]
