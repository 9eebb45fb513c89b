"""
tests/core/parallel/test_executor.py - mcspy/core/parallel/executor.py tests
"""

import threading
import time
from unittest.mock import MagicMock

import pytest

from mcspy.core.config import ServerAddress
from mcspy.core.exceptions import ConnectionFailure, StorageError
from mcspy.core.parallel import (
    ErrorCategory,
    ParallelConfig,
    ServerExecutor,
    is_quiet,
    quiet_mode,
)

SERVERS = [ServerAddress(f"10.0.0.{i}") for i in range(1, 5)]


class TestParallelConfig:
    """ParallelConfig tests"""

    def test_default_is_sequential(self):
        assert ParallelConfig().max_workers == 1

    def test_capped(self):
        assert ParallelConfig(max_workers=100).max_workers == 32

    def test_invalid(self):
        with pytest.raises(ValueError):
            ParallelConfig(max_workers=0)


class TestServerExecutor:
    """ServerExecutor tests"""

    def test_results_in_submission_order(self):
        def task(server):
            # later servers finish first
            time.sleep(0.01 * (5 - int(server.host.rsplit(".", 1)[1])))
            return server.host

        result = ServerExecutor(ParallelConfig(max_workers=4)).execute(task, SERVERS)

        assert result.get_data() == [s.host for s in SERVERS]
        assert result.success_count == 4

    def test_bounded_workers(self):
        active = []
        peak = []
        lock = threading.Lock()

        def task(server):
            with lock:
                active.append(server)
                peak.append(len(active))
            time.sleep(0.02)
            with lock:
                active.remove(server)

        ServerExecutor(ParallelConfig(max_workers=2)).execute(task, SERVERS)

        assert max(peak) <= 2

    def test_recovered_failure(self):
        def task(server):
            if server == SERVERS[1]:
                raise ConnectionFailure(str(server), "stats", cause=ConnectionRefusedError())
            return 1

        result = ServerExecutor().execute(task, SERVERS)

        assert result.error_count == 1
        assert result.get_data() == [1, 1, 1]
        error = result.get_errors()[0]
        assert error.identifier == str(SERVERS[1])
        assert error.category is ErrorCategory.UNREACHABLE

    def test_fatal_error_reraised_after_all_tasks(self):
        seen = []

        def task(server):
            seen.append(server)
            if server == SERVERS[0]:
                raise StorageError("/dump", "write")
            return 1

        with pytest.raises(StorageError):
            ServerExecutor().execute(task, SERVERS)

        assert seen == SERVERS

    def test_unexpected_error_is_fatal(self):
        def task(server):
            raise KeyError("boom")

        with pytest.raises(KeyError):
            ServerExecutor().execute(task, SERVERS[:1])

    def test_no_servers(self):
        result = ServerExecutor().execute(lambda s: 1, [])

        assert result.results == ()

    def test_progress_tracker(self):
        tracker = MagicMock()

        def task(server):
            if server == SERVERS[0]:
                raise ConnectionFailure(str(server), "stats")
            return 1

        ServerExecutor(ParallelConfig(max_workers=2)).execute(task, SERVERS, progress_tracker=tracker)

        calls = sorted(call.args[0] for call in tracker.on_server_complete.call_args_list)
        assert calls == [False, True, True, True]

    def test_quiet_state_propagates_to_workers(self):
        states = []

        with quiet_mode():
            ServerExecutor(ParallelConfig(max_workers=2)).execute(lambda s: states.append(is_quiet()), SERVERS)

        assert states == [True] * 4
        assert not is_quiet()
