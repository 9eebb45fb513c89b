"""
tests/core/parallel/test_parallel_errors.py - mcspy/core/parallel/errors.py tests
"""

import socket
import threading
from datetime import datetime

from mcspy.core.exceptions import ConnectionFailure, StorageError
from mcspy.core.parallel import CollectedError, ErrorCategory, ErrorCollector, categorize_error


class TestCategorizeError:
    """categorize_error tests"""

    def test_timeout_behind_connection_failure(self):
        error = ConnectionFailure("h:1", "stats", cause=socket.timeout("timed out"), connected=True)

        assert categorize_error(error) is ErrorCategory.TIMEOUT

    def test_refused(self):
        error = ConnectionFailure("h:1", "stats", cause=ConnectionRefusedError())

        assert categorize_error(error) is ErrorCategory.UNREACHABLE

    def test_without_cause(self):
        assert categorize_error(ConnectionFailure("h:1", "stats")) is ErrorCategory.UNREACHABLE

    def test_storage(self):
        assert categorize_error(StorageError("/x", "write")) is ErrorCategory.STORAGE

    def test_unknown(self):
        assert categorize_error(ValueError("x")) is ErrorCategory.UNKNOWN


class TestCollectedError:
    """CollectedError tests"""

    def test_str_with_slab(self):
        error = CollectedError(
            timestamp=datetime.now(),
            server="h:1",
            operation="cachedump",
            category=ErrorCategory.TIMEOUT,
            message="timed out",
            slab=4,
        )

        assert str(error) == "[TIMEOUT] h:1 slab 4 - cachedump: timed out"


class TestErrorCollector:
    """ErrorCollector tests"""

    def test_empty(self):
        collector = ErrorCollector("cachedump")

        assert not collector.has_errors
        assert collector.get_summary() == ""

    def test_summary_per_server(self):
        collector = ErrorCollector("cachedump")
        collector.collect(ConnectionFailure("a:1", "x"), "a:1")
        collector.collect(ConnectionFailure("b:1", "x", connected=True), "b:1", slab=2)
        collector.collect(ConnectionFailure("b:1", "x", connected=True), "b:1", slab=3)

        assert collector.failed_servers == ["a:1", "b:1"]
        assert collector.get_summary() == "cachedump: 3 failed request(s) skipped - a:1 (1), b:1 (2)"

    def test_thread_safe(self):
        collector = ErrorCollector("cachedump")

        def worker(i):
            for _ in range(50):
                collector.collect(ValueError("x"), f"s{i}")

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(collector.errors) == 200
