"""
tests/core/parallel/test_parallel_quiet.py - mcspy/core/parallel/quiet.py tests
"""

import logging
import threading

from mcspy.core.parallel import is_quiet, quiet_mode, set_quiet


class _ListHandler(logging.Handler):
    def __init__(self):
        super().__init__()
        self.messages = []

    def emit(self, record):
        self.messages.append(record.getMessage())


class TestQuietState:
    """Thread-local quiet state tests"""

    def test_default(self):
        assert not is_quiet()

    def test_context_restores(self):
        with quiet_mode():
            assert is_quiet()
            with quiet_mode():
                assert is_quiet()
            assert is_quiet()
        assert not is_quiet()

    def test_thread_local(self):
        seen = []
        set_quiet(True)

        thread = threading.Thread(target=lambda: seen.append(is_quiet()))
        thread.start()
        thread.join()

        assert seen == [False]


class TestQuietLogFilter:
    """Log filtering tests"""

    def test_drops_below_error(self):
        logger = logging.getLogger("mcspy.test_quiet")
        handler = _ListHandler()
        parent = logging.getLogger("mcspy")
        parent.addHandler(handler)
        old_level = parent.level
        parent.setLevel(logging.INFO)
        try:
            with quiet_mode():
                logger.warning("hidden")
                logger.error("shown")
            logger.warning("after")
        finally:
            parent.removeHandler(handler)
            parent.setLevel(old_level)

        assert handler.messages == ["shown", "after"]
