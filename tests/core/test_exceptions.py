"""
tests/core/test_exceptions.py - mcspy/core/exceptions.py tests
"""

from mcspy.core.exceptions import (
    ConfigError,
    ConnectionFailure,
    McSpyError,
    StorageError,
    ValidationError,
    format_error_for_user,
    is_fatal,
)


class TestMcSpyError:
    """Base exception tests"""

    def test_message_and_cause(self):
        cause = OSError("disk full")
        error = McSpyError("failed", cause=cause)

        assert str(error) == "failed: disk full"
        assert error.cause is cause

    def test_to_dict(self):
        error = StorageError(path="/tmp/x", operation="write")
        data = error.to_dict()

        assert data["error_type"] == "StorageError"
        assert data["cause"] is None
        assert data["details"] == {"path": "/tmp/x", "operation": "write"}


class TestSubclasses:
    """Exception subclass tests"""

    def test_connection_failure(self):
        error = ConnectionFailure("h:1", "stats", cause=ConnectionRefusedError("refused"))

        assert isinstance(error, McSpyError)
        assert error.connected is False
        assert "h:1" in str(error)
        assert error.details["command"] == "stats"

    def test_connection_failure_connected(self):
        assert ConnectionFailure("h:1", "stats", connected=True).connected is True

    def test_config_error(self):
        error = ConfigError("servers", "bad port")

        assert error.config_key == "servers"
        assert "bad port" in str(error)

    def test_validation_error(self):
        error = ValidationError("slab", 99, "1..42")

        assert error.field == "slab"
        assert error.details["value"] == "99"


class TestIsFatal:
    """is_fatal tests"""

    def test_storage_is_fatal(self):
        assert is_fatal(StorageError("/x", "write"))

    def test_connection_is_recovered(self):
        assert not is_fatal(ConnectionFailure("h:1", "stats"))

    def test_unexpected_is_fatal(self):
        assert is_fatal(KeyError("x"))


class TestFormatErrorForUser:
    """format_error_for_user tests"""

    def test_mcspy_error(self):
        assert format_error_for_user(ConfigError("servers", "bad")) == "Config error [servers]: bad"

    def test_os_error(self):
        assert format_error_for_user(PermissionError(13, "Permission denied")) == "PermissionError: Permission denied"

    def test_other(self):
        assert format_error_for_user(ValueError("nope")) == "ValueError: nope"
