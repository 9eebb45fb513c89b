"""
mcspy/core/exceptions.py - Exception hierarchy

Exceptions shared by every stage of the scan/report pipeline.

Hierarchy:
    McSpyError (base)
    ├── ConnectionFailure (server unreachable or timed out)
    ├── StorageError (dump folder / snapshot file I/O)
    ├── ConfigError (invalid configuration value)
    └── ValidationError (invalid user input)

Only StorageError is fatal. ConnectionFailure is recovered by the caller:
the server (or slab) simply contributes no records.

Usage:
    from mcspy.core.exceptions import StorageError

    try:
        path.write_text(content)
    except OSError as e:
        raise StorageError(path=str(path), operation="write", cause=e) from e
"""

from typing import Any, Dict, Optional

# =============================================================================
# Base exception
# =============================================================================


class McSpyError(Exception):
    """Base class for all mcspy errors

    Attributes:
        message: Error message
        cause: Originating exception (for chaining)
        details: Extra context
    """

    def __init__(
        self,
        message: str,
        cause: Optional[Exception] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.details = details or {}

    def __str__(self) -> str:
        if self.cause:
            return f"{self.message}: {self.cause}"
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        """Return the error as a dictionary"""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "cause": str(self.cause) if self.cause else None,
            "details": self.details,
        }


# =============================================================================
# Network
# =============================================================================


class ConnectionFailure(McSpyError):
    """A server could not be reached or did not answer in time

    Attributes:
        connected: False when the TCP connect itself failed, True when the
            connection was established but the exchange failed (read timeout,
            reset, truncated response)
    """

    def __init__(
        self,
        server: str,
        command: str,
        cause: Optional[Exception] = None,
        connected: bool = False,
    ):
        super().__init__(f"Connection failed [{server}] '{command}'", cause)
        self.server = server
        self.command = command
        self.connected = connected
        self.details.update({"server": server, "command": command, "connected": connected})


# =============================================================================
# Storage
# =============================================================================


class StorageError(McSpyError):
    """Dump folder or snapshot file could not be created, read or written"""

    def __init__(
        self,
        path: str,
        operation: str,
        cause: Optional[Exception] = None,
    ):
        super().__init__(f"Storage error [{operation}] {path}", cause)
        self.path = path
        self.operation = operation
        self.details.update({"path": path, "operation": operation})


# =============================================================================
# Configuration / input
# =============================================================================


class ConfigError(McSpyError):
    """Invalid configuration value"""

    def __init__(
        self,
        key: str,
        message: str,
        cause: Optional[Exception] = None,
    ):
        super().__init__(f"Config error [{key}]: {message}", cause)
        self.config_key = key
        self.details["config_key"] = key


class ValidationError(McSpyError):
    """Invalid user input"""

    def __init__(
        self,
        field: str,
        value: Any,
        expected: str,
        cause: Optional[Exception] = None,
    ):
        message = f"Validation error [{field}]: expected {expected}, got '{value}'"
        super().__init__(message, cause)
        self.field = field
        self.value = value
        self.expected = expected
        self.details.update(
            {
                "field": field,
                "value": str(value),
                "expected": expected,
            }
        )


def is_fatal(error: Exception) -> bool:
    """Whether the error must terminate the current command

    Args:
        error: Exception to check

    Returns:
        True for storage failures and unexpected (non-mcspy) errors
    """
    if isinstance(error, StorageError):
        return True
    return not isinstance(error, McSpyError)


def format_error_for_user(error: Exception) -> str:
    """Format an error message for terminal output

    Args:
        error: Exception

    Returns:
        Human readable message
    """
    if isinstance(error, McSpyError):
        return str(error)
    if isinstance(error, OSError) and error.strerror:
        return f"{error.__class__.__name__}: {error.strerror}"
    return f"{error.__class__.__name__}: {error}"
