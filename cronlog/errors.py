"""
Cronlog error types.

All errors inherit from CronlogError for easy catching.
Errors carry the operation that failed and the offending parameter,
so callers can log them without guessing what went wrong.

Retry semantics:
- InvalidArgumentError: caller bug, never retried
- NotFoundError: point lookup miss, surfaced as 404
- StorageError: backing-store failure, caller decides whether to retry
"""

from typing import Optional


class CronlogError(Exception):
    """Base exception for all cronlog failures."""
    pass


class InvalidArgumentError(CronlogError):
    """Raised when a caller supplies an argument the operation cannot accept."""

    def __init__(self, operation: str, parameter: str, reason: str):
        self.operation = operation
        self.parameter = parameter
        self.reason = reason
        super().__init__(f"{operation}: invalid argument '{parameter}': {reason}")


class NotFoundError(CronlogError):
    """Raised when a result id does not exist in the store."""

    def __init__(self, operation: str, result_id: str):
        self.operation = operation
        self.result_id = result_id
        super().__init__(f"{operation}: result not found: {result_id}")


class StorageError(CronlogError):
    """Raised when the backing store fails (I/O, constraint, locking)."""

    def __init__(self, operation: str, reason: str):
        self.operation = operation
        self.reason = reason
        super().__init__(f"{operation}: storage failure: {reason}")


class SchemaError(StorageError):
    """Schema bootstrap failed or found an incompatible schema version."""

    def __init__(self, reason: str, found_version: Optional[int] = None):
        self.found_version = found_version
        super().__init__("bootstrap", reason)


class CaptureError(CronlogError):
    """Raised when job output cannot be read from the input stream."""
    pass


class ConfigError(CronlogError):
    """Raised when a configuration source is unreadable or holds an invalid value."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot read configuration '{path}': {reason}")
