"""importplane error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: Resolution
- 6xxx: Task (cancellation)
- 9xxx: Internal

"Import not found" is never an error: it is reported through
``ImportResult.is_import_found``.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002
    CONFIG_MISSING_REQUIRED = 2003
    CONFIG_FILE_NOT_FOUND = 2004

    # Resolution (3xxx)
    INVALID_MODULE_NAME = 3001
    SOURCE_UNREADABLE = 3002

    # Task (6xxx)
    OPERATION_CANCELLED = 6001

    # Internal (9xxx)
    INTERNAL_ERROR = 9001


@dataclass(frozen=True)
class ImportPlaneError(Exception):
    """Base error with structured context."""

    code: ErrorCode
    message: str
    retryable: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'CONFIG_PARSE_ERROR')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "retryable": self.retryable,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(ImportPlaneError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )

    @classmethod
    def file_not_found(cls, path: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_FILE_NOT_FOUND,
            message=f"Config file not found: {path}",
            details={"path": path},
        )


class ResolutionError(ImportPlaneError):
    """Malformed input handed to the resolver."""

    @classmethod
    def invalid_module_name(cls, name: str) -> "ResolutionError":
        return cls(
            code=ErrorCode.INVALID_MODULE_NAME,
            message=f"Not a valid dotted module name: {name!r}",
            details={"name": name},
        )

    @classmethod
    def source_unreadable(cls, path: str, reason: str) -> "ResolutionError":
        return cls(
            code=ErrorCode.SOURCE_UNREADABLE,
            message=f"Cannot read source file {path}: {reason}",
            details={"path": path, "reason": reason},
        )


class OperationCancelledError(ImportPlaneError):
    """Raised when a cooperative cancellation token fires.

    Callers must discard partial work; this is not an empty result.
    """

    @classmethod
    def requested(cls, operation: str = "") -> "OperationCancelledError":
        return cls(
            code=ErrorCode.OPERATION_CANCELLED,
            message=f"Operation cancelled{': ' + operation if operation else ''}",
            retryable=True,
            details={"operation": operation} if operation else {},
        )


class InternalError(ImportPlaneError):
    """Internal/unexpected errors."""

    @classmethod
    def unexpected(cls, reason: str, **details: Any) -> "InternalError":
        return cls(
            code=ErrorCode.INTERNAL_ERROR,
            message=f"Internal error: {reason}",
            details=details,
        )
