"""Core module exports."""

from importplane.core.cancellation import (
    NONE,
    CancellationToken,
    throw_if_cancellation_requested,
)
from importplane.core.errors import (
    ConfigError,
    ErrorCode,
    ImportPlaneError,
    InternalError,
    OperationCancelledError,
    ResolutionError,
)
from importplane.core.logging import (
    configure_logging,
    get_logger,
    get_operation_id,
    operation_context,
)

__all__ = [
    # Errors
    "ImportPlaneError",
    "ConfigError",
    "ErrorCode",
    "InternalError",
    "OperationCancelledError",
    "ResolutionError",
    # Cancellation
    "NONE",
    "CancellationToken",
    "throw_if_cancellation_requested",
    # Logging
    "configure_logging",
    "get_logger",
    "get_operation_id",
    "operation_context",
]
