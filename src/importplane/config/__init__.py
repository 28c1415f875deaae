"""Config module exports."""

from importplane.config.loader import load_config
from importplane.config.models import (
    AutoImportConfig,
    ExecutionEnvironment,
    ImportPlaneConfig,
    LoggingConfig,
    LogOutputConfig,
    ResolverConfig,
)

__all__ = [
    "load_config",
    "ImportPlaneConfig",
    "AutoImportConfig",
    "ExecutionEnvironment",
    "LoggingConfig",
    "LogOutputConfig",
    "ResolverConfig",
]
