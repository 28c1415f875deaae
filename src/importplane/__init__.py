"""importplane - PEP 561 module resolution and auto-import synthesis."""

from importplane.autoimport.ops import Workspace
from importplane.config.loader import load_config
from importplane.resolution.resolver import ImportResolver

__version__ = "0.1.0"

__all__ = ["ImportResolver", "Workspace", "load_config", "__version__"]
