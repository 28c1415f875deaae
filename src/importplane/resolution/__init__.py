"""Module path resolution."""

from importplane.resolution.filesystem import FileSystemView
from importplane.resolution.models import (
    AutoImportInfo,
    ImplicitImport,
    ImportCategory,
    ImportResult,
    ImportType,
    ModuleImportInfo,
    ModuleName,
    SearchRoot,
    SearchRootKind,
)
from importplane.resolution.resolver import ImportResolver

__all__ = [
    "AutoImportInfo",
    "FileSystemView",
    "ImplicitImport",
    "ImportCategory",
    "ImportResolver",
    "ImportResult",
    "ImportType",
    "ModuleImportInfo",
    "ModuleName",
    "SearchRoot",
    "SearchRootKind",
]
