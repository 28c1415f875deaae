"""PEP 561 ``py.typed`` marker detection."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from importplane.config.constants import PARTIAL_MARKER, PY_TYPED
from importplane.resolution.filesystem import FileSystemView


@dataclass(frozen=True, slots=True)
class PyTypedInfo:
    py_typed_path: Path
    is_partial_stub_package: bool


def get_py_typed_info(fs: FileSystemView, package_dir: Path) -> PyTypedInfo | None:
    """Read the marker in *package_dir*, if there is one."""
    marker = package_dir / PY_TYPED
    if not fs.is_file(marker):
        return None
    text = fs.read_text(marker) or ""
    is_partial = PARTIAL_MARKER in text.replace("\r\n", "\n")
    return PyTypedInfo(py_typed_path=marker, is_partial_stub_package=is_partial)
