"""Tests for py.typed marker detection."""

from __future__ import annotations

from pathlib import Path

import pytest

from importplane.resolution.filesystem import FileSystemView
from importplane.resolution.py_typed import get_py_typed_info


def test_no_marker(tmp_path: Path) -> None:
    assert get_py_typed_info(FileSystemView(case_sensitive=True), tmp_path) is None


@pytest.mark.parametrize(
    ("content", "partial"),
    [
        ("", False),
        ("# inline types\n", False),
        ("partial\n", True),
        ("partial\r\n", True),
        ("partial", False),
    ],
)
def test_marker_content(tmp_path: Path, content: str, partial: bool) -> None:
    (tmp_path / "py.typed").write_bytes(content.encode())

    info = get_py_typed_info(FileSystemView(case_sensitive=True), tmp_path)

    assert info is not None
    assert info.py_typed_path == tmp_path / "py.typed"
    assert info.is_partial_stub_package is partial
