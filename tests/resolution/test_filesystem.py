"""Tests for the cached, exact-case FileSystemView."""

from __future__ import annotations

from pathlib import Path

import pytest

from importplane.resolution.filesystem import FileSystemView


class TestExactCase:
    def test_lookup_is_exact_case(self, tmp_path: Path) -> None:
        (tmp_path / "Foo.py").write_text("")
        fs = FileSystemView(case_sensitive=False)

        assert fs.is_file(tmp_path / "Foo.py")
        assert not fs.is_file(tmp_path / "foo.py")
        assert not fs.exists(tmp_path / "FOO.py")

    def test_dir_and_file_flags(self, tmp_path: Path) -> None:
        (tmp_path / "pkg").mkdir()
        (tmp_path / "mod.py").write_text("")
        fs = FileSystemView(case_sensitive=True)

        assert fs.is_dir(tmp_path / "pkg")
        assert not fs.is_file(tmp_path / "pkg")
        assert fs.is_file(tmp_path / "mod.py")
        assert not fs.is_dir(tmp_path / "mod.py")

    def test_missing_directory_lists_empty(self, tmp_path: Path) -> None:
        fs = FileSystemView(case_sensitive=True)

        assert fs.list_dir(tmp_path / "nope") == []
        assert not fs.exists(tmp_path / "nope" / "x.py")

    def test_listing_sorted(self, tmp_path: Path) -> None:
        for name in ("b.py", "a.py", "c"):
            (tmp_path / name).write_text("")
        fs = FileSystemView(case_sensitive=True)

        assert fs.list_dir(tmp_path) == ["a.py", "b.py", "c"]


class TestPathKeys:
    def test_case_insensitive_keys_fold(self) -> None:
        fs = FileSystemView(case_sensitive=False)

        assert fs.path_key(Path("/A/B.py")) == fs.path_key(Path("/a/b.py"))

    def test_case_sensitive_keys_distinct(self) -> None:
        fs = FileSystemView(case_sensitive=True)

        assert fs.path_key(Path("/A/B.py")) != fs.path_key(Path("/a/b.py"))

    @pytest.mark.parametrize(
        ("path", "root", "expected"),
        [
            ("/r/a/b.py", "/r", True),
            ("/r", "/r", True),
            ("/rx/a.py", "/r", False),
            ("/other/a.py", "/r", False),
        ],
    )
    def test_is_under(self, path: str, root: str, expected: bool) -> None:
        fs = FileSystemView(case_sensitive=True)

        assert fs.is_under(Path(path), Path(root)) is expected


class TestCaching:
    def test_listing_cached_until_invalidated(self, tmp_path: Path) -> None:
        fs = FileSystemView(case_sensitive=True)
        assert not fs.exists(tmp_path / "late.py")

        (tmp_path / "late.py").write_text("")
        assert not fs.exists(tmp_path / "late.py")

        fs.invalidate(tmp_path / "late.py")
        assert fs.exists(tmp_path / "late.py")

    def test_read_text_cached_and_invalidated(self, tmp_path: Path) -> None:
        path = tmp_path / "m.py"
        path.write_text("x = 1\n")
        fs = FileSystemView(case_sensitive=True)

        assert fs.read_text(path) == "x = 1\n"
        path.write_text("x = 2\n")
        assert fs.read_text(path) == "x = 1\n"

        fs.invalidate()
        assert fs.read_text(path) == "x = 2\n"

    def test_unreadable_file_is_none(self, tmp_path: Path) -> None:
        fs = FileSystemView(case_sensitive=True)

        assert fs.read_text(tmp_path / "missing.py") is None
