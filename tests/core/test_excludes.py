"""Tests for core/excludes.py module.

Covers:
- PRUNABLE_DIRS frozenset
- should_prune() function
"""

from __future__ import annotations

import pytest

from importplane.core.excludes import (
    DEFAULT_PRUNABLE_DIRS,
    HARDCODED_DIRS,
    PRUNABLE_DIRS,
    is_default_prunable,
    is_hardcoded_dir,
    should_prune,
)


class TestPrunableDirs:
    """Tests for PRUNABLE_DIRS constant."""

    def test_is_union_of_tiers(self) -> None:
        """PRUNABLE_DIRS combines both tiers."""
        assert PRUNABLE_DIRS == HARDCODED_DIRS | DEFAULT_PRUNABLE_DIRS

    def test_contains_vcs_directories(self) -> None:
        """Contains version control directories."""
        assert ".git" in PRUNABLE_DIRS
        assert ".svn" in PRUNABLE_DIRS
        assert ".hg" in PRUNABLE_DIRS

    def test_contains_python_cache(self) -> None:
        """Contains Python cache directories."""
        assert "__pycache__" in PRUNABLE_DIRS
        assert ".mypy_cache" in PRUNABLE_DIRS

    def test_contains_virtual_envs(self) -> None:
        """Contains virtual environment directories."""
        assert ".venv" in PRUNABLE_DIRS
        assert "venv" in PRUNABLE_DIRS


class TestTiers:
    def test_vcs_is_hardcoded(self) -> None:
        assert is_hardcoded_dir(".git")
        assert not is_default_prunable(".git")

    def test_venv_is_default_prunable(self) -> None:
        assert is_default_prunable(".venv")
        assert not is_hardcoded_dir(".venv")


class TestShouldPrune:
    @pytest.mark.parametrize(
        "dirname",
        [".git", "__pycache__", "node_modules", "site-packages", "mypkg.egg-info"],
    )
    def test_prunes(self, dirname: str) -> None:
        assert should_prune(dirname)

    @pytest.mark.parametrize("dirname", ["src", "typings", "mypkg", "mypkg-stubs", "stdlib"])
    def test_keeps(self, dirname: str) -> None:
        assert not should_prune(dirname)

    @pytest.mark.parametrize("dirname", ["build", "dist", "env", "site-packages", "venv"])
    def test_library_keeps_project_only_names(self, dirname: str) -> None:
        assert should_prune(dirname)
        assert not should_prune(dirname, in_library=True)

    @pytest.mark.parametrize("dirname", [".git", ".importplane"])
    def test_library_still_prunes_hardcoded(self, dirname: str) -> None:
        assert should_prune(dirname, in_library=True)
