"""Directory exclusion for source discovery.

Tier 0 (HARDCODED_DIRS): never traversed.
    - VCS internals, importplane data directories

Tier 1 (DEFAULT_PRUNABLE_DIRS): skipped only below project roots. Installed
packages may legitimately be called ``build`` or ``env``, so library and
typeshed roots are walked with tier 0 alone.
"""

from __future__ import annotations

HARDCODED_DIRS: frozenset[str] = frozenset(
    (
        # VCS internals
        ".git",
        ".svn",
        ".hg",
        ".bzr",
        # importplane data
        ".importplane",
    )
)

DEFAULT_PRUNABLE_DIRS: frozenset[str] = frozenset(
    (
        # Virtual environments
        "venv",
        ".venv",
        ".virtualenv",
        "virtualenv",
        "env",
        ".env",
        # Caches
        "__pycache__",
        ".pytest_cache",
        ".mypy_cache",
        ".ruff_cache",
        ".hypothesis",
        ".ipynb_checkpoints",
        ".cache",
        # Test/build tooling
        ".tox",
        ".nox",
        "eggs",
        ".eggs",
        "site-packages",
        "htmlcov",
        "build",
        "dist",
        # Non-Python dependency trees that can still contain .py files
        "node_modules",
        # IDE/Editor directories
        ".idea",
        ".vscode",
        ".vs",
    )
)

PRUNABLE_DIRS: frozenset[str] = HARDCODED_DIRS | DEFAULT_PRUNABLE_DIRS


def is_hardcoded_dir(dirname: str) -> bool:
    """Check if directory is hardcoded (never traversable)."""
    return dirname in HARDCODED_DIRS


def is_default_prunable(dirname: str) -> bool:
    """Check if directory is prunable by default."""
    return dirname in DEFAULT_PRUNABLE_DIRS


def should_prune(dirname: str, *, in_library: bool = False) -> bool:
    """True when a directory should be skipped while discovering sources."""
    if in_library:
        return dirname in HARDCODED_DIRS
    return dirname in PRUNABLE_DIRS or dirname.endswith(".egg-info")


__all__ = [
    "HARDCODED_DIRS",
    "DEFAULT_PRUNABLE_DIRS",
    "PRUNABLE_DIRS",
    "is_hardcoded_dir",
    "is_default_prunable",
    "should_prune",
]
