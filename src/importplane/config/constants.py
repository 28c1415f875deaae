"""Configuration constants.

This module contains truly constant values that should NOT be user-configurable.
These are PEP 561 conventions, typeshed layout names and file extensions.

For configurable values, see models.py (ResolverConfig, AutoImportConfig, etc.).
"""

# =============================================================================
# PEP 561 Conventions
# =============================================================================

STUBS_SUFFIX = "-stubs"
"""Directory-name suffix of a stub-only distribution for a package."""

PY_TYPED = "py.typed"
"""Marker file declaring that a package ships inline types or partial stubs."""

PARTIAL_MARKER = "partial\n"
"""Exact py.typed content that turns a stub package into a partial one."""

DEFAULT_STUB_PATH = "typings"
"""Default stub override directory, relative to the project root."""

# =============================================================================
# Typeshed Layout
# =============================================================================

TYPESHED_STDLIB_DIR = "stdlib"
"""Standard-library stubs directory inside a typeshed checkout."""

TYPESHED_STUBS_DIR = "stubs"
"""Third-party stubs directory; each child is one ``stubs/<dist>`` root."""

# =============================================================================
# Source Files
# =============================================================================

SOURCE_EXTENSION = ".py"
STUB_EXTENSION = ".pyi"
SOURCE_EXTENSIONS: tuple[str, ...] = (STUB_EXTENSION, SOURCE_EXTENSION)
"""Module file extensions, in preference order (stub first)."""

INIT_STEM = "__init__"
"""Stem of a regular package's boundary file."""

# =============================================================================
# Config Files
# =============================================================================

CONFIG_DIR_NAME = ".importplane"
"""Per-repository configuration directory."""

CONFIG_FILE_NAME = "config.yaml"
"""YAML config file name, both per-repository and global."""
