"""Shared fixtures for resolution tests."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from importplane.config.models import ResolverConfig
from importplane.resolution.resolver import ImportResolver


@pytest.fixture
def project(tmp_path: Path) -> Path:
    root = tmp_path / "proj"
    root.mkdir()
    return root


@pytest.fixture
def site_packages(tmp_path: Path) -> Path:
    lib = tmp_path / "lib" / "site-packages"
    lib.mkdir(parents=True)
    return lib


@pytest.fixture
def make_resolver(project: Path, site_packages: Path) -> Callable[..., ImportResolver]:
    """Resolver over the project and site-packages; kwargs override config fields."""

    def _make(**overrides: Any) -> ImportResolver:
        fields: dict[str, Any] = {
            "project_root": project,
            "library_paths": [site_packages],
            "case_sensitive": True,
        }
        fields.update(overrides)
        return ImportResolver(ResolverConfig(**fields))

    return _make
