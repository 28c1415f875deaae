"""Fixtures for auto-import tests: a project, an installed library and a typeshed copy."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from importplane.autoimport.models import ImportStatements
from importplane.autoimport.ops import Workspace
from importplane.autoimport.statements import get_top_level_imports
from importplane.config.models import AutoImportConfig, ImportPlaneConfig, ResolverConfig
from importplane.parsing.parser import ParsedFile
from importplane.resolution.resolver import ImportResolver

TYPESHED_FILES = {
    "stdlib/os/__init__.pyi": "from . import path as path\nsep: str\ndef getcwd() -> str: ...\n",
    "stdlib/os/path.pyi": "def join(a: str, *p: str) -> str: ...\ndef dirname(p: str) -> str: ...\n",
    "stdlib/sys.pyi": "argv: list[str]\n",
    "stdlib/collections/__init__.pyi": "class OrderedDict: ...\nclass deque: ...\n",
}

LIBRARY_FILES = {
    "requests/__init__.py": "from requests.api import get\n",
    "requests/api.py": "def get(url):\n    pass\n",
}

PROJECT_FILES = {
    "pkg/__init__.py": "",
    "pkg/util.py": (
        "def helper():\n    pass\n\n\n"
        "class HelperClass:\n    pass\n\n\n"
        "_private = 1\nplain_var = 2\nMAX_SIZE = 3\n"
    ),
    "pkg/reexport.py": "from pkg.util import helper\n",
}


@pytest.fixture
def roots(tmp_path: Path, make_files: Callable[..., Path]) -> dict[str, Path]:
    """Write the project, library and typeshed trees; return their roots."""
    return {
        "project": make_files(PROJECT_FILES, root=tmp_path / "proj"),
        "library": make_files(LIBRARY_FILES, root=tmp_path / "lib" / "site-packages"),
        "typeshed": make_files(TYPESHED_FILES, root=tmp_path / "ts"),
    }


@pytest.fixture
def resolver_config(roots: dict[str, Path]) -> ResolverConfig:
    return ResolverConfig(
        project_root=roots["project"],
        library_paths=[roots["library"]],
        typeshed_path=roots["typeshed"],
        case_sensitive=True,
    )


@pytest.fixture
def resolver(resolver_config: ResolverConfig) -> ImportResolver:
    return ImportResolver(resolver_config)


@pytest.fixture
def source(roots: dict[str, Path], resolver: ImportResolver) -> Callable[[str], tuple[ParsedFile, ImportStatements]]:
    """Write ``main.py`` into the project and index its imports."""

    def _source(text: str) -> tuple[ParsedFile, ImportStatements]:
        path = roots["project"] / "main.py"
        path.write_text(text)
        parsed = ParsedFile.parse(text, path)
        return parsed, get_top_level_imports(parsed, resolver, path)

    return _source



@pytest.fixture
def make_workspace(resolver_config: ResolverConfig) -> Callable[..., Workspace]:
    """Workspace over the fixture trees; kwargs override ``autoimport`` settings."""

    def _make(**autoimport: object) -> Workspace:
        config = ImportPlaneConfig(
            resolver=resolver_config,
            autoimport=AutoImportConfig(**autoimport),
        )
        return Workspace(config)

    return _make
