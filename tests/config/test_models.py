"""Tests for config/models.py module."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from importplane.config.models import (
    AutoImportConfig,
    ExecutionEnvironment,
    ImportPlaneConfig,
    ResolverConfig,
)
from importplane.resolution.filesystem import FileSystemView


class TestResolverConfig:
    def test_relative_paths_anchor_to_project_root(self, tmp_path: Path) -> None:
        config = ResolverConfig(
            project_root=tmp_path,
            extra_paths=[Path("lib")],
            typeshed_path=Path("ts"),
            library_paths=[Path("/abs/site-packages")],
        )

        assert config.stub_path == tmp_path / "typings"
        assert config.extra_paths == [tmp_path / "lib"]
        assert config.typeshed_path == tmp_path / "ts"
        assert config.library_paths == [Path("/abs/site-packages")]

    @pytest.mark.parametrize("root", [None, "", "   "])
    def test_empty_root_means_no_root(self, root: str | None) -> None:
        config = ResolverConfig(project_root=root)

        assert config.project_root is None
        # relative entries cannot be anchored without a root
        assert config.stub_path is None

    def test_absolute_paths_kept_without_root(self, tmp_path: Path) -> None:
        config = ResolverConfig(stub_path=tmp_path / "stubs", extra_paths=[Path("rel"), tmp_path])

        assert config.stub_path == tmp_path / "stubs"
        assert config.extra_paths == [tmp_path]

    def test_interpreter_paths_appended(self, tmp_path: Path) -> None:
        config = ResolverConfig(project_root=tmp_path, use_interpreter_paths=True)

        assert config.library_paths
        assert all(p.is_absolute() for p in config.library_paths)

    def test_execution_environment_lookup(self, tmp_path: Path) -> None:
        config = ResolverConfig(
            project_root=tmp_path,
            extra_paths=[Path("shared")],
            execution_environments=[ExecutionEnvironment(root=Path("svc"), extra_paths=[Path("svc/vendor")])],
        )

        inside = config.find_execution_environment(tmp_path / "svc" / "app.py")
        outside = config.find_execution_environment(tmp_path / "tools" / "x.py")

        assert inside.root == tmp_path / "svc"
        assert inside.extra_paths == [tmp_path / "svc" / "vendor"]
        assert outside.root == tmp_path
        assert outside.extra_paths == [tmp_path / "shared"]

    def test_execution_environment_lookup_honors_case_folding(self, tmp_path: Path) -> None:
        config = ResolverConfig(
            project_root=tmp_path,
            execution_environments=[ExecutionEnvironment(root=Path("svc"))],
        )
        path = tmp_path / "SVC" / "app.py"

        folded = config.find_execution_environment(path, FileSystemView(case_sensitive=False).is_under)
        exact = config.find_execution_environment(path, FileSystemView(case_sensitive=True).is_under)

        assert folded.root == tmp_path / "svc"
        assert exact.root == tmp_path


class TestAutoImportConfig:
    def test_defaults(self) -> None:
        config = AutoImportConfig()

        assert config.exact_match_max_length == 2
        assert config.fuzzy_similarity_limit == 0.25
        assert config.include_library_files is True
        assert config.include_typeshed is False

    @pytest.mark.parametrize("field", ["exact_match_max_length", "max_results"])
    def test_negative_rejected(self, field: str) -> None:
        with pytest.raises(ValidationError):
            AutoImportConfig(**{field: -1})


class TestImportPlaneConfig:
    def test_sections_default(self) -> None:
        config = ImportPlaneConfig()

        assert config.logging.level == "WARNING"
        assert config.resolver.project_root is None
        assert config.autoimport.lazy_edit is False
