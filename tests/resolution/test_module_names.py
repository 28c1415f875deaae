"""Tests for file -> name mapping and search-root enumeration."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from importplane.config.models import ResolverConfig
from importplane.resolution.models import ImportCategory, ImportType, SearchRootKind
from importplane.resolution.resolver import ImportResolver

MakeFiles = Callable[..., Path]
MakeResolver = Callable[..., ImportResolver]


class TestGetImportRoots:
    def test_roots_in_priority_order(
        self, tmp_path: Path, project: Path, site_packages: Path, make_files: MakeFiles, make_resolver: MakeResolver
    ) -> None:
        make_files({"typings/": "", "vendor/": ""}, root=project)
        make_files({"foo-stubs/__init__.pyi": "", "foo/__init__.py": ""}, root=site_packages)
        ts = make_files({"stdlib/os.pyi": "", "stubs/six/six.pyi": ""}, root=tmp_path / "ts")
        resolver = make_resolver(extra_paths=[project / "vendor"], typeshed_path=ts)

        roots = resolver.get_import_roots()

        assert [(r.kind, r.path) for r in roots] == [
            (SearchRootKind.USER_SOURCE, project),
            (SearchRootKind.EXTRA_PATH, project / "vendor"),
            (SearchRootKind.STUB_OVERRIDE, project / "typings"),
            (SearchRootKind.THIRD_PARTY_STUB_PKG, site_packages / "foo-stubs"),
            (SearchRootKind.USER_TYPESHED, ts / "stdlib"),
            (SearchRootKind.USER_TYPESHED, ts / "stubs" / "six"),
            (SearchRootKind.LIBRARY, site_packages),
        ]
        assert roots[4].is_stdlib
        assert [r.kind for r in roots] == sorted(r.kind for r in roots)

    def test_every_typeshed_dist_is_a_root(self, tmp_path: Path, make_files: MakeFiles, make_resolver: MakeResolver) -> None:
        ts = make_files({"stubs/a/a.pyi": "", "stubs/b/b.pyi": "", "stubs/c/c.pyi": ""}, root=tmp_path / "ts")

        roots = make_resolver(typeshed_fallback_path=ts).get_import_roots()

        dists = [r.path.name for r in roots if r.kind == SearchRootKind.BUNDLED_TYPESHED_FALLBACK]
        assert dists == ["a", "b", "c"]

    def test_degenerate_config_has_no_roots(self) -> None:
        resolver = ImportResolver(ResolverConfig(case_sensitive=True))

        assert resolver.get_import_roots() == []


class TestGetModuleNameForImport:
    def test_local_module(self, project: Path, make_files: MakeFiles, make_resolver: MakeResolver) -> None:
        make_files({"pkg/__init__.py": "", "pkg/mod.py": ""}, root=project)

        info = make_resolver().get_module_name_for_import(project / "pkg" / "mod.py")

        assert info.module_name == "pkg.mod"
        assert info.import_type == ImportType.LOCAL
        assert info.category == ImportCategory.LOCAL

    def test_package_init(self, project: Path, make_files: MakeFiles, make_resolver: MakeResolver) -> None:
        make_files({"pkg/__init__.py": ""}, root=project)

        info = make_resolver().get_module_name_for_import(project / "pkg" / "__init__.py")

        assert info.module_name == "pkg"

    def test_library_module(self, site_packages: Path, make_files: MakeFiles, make_resolver: MakeResolver) -> None:
        make_files({"requests/__init__.py": "", "requests/api.py": ""}, root=site_packages)

        info = make_resolver().get_module_name_for_import(site_packages / "requests" / "api.py")

        assert info.module_name == "requests.api"
        assert info.import_type == ImportType.THIRD_PARTY
        assert info.is_third_party_py_typed_present is False

    def test_py_typed_library(self, site_packages: Path, make_files: MakeFiles, make_resolver: MakeResolver) -> None:
        make_files({"typedpkg/__init__.py": "", "typedpkg/m.py": "", "typedpkg/py.typed": ""}, root=site_packages)

        info = make_resolver().get_module_name_for_import(site_packages / "typedpkg" / "m.py")

        assert info.is_third_party_py_typed_present

    def test_stub_package_drops_suffix(
        self, site_packages: Path, make_files: MakeFiles, make_resolver: MakeResolver
    ) -> None:
        make_files({"foo-stubs/__init__.pyi": "", "foo-stubs/bar.pyi": ""}, root=site_packages)

        info = make_resolver().get_module_name_for_import(site_packages / "foo-stubs" / "bar.pyi")

        assert info.module_name == "foo.bar"
        assert info.import_type == ImportType.THIRD_PARTY

    def test_typings_file(self, project: Path, make_files: MakeFiles, make_resolver: MakeResolver) -> None:
        make_files({"typings/lib1.pyi": ""}, root=project)

        info = make_resolver().get_module_name_for_import(project / "typings" / "lib1.pyi")

        assert info.module_name == "lib1"
        assert info.is_local_typings_file
        assert info.category == ImportCategory.LOCAL_STUB

    def test_typeshed_stdlib(self, tmp_path: Path, make_files: MakeFiles, make_resolver: MakeResolver) -> None:
        ts = make_files({"stdlib/os/__init__.pyi": "", "stdlib/os/path.pyi": ""}, root=tmp_path / "ts")

        info = make_resolver(typeshed_path=ts).get_module_name_for_import(ts / "stdlib" / "os" / "path.pyi")

        assert info.module_name == "os.path"
        assert info.import_type == ImportType.STDLIB

    def test_outside_every_root(self, tmp_path: Path, make_files: MakeFiles, make_resolver: MakeResolver) -> None:
        make_files({"elsewhere/x.py": ""})

        info = make_resolver().get_module_name_for_import(tmp_path / "elsewhere" / "x.py")

        assert info.module_name is None


class TestGetAutoImportInfo:
    def test_absolute_name(self, project: Path, make_files: MakeFiles, make_resolver: MakeResolver) -> None:
        make_files({"main.py": "", "pkg/__init__.py": "", "pkg/mod.py": ""}, root=project)

        info = make_resolver().get_auto_import_info(project / "main.py", project / "pkg" / "mod.py")

        assert info is not None
        assert info.module_name == "pkg.mod"
        assert info.category == ImportCategory.LOCAL

    def test_relative_fallback_without_roots(self, tmp_path: Path, make_files: MakeFiles) -> None:
        make_files({"a/main.py": "", "a/helper.py": ""})
        resolver = ImportResolver(ResolverConfig(case_sensitive=True))

        info = resolver.get_auto_import_info(tmp_path / "a" / "main.py", tmp_path / "a" / "helper.py")

        assert info is not None
        assert info.module_name == ".helper"
        assert info.category == ImportCategory.LOCAL


class TestGetRelativeModuleName:
    @pytest.fixture
    def tree(self, project: Path, make_files: MakeFiles) -> Path:
        make_files(
            {
                "__init__.py": "",
                "source.py": "",
                "dest.py": "",
                "common/__init__.py": "",
                "common/dest.py": "",
                "nest/source.py": "",
                "nest1/__init__.py": "",
                "nest1/nest2/source.py": "",
                "different/__init__.py": "",
                "typings/stubbed.pyi": "",
            },
            root=project,
        )
        return project

    @pytest.mark.parametrize(
        ("source", "target", "expected"),
        [
            ("source.py", "source.py", ".source"),
            ("source.py", "__init__.py", "."),
            ("source.py", "dest.py", ".dest"),
            ("nest/source.py", "dest.py", "..dest"),
            ("source.py", "common/dest.py", ".common.dest"),
            ("nest/source.py", "__init__.py", ".."),
            ("source.py", "common/__init__.py", ".common"),
            ("nest1/nest2/source.py", "different/__init__.py", "...different"),
        ],
    )
    def test_relative_names(
        self, tree: Path, make_resolver: MakeResolver, source: str, target: str, expected: str
    ) -> None:
        assert make_resolver().get_relative_module_name(tree / source, tree / target) == expected

    def test_ignore_folder_structure(self, tree: Path, make_resolver: MakeResolver) -> None:
        name = make_resolver().get_relative_module_name(
            tree / "nest1" / "nest2" / "source.py",
            tree / "nest1" / "__init__.py",
            ignore_folder_structure=True,
        )

        assert name == "...nest1"

    def test_stub_path_target_is_absolute_only(self, tree: Path, make_resolver: MakeResolver) -> None:
        assert make_resolver().get_relative_module_name(tree / "source.py", tree / "typings" / "stubbed.pyi") is None

    def test_typeshed_target_is_absolute_only(
        self, tmp_path: Path, tree: Path, make_files: MakeFiles, make_resolver: MakeResolver
    ) -> None:
        ts = make_files({"stdlib/os.pyi": ""}, root=tmp_path / "ts")

        resolver = make_resolver(typeshed_path=ts)

        assert resolver.get_relative_module_name(tree / "source.py", ts / "stdlib" / "os.pyi") is None
