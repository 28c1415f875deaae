"""Tests for the per-module candidate index."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from importplane.autoimport.indexer import build_module_symbols_map, symbol_kind_for
from importplane.autoimport.models import SymbolKind
from importplane.autoimport.ops import Workspace
from importplane.core.cancellation import CancellationToken
from importplane.core.errors import OperationCancelledError
from importplane.parsing.symbols import Declaration, DeclarationType
from importplane.resolution.models import ModuleName

MakeWorkspace = Callable[..., Workspace]


@pytest.mark.parametrize(
    ("declaration", "kind"),
    [
        (Declaration(DeclarationType.CLASS, "C", 0), SymbolKind.CLASS),
        (Declaration(DeclarationType.FUNCTION, "f", 0), SymbolKind.FUNCTION),
        (Declaration(DeclarationType.TYPE_ALIAS, "T", 0), SymbolKind.TYPE_ALIAS),
        (Declaration(DeclarationType.VARIABLE, "v", 0), SymbolKind.VARIABLE),
        (Declaration(DeclarationType.VARIABLE, "C", 0, is_constant=True), SymbolKind.CONSTANT),
        (Declaration(DeclarationType.VARIABLE, "v", 0, is_final=True), SymbolKind.CONSTANT),
        (Declaration(DeclarationType.ALIAS, "os", 0, module=ModuleName(0, ("os",))), SymbolKind.MODULE),
        (
            Declaration(DeclarationType.ALIAS, "x", 0, module=ModuleName(0, ("m",)), imported_name="x"),
            None,
        ),
    ],
)
def test_symbol_kind_for(declaration: Declaration, kind: SymbolKind | None) -> None:
    assert symbol_kind_for(declaration) == kind


def _names(ws: Workspace, path: Path) -> list[str]:
    table = ws.build_module_map()[ws.path_key(path)]
    return [s.name for s in table.get_symbols()]


def test_visible_symbols_listed(roots: dict[str, Path], make_workspace: MakeWorkspace) -> None:
    names = _names(make_workspace(), roots["project"] / "pkg" / "util.py")

    assert names == ["helper", "HelperClass", "plain_var", "MAX_SIZE"]


def test_each_call_starts_a_fresh_sequence(roots: dict[str, Path], make_workspace: MakeWorkspace) -> None:
    ws = make_workspace()
    table = ws.build_module_map()[ws.path_key(roots["project"] / "pkg" / "util.py")]

    first = list(table.get_symbols())
    second = list(table.get_symbols())

    assert [s.name for s in first] == [s.name for s in second]
    assert len(first) == 4


def test_workspace_reexports_skipped(roots: dict[str, Path], make_workspace: MakeWorkspace) -> None:
    assert _names(make_workspace(), roots["project"] / "pkg" / "reexport.py") == []


def test_library_reexport_carries_alias_data(roots: dict[str, Path], make_workspace: MakeWorkspace) -> None:
    ws = make_workspace()
    table = ws.build_module_map()[ws.path_key(roots["library"] / "requests" / "__init__.py")]

    (record,) = list(table.get_symbols())

    assert record.name == "get"
    assert record.library
    assert record.import_alias is not None
    assert record.import_alias.module_path == roots["library"] / "requests" / "api.py"
    assert record.import_alias.kind == SymbolKind.FUNCTION


def test_private_modules_skipped_outside_project(
    roots: dict[str, Path], make_files: Callable[..., Path], make_workspace: MakeWorkspace
) -> None:
    make_files({"requests/_internal.py": "def secret():\n    pass\n"}, root=roots["library"])
    make_files({"pkg/_helpers.py": "def assist():\n    pass\n"}, root=roots["project"])

    ws = make_workspace()
    keys = set(ws.build_module_map())

    assert ws.path_key(roots["library"] / "requests" / "_internal.py") not in keys
    assert ws.path_key(roots["project"] / "pkg" / "_helpers.py") in keys


def test_dunder_all_flag(
    roots: dict[str, Path], make_files: Callable[..., Path], make_workspace: MakeWorkspace
) -> None:
    make_files({"pkg/exported.py": "__all__ = ['shown']\nshown = 1\nhidden = 2\n"}, root=roots["project"])
    ws = make_workspace()

    table = ws.build_module_map()[ws.path_key(roots["project"] / "pkg" / "exported.py")]
    (record,) = list(table.get_symbols())

    assert record.name == "shown"
    assert record.in_dunder_all


def test_cancellation_between_modules(roots: dict[str, Path], make_workspace: MakeWorkspace) -> None:
    ws = make_workspace()
    token = CancellationToken()
    token.cancel()

    with pytest.raises(OperationCancelledError):
        build_module_symbols_map(ws.known_files(), ws, token)
