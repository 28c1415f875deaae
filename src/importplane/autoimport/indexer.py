"""Per-module candidate symbol index."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from pathlib import Path
from typing import Protocol

import structlog

from importplane.autoimport.models import (
    AutoImportSymbol,
    IndexAliasData,
    ModuleSymbolMap,
    ModuleSymbolTable,
    SymbolKind,
)
from importplane.core.cancellation import NONE, CancellationToken, throw_if_cancellation_requested
from importplane.core.naming import is_private_or_protected_name
from importplane.parsing.symbols import Declaration, DeclarationType, Symbol, SymbolTable

logger = structlog.get_logger()


class SourceFileProvider(Protocol):
    """What the indexer needs to know about the files of a program."""

    def path_key(self, path: Path) -> str: ...

    def get_symbol_table(self, path: Path) -> SymbolTable | None: ...

    def is_in_project(self, path: Path) -> bool: ...

    def has_stub_implementation(self, path: Path) -> bool: ...

    def resolve_alias(self, path: Path, declaration: Declaration) -> IndexAliasData | None: ...


def symbol_kind_for(declaration: Declaration) -> SymbolKind | None:
    if declaration.type == DeclarationType.CLASS:
        return SymbolKind.CLASS
    if declaration.type == DeclarationType.FUNCTION:
        return SymbolKind.FUNCTION
    if declaration.type == DeclarationType.TYPE_ALIAS:
        return SymbolKind.TYPE_ALIAS
    if declaration.type == DeclarationType.VARIABLE:
        if declaration.is_constant or declaration.is_final:
            return SymbolKind.CONSTANT
        return SymbolKind.VARIABLE
    if declaration.type == DeclarationType.ALIAS and declaration.imported_name is None:
        return SymbolKind.MODULE
    return None


def build_module_symbols_map(
    files: Iterable[Path],
    provider: SourceFileProvider,
    token: CancellationToken = NONE,
) -> ModuleSymbolMap:
    """Map every importable module to a lazily enumerated symbol table.

    Skips stubs that have an implementation beside them and modules with
    private file names (``_ast.py``) outside the project.
    """
    module_map: ModuleSymbolMap = {}
    for path in files:
        throw_if_cancellation_requested(token, "build_module_symbols_map")
        if provider.has_stub_implementation(path):
            logger.debug("module_skipped", path=str(path), reason="stub_has_implementation")
            continue
        table = provider.get_symbol_table(path)
        if table is None:
            logger.debug("module_skipped", path=str(path), reason="no_symbol_table")
            continue
        in_project = provider.is_in_project(path)
        stem = path.name.split(".", 1)[0]
        if is_private_or_protected_name(stem) and not in_project:
            logger.debug("module_skipped", path=str(path), reason="private_module")
            continue
        module_map[provider.path_key(path)] = ModuleSymbolTable(
            path=path,
            factory=_symbol_factory(path, table, in_project, provider),
        )

    logger.debug("module_symbols_map_built", modules=len(module_map))
    return module_map


def _symbol_factory(
    path: Path,
    table: SymbolTable,
    in_project: bool,
    provider: SourceFileProvider,
) -> Callable[[], Iterator[AutoImportSymbol]]:
    def get_symbols() -> Iterator[AutoImportSymbol]:
        for symbol in list(table):
            record = _record_for(path, symbol, in_project, provider)
            if record is not None:
                yield record

    return get_symbols


def _record_for(
    path: Path,
    symbol: Symbol,
    in_project: bool,
    provider: SourceFileProvider,
) -> AutoImportSymbol | None:
    if not symbol.is_visible_externally:
        return None
    declaration = symbol.primary_declaration
    if declaration is None:
        return None
    if declaration.type == DeclarationType.ALIAS and in_project:
        # workspace re-exports are never offered
        return None

    import_alias = None
    if declaration.type == DeclarationType.ALIAS:
        import_alias = provider.resolve_alias(path, declaration)

    return AutoImportSymbol(
        name=symbol.name,
        library=not in_project,
        kind=symbol_kind_for(declaration),
        import_alias=import_alias,
        symbol=symbol,
        in_dunder_all=symbol.in_dunder_all,
        has_redundant_alias=declaration.uses_redundant_alias,
    )
