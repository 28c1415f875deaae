"""Data types shared by the auto-import indexer, engine and synthesizer."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from pathlib import Path

from importplane.parsing.models import ImportAs, ImportNode, Range, TextEdit
from importplane.parsing.symbols import Symbol
from importplane.resolution.models import AutoImportInfo, ImportResult


class ImportGroup(IntEnum):
    """PEP 8 import grouping, in file order."""

    STDLIB = 0
    EXTERNAL = 1
    LOCAL = 2
    LOCAL_RELATIVE = 3


class SymbolKind(str, Enum):
    MODULE = "module"
    CLASS = "class"
    FUNCTION = "function"
    VARIABLE = "variable"
    CONSTANT = "constant"
    TYPE_ALIAS = "type_alias"


# =============================================================================
# Existing imports
# =============================================================================


@dataclass(frozen=True, slots=True)
class ImportStatement:
    """One existing top-level import.

    ``import a, b`` yields one entry per name, each carrying its ``subnode``.
    """

    node: ImportNode
    module_name: str
    import_result: ImportResult | None
    resolved_path: Path | None
    follows_non_import_statement: bool
    subnode: ImportAs | None = None

    @property
    def alias(self) -> str | None:
        return self.subnode.alias if self.subnode is not None else None

    @property
    def is_wildcard(self) -> bool:
        return self.node.is_wildcard


@dataclass
class ImportStatements:
    ordered_imports: list[ImportStatement] = field(default_factory=list)
    map_by_file_path: dict[str, ImportStatement] = field(default_factory=dict)
    implicit_imports: dict[str, ImportAs] = field(default_factory=dict)


# =============================================================================
# Synthesis inputs and outputs
# =============================================================================


@dataclass(frozen=True, slots=True)
class ImportNameInfo:
    name: str | None = None
    alias: str | None = None


@dataclass(frozen=True, slots=True)
class ModuleNameInfo:
    name: str
    name_for_import_from: str | None = None


@dataclass(frozen=True, slots=True)
class ImportNameWithModuleInfo:
    module: AutoImportInfo
    name: str | None = None
    alias: str | None = None
    name_for_import_from: str | None = None


@dataclass(frozen=True, slots=True)
class InsertionEdit:
    range: Range
    pre_change: str
    import_statement: str
    post_change: str
    import_group: ImportGroup


@dataclass(frozen=True, slots=True)
class AdditionEdit:
    range: Range
    import_name: str
    replacement_text: str

    def to_text_edit(self) -> TextEdit:
        return TextEdit(self.range, self.replacement_text)


@dataclass(frozen=True, slots=True)
class TextEditsResult:
    """Completion text plus the edits that make it valid.

    ``edits`` is None when edit computation was deferred.
    """

    insertion_text: str
    edits: list[TextEdit] | None = field(default_factory=list)


# =============================================================================
# Index records
# =============================================================================


@dataclass(frozen=True, slots=True)
class IndexAliasData:
    """Where a re-exported symbol is originally defined."""

    original_name: str
    module_path: Path
    kind: SymbolKind | None = None


@dataclass(frozen=True, slots=True)
class AutoImportSymbol:
    name: str
    library: bool
    kind: SymbolKind | None = None
    import_alias: IndexAliasData | None = None
    symbol: Symbol | None = None
    in_dunder_all: bool = False
    has_redundant_alias: bool = False


@dataclass(frozen=True)
class ModuleSymbolTable:
    """Candidate symbols of one module.

    Every ``get_symbols()`` call starts a fresh, finite iterator.
    """

    path: Path
    factory: Callable[[], Iterator[AutoImportSymbol]] = field(repr=False)

    def get_symbols(self) -> Iterator[AutoImportSymbol]:
        return self.factory()


ModuleSymbolMap = dict[str, ModuleSymbolTable]


@dataclass(frozen=True, slots=True)
class ImportParts:
    import_name: str  # name or alias as written after ``import``
    file_path: Path
    dot_count: int
    target_import_info: AutoImportInfo
    symbol_name: str | None = None
    import_from: str | None = None


@dataclass(frozen=True, slots=True)
class ImportAliasData:
    import_parts: ImportParts
    import_group: ImportGroup
    file_path: Path  # module that defines the symbol the alias resolves to
    symbol: Symbol | None = None
    kind: SymbolKind | None = None
    in_dunder_all: bool = False
    has_redundant_alias: bool = False


# =============================================================================
# Results
# =============================================================================


@dataclass(frozen=True, slots=True)
class AutoImportResult:
    name: str
    decl_path: Path
    original_name: str
    original_decl_path: Path
    insertion_text: str
    symbol: Symbol | None = None
    source: str | None = None
    edits: list[TextEdit] | None = None
    alias: str | None = None
    kind: SymbolKind | None = None

    def to_dict(self) -> dict[str, object]:
        return {
            "name": self.name,
            "source": self.source,
            "alias": self.alias,
            "kind": self.kind.value if self.kind else None,
            "insertion_text": self.insertion_text,
            "decl_path": str(self.decl_path),
            "original_name": self.original_name,
            "original_decl_path": str(self.original_decl_path),
            "edits": [e.to_dict() for e in self.edits] if self.edits is not None else None,
        }


@dataclass(frozen=True, slots=True)
class AutoImportOptions:
    lazy_edit: bool = False
    pattern_matcher: Callable[[str, str], bool] | None = None
