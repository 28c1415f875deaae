"""Resolution value types.

Everything here is an immutable value computed fresh per request.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from pathlib import Path

from importplane.core.errors import ResolutionError


@dataclass(frozen=True, slots=True)
class ModuleName:
    """A dotted module name, possibly relative.

    ``from ..pkg.mod import x`` is ``ModuleName(2, ("pkg", "mod"), frozenset({"x"}))``.
    """

    leading_dots: int = 0
    name_parts: tuple[str, ...] = ()
    imported_symbols: frozenset[str] | None = None

    @classmethod
    def parse(cls, text: str, imported_symbols: frozenset[str] | None = None) -> ModuleName:
        """Parse ``"a.b"`` / ``"..a"`` / ``"."``; raise on malformed names."""
        stripped = text.strip()
        dots = len(stripped) - len(stripped.lstrip("."))
        rest = stripped[dots:]
        parts = tuple(rest.split(".")) if rest else ()
        if any(not p.isidentifier() for p in parts) or (not parts and dots == 0):
            raise ResolutionError.invalid_module_name(text)
        return cls(leading_dots=dots, name_parts=parts, imported_symbols=imported_symbols)

    @property
    def is_relative(self) -> bool:
        return self.leading_dots > 0

    @property
    def name_text(self) -> str:
        return ".".join(self.name_parts)

    def __str__(self) -> str:
        return "." * self.leading_dots + self.name_text


class SearchRootKind(IntEnum):
    """Import root kinds, in the fixed order they are tried."""

    USER_SOURCE = 0
    EXTRA_PATH = 1
    STUB_OVERRIDE = 2
    THIRD_PARTY_STUB_PKG = 3
    USER_TYPESHED = 4
    BUNDLED_TYPESHED_FALLBACK = 5
    LIBRARY = 6


@dataclass(frozen=True, slots=True)
class SearchRoot:
    kind: SearchRootKind
    path: Path
    is_stdlib: bool = False  # typeshed ``stdlib/`` rather than ``stubs/<dist>``

    @property
    def module_base(self) -> Path:
        """Directory that module names under this root are relative to."""
        if self.kind == SearchRootKind.THIRD_PARTY_STUB_PKG:
            return self.path.parent
        return self.path


class ImportType(IntEnum):
    STDLIB = 0
    THIRD_PARTY = 1
    LOCAL = 2


class ImportCategory(str, Enum):
    """Coarse bucket used by auto-import to pick an import group."""

    STDLIB = "stdlib"
    EXTERNAL = "external"
    LOCAL = "local"
    LOCAL_STUB = "local-stub"


@dataclass(frozen=True, slots=True)
class ImplicitImport:
    """A submodule or subpackage visible inside a resolved package directory."""

    name: str
    path: Path
    is_stub_file: bool = False


@dataclass(frozen=True, slots=True)
class ImportResult:
    """Outcome of resolving one module name.

    ``resolved_paths`` holds one entry per name part (``None`` for a
    namespace directory); the last entry is the type-authoritative file.
    A third-party typeshed stub backing an untyped library is appended
    after the library's own paths.
    """

    import_name: str
    is_import_found: bool = False
    is_relative: bool = False
    is_stub_file: bool = False
    is_namespace_package: bool = False
    import_type: ImportType = ImportType.LOCAL
    resolved_paths: tuple[Path | None, ...] = ()
    search_path: Path | None = None
    is_local_typings_file: bool = False
    is_stdlib_typeshed_file: bool = False
    is_third_party_typeshed_file: bool = False
    is_stub_package: bool = False
    is_py_typed_present: bool = False
    partial_stub_paths: tuple[Path, ...] = ()
    implicit_imports: tuple[ImplicitImport, ...] = ()
    import_failure_info: tuple[str, ...] = ()

    @classmethod
    def not_found(cls, import_name: str, *failure_info: str) -> ImportResult:
        return cls(import_name=import_name, import_failure_info=failure_info)

    @property
    def resolved_path(self) -> Path | None:
        """The type-authoritative file, if any."""
        return self.resolved_paths[-1] if self.resolved_paths else None

    @property
    def category(self) -> ImportCategory:
        if self.import_type == ImportType.STDLIB:
            return ImportCategory.STDLIB
        if self.is_local_typings_file:
            return ImportCategory.LOCAL_STUB
        if self.import_type == ImportType.THIRD_PARTY:
            return ImportCategory.EXTERNAL
        return ImportCategory.LOCAL


@dataclass(frozen=True, slots=True)
class ModuleImportInfo:
    """How a file would be named in an absolute import."""

    module_name: str | None
    import_type: ImportType = ImportType.LOCAL
    is_third_party_py_typed_present: bool = False
    is_local_typings_file: bool = False
    search_root: SearchRoot | None = None

    @property
    def category(self) -> ImportCategory:
        if self.import_type == ImportType.STDLIB:
            return ImportCategory.STDLIB
        if self.is_local_typings_file:
            return ImportCategory.LOCAL_STUB
        if self.import_type == ImportType.THIRD_PARTY:
            return ImportCategory.EXTERNAL
        return ImportCategory.LOCAL


@dataclass(frozen=True, slots=True)
class AutoImportInfo:
    module_name: str
    category: ImportCategory


@dataclass(slots=True)
class ResolutionTrace:
    """Collected failure notes for one resolution, surfaced on not-found."""

    notes: list[str] = field(default_factory=list)

    def add(self, note: str) -> None:
        self.notes.append(note)
