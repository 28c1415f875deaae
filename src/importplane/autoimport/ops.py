"""Workspace facade: config, resolver, parsed files and candidate search.

One ``Workspace`` per project. It owns the only caches that outlive a call
(directory listings, parsed files, symbol tables and the module map) and
drops them together on ``invalidate``.
"""

from __future__ import annotations

import os
from collections.abc import Collection, Iterator, Sequence
from pathlib import Path
from typing import Any

import structlog

from importplane.autoimport.engine import AutoImporter
from importplane.autoimport.indexer import build_module_symbols_map, symbol_kind_for
from importplane.autoimport.models import (
    AutoImportOptions,
    AutoImportResult,
    ImportNameInfo,
    ImportNameWithModuleInfo,
    ImportStatement,
    ImportStatements,
    IndexAliasData,
    ModuleSymbolMap,
    SymbolKind,
)
from importplane.autoimport.statements import get_top_level_imports
from importplane.autoimport.synthesizer import get_text_edits_for_insertions, get_text_edits_for_symbol_addition
from importplane.config.constants import SOURCE_EXTENSION, SOURCE_EXTENSIONS, STUB_EXTENSION, STUBS_SUFFIX
from importplane.config.loader import load_config
from importplane.config.models import ImportPlaneConfig
from importplane.core.cancellation import NONE, CancellationToken
from importplane.core.errors import ResolutionError
from importplane.core.excludes import should_prune
from importplane.core.logging import operation_context
from importplane.parsing.models import Position, TextEdit
from importplane.parsing.parser import ParsedFile
from importplane.parsing.symbols import Declaration, SymbolTable, build_symbol_table
from importplane.resolution.filesystem import FileSystemView
from importplane.resolution.models import (
    AutoImportInfo,
    ImportResult,
    ModuleImportInfo,
    ModuleName,
    SearchRoot,
    SearchRootKind,
)
from importplane.resolution.resolver import ImportResolver

logger = structlog.get_logger()

_PROJECT_ROOT_KINDS = (SearchRootKind.USER_SOURCE, SearchRootKind.EXTRA_PATH, SearchRootKind.STUB_OVERRIDE)
_LIBRARY_ROOT_KINDS = (SearchRootKind.THIRD_PARTY_STUB_PKG, SearchRootKind.LIBRARY)
_TYPESHED_ROOT_KINDS = (SearchRootKind.USER_TYPESHED, SearchRootKind.BUNDLED_TYPESHED_FALLBACK)


def discover_source_files(root: Path, *, in_library: bool = False) -> Iterator[Path]:
    """Yield ``.py`` and ``.pyi`` files under *root*, skipping prunable directories.

    With *in_library* only VCS and importplane directories are skipped.
    """
    if not root.is_dir():
        return
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(d for d in dirnames if not should_prune(d, in_library=in_library))
        for name in sorted(filenames):
            if os.path.splitext(name)[1] in SOURCE_EXTENSIONS:
                yield Path(dirpath) / name


class Workspace:
    """Everything needed to resolve imports and offer auto-imports for a project.

    Usage::

        ws = Workspace.from_root(Path("."))
        result = ws.resolve(Path("app/main.py"), "requests")
        for candidate in ws.complete(Path("app/main.py"), "OrderedDict"):
            print(candidate.insertion_text, candidate.edits)
    """

    def __init__(self, config: ImportPlaneConfig, fs: FileSystemView | None = None) -> None:
        self._config = config
        self._resolver = ImportResolver(config.resolver, fs)
        self._parsed: dict[str, ParsedFile | None] = {}
        self._tables: dict[str, SymbolTable | None] = {}
        self._known_files: list[Path] | None = None
        self._known_keys: set[str] = set()
        self._module_map: ModuleSymbolMap | None = None

    @classmethod
    def from_root(cls, root: Path, **kwargs: Any) -> Workspace:
        """Load config for *root* (YAML, env vars, *kwargs*) and build a workspace."""
        return cls(load_config(root, **kwargs))

    @property
    def config(self) -> ImportPlaneConfig:
        return self._config

    @property
    def resolver(self) -> ImportResolver:
        return self._resolver

    @property
    def fs(self) -> FileSystemView:
        return self._resolver.fs

    def path_key(self, path: Path) -> str:
        return self.fs.path_key(path)

    # -------------------------------------------------------------------------
    # Files
    # -------------------------------------------------------------------------

    def is_in_project(self, path: Path) -> bool:
        """True for user code: under a project or extra root and not in a library root."""
        fs = self.fs
        cfg = self._config.resolver
        if any(fs.is_under(path, lib) for lib in cfg.library_paths):
            return False
        roots = [r for r in (cfg.project_root, *cfg.extra_paths) if r is not None]
        for env in cfg.execution_environments:
            roots.extend(r for r in (env.root, *env.extra_paths) if r is not None)
        return any(fs.is_under(path, root) for root in roots)

    def _index_roots(self) -> list[SearchRoot]:
        cfg = self._config.autoimport
        kinds: tuple[SearchRootKind, ...] = _PROJECT_ROOT_KINDS
        if cfg.include_library_files:
            kinds += _LIBRARY_ROOT_KINDS
        if cfg.include_typeshed:
            kinds += _TYPESHED_ROOT_KINDS
        roots = self._resolver.get_import_roots()
        for env in self._config.resolver.execution_environments:
            roots.extend(self._resolver.get_import_roots(env))
        return [r for r in roots if r.kind in kinds]

    def known_files(self) -> list[Path]:
        """Every module file that may be offered as an auto-import source."""
        if self._known_files is None:
            seen: set[str] = set()
            files: list[Path] = []
            for root in self._index_roots():
                in_library = root.kind not in _PROJECT_ROOT_KINDS
                for path in discover_source_files(root.path, in_library=in_library):
                    key = self.path_key(path)
                    if key not in seen:
                        seen.add(key)
                        files.append(path)
            self._known_files = files
            self._known_keys = seen
            logger.debug("known_files_discovered", files=len(files))
        return self._known_files

    def parse(self, path: Path) -> ParsedFile | None:
        """Parse *path*, cached. None when the file cannot be read."""
        key = self.path_key(path)
        if key not in self._parsed:
            text = self.fs.read_text(path)
            if text is None:
                logger.warning("source_unreadable", path=str(path))
                self._parsed[key] = None
            else:
                self._parsed[key] = ParsedFile.parse(text, path)
        return self._parsed[key]

    def get_symbol_table(self, path: Path) -> SymbolTable | None:
        key = self.path_key(path)
        if key not in self._tables:
            parsed = self.parse(path)
            self._tables[key] = build_symbol_table(parsed) if parsed is not None else None
        return self._tables[key]

    def has_stub_implementation(self, path: Path) -> bool:
        """True for a ``.pyi`` whose ``.py`` counterpart is also a known file.

        ``pkg-stubs/mod.pyi`` is matched against ``pkg/mod.py`` in the same parent.
        """
        if path.suffix != STUB_EXTENSION:
            return False
        self.known_files()
        candidates = [path.with_suffix(SOURCE_EXTENSION)]
        parts = list(path.with_suffix(SOURCE_EXTENSION).parts)
        for i, part in enumerate(parts):
            if part.endswith(STUBS_SUFFIX):
                parts[i] = part[: -len(STUBS_SUFFIX)]
                candidates.append(Path(*parts))
                break
        return any(self.path_key(c) in self._known_keys for c in candidates)

    def resolve_alias(self, path: Path, declaration: Declaration) -> IndexAliasData | None:
        """Where an import-bound name in a library module really comes from."""
        if declaration.module is None or self.is_in_project(path):
            return None
        result = self._resolver.resolve_import(path, declaration.module)
        if not result.is_import_found:
            return None

        name = declaration.imported_name
        if name is None:
            target = result.resolved_path
            if target is None or not declaration.module.name_parts:
                return None
            return IndexAliasData(declaration.module.name_parts[-1], target, SymbolKind.MODULE)

        for implicit in result.implicit_imports:
            if implicit.name == name:
                return IndexAliasData(name, implicit.path, SymbolKind.MODULE)

        target = result.resolved_path
        if target is None:
            return None
        kind = None
        table = self.get_symbol_table(target)
        symbol = table.get(name) if table is not None else None
        if symbol is not None and symbol.primary_declaration is not None:
            kind = symbol_kind_for(symbol.primary_declaration)
        return IndexAliasData(name, target, kind)

    def build_module_map(self, token: CancellationToken = NONE) -> ModuleSymbolMap:
        if self._module_map is None:
            self._module_map = build_module_symbols_map(self.known_files(), self, token)
        return self._module_map

    def invalidate(self, path: Path | None = None) -> None:
        """Drop cached state for *path*, or everything when None."""
        self.fs.invalidate(path)
        if path is None:
            self._parsed.clear()
            self._tables.clear()
            self._known_files = None
            self._known_keys = set()
        else:
            key = self.path_key(path)
            self._parsed.pop(key, None)
            self._tables.pop(key, None)
            if key not in self._known_keys:
                self._known_files = None
        self._module_map = None
        logger.debug("workspace_invalidated", path=str(path) if path else None)

    # -------------------------------------------------------------------------
    # Resolution
    # -------------------------------------------------------------------------

    def resolve(self, source_file: Path | None, module: ModuleName | str) -> ImportResult:
        with operation_context():
            return self._resolver.resolve_import(source_file, module)

    def import_roots(self, source_file: Path | None = None) -> list[SearchRoot]:
        env = None
        if source_file is not None:
            env = self._config.resolver.find_execution_environment(source_file, self.fs.is_under)
        return self._resolver.get_import_roots(env)

    def module_name(self, file: Path) -> ModuleImportInfo:
        env = self._config.resolver.find_execution_environment(file, self.fs.is_under)
        return self._resolver.get_module_name_for_import(file, env)

    # -------------------------------------------------------------------------
    # Auto-import
    # -------------------------------------------------------------------------

    def _parse_or_raise(self, file: Path) -> ParsedFile:
        parsed = self.parse(file)
        if parsed is None:
            raise ResolutionError.source_unreadable(str(file), "file could not be read as text")
        return parsed

    def complete(
        self,
        file: Path,
        word: str,
        *,
        position: Position | None = None,
        abbreviation: str | None = None,
        excludes: Collection[str] = (),
        token: CancellationToken = NONE,
    ) -> list[AutoImportResult]:
        """Auto-import candidates for *word* typed in *file* at *position*.

        Raises:
            ResolutionError: *file* cannot be read.
            OperationCancelledError: *token* fired during the search.
        """
        with operation_context():
            parsed = self._parse_or_raise(file)
            cfg = self._config.autoimport
            similarity_limit = 1.0 if len(word) <= cfg.exact_match_max_length else cfg.fuzzy_similarity_limit

            own_key = self.path_key(file)
            module_map = {k: v for k, v in self.build_module_map(token).items() if k != own_key}
            importer = AutoImporter(
                file,
                parsed,
                self._resolver,
                module_map,
                is_in_project=self.is_in_project,
                invocation=position,
                excludes=excludes,
                options=AutoImportOptions(lazy_edit=cfg.lazy_edit),
            )
            results = importer.get_auto_import_candidates(word, similarity_limit, abbreviation, token)
            if cfg.max_results and len(results) > cfg.max_results:
                logger.debug("candidates_truncated", total=len(results), limit=cfg.max_results)
                results = results[: cfg.max_results]
            return results

    def add_imports(
        self,
        file: Path,
        module: str,
        names: Sequence[str] = (),
        *,
        alias: str | None = None,
        position: Position | None = None,
    ) -> list[TextEdit]:
        """Edits that add ``import module`` (no *names*) or ``from module import names``.

        *alias* applies to the module when *names* is empty, otherwise to a
        single name. An import that already binds the request produces no
        edits, and missing names are appended to an existing
        ``from module import`` before a new statement is written.
        """
        with operation_context():
            parsed = self._parse_or_raise(file)
            result = self._resolver.resolve_import(file, module)
            statements = get_top_level_imports(parsed, self._resolver, file)
            info = AutoImportInfo(module_name=module, category=result.category)

            if not names:
                if _find_module_import(statements, module, alias) is not None:
                    logger.debug("import_already_present", module=module)
                    return []
                return get_text_edits_for_insertions(
                    ImportNameWithModuleInfo(module=info, alias=alias), statements, parsed, position
                )

            requested = [ImportNameInfo(n, alias if len(names) == 1 else None) for n in names]
            existing = _find_from_import(statements, module)
            if existing is not None:
                return get_text_edits_for_symbol_addition(requested, existing, parsed)
            return get_text_edits_for_insertions(
                [ImportNameWithModuleInfo(module=info, name=i.name, alias=i.alias) for i in requested],
                statements,
                parsed,
                position,
            )


def _find_module_import(statements: ImportStatements, module: str, alias: str | None) -> ImportStatement | None:
    """An ``import module`` (``as alias``) that already binds the request."""
    for statement in statements.ordered_imports:
        if not statement.node.is_from and statement.module_name == module and statement.alias == alias:
            return statement
    return None


def _find_from_import(statements: ImportStatements, module: str) -> ImportStatement | None:
    """The first ``from module import ...`` new names can be appended to."""
    for statement in statements.ordered_imports:
        if statement.node.is_from and not statement.is_wildcard and statement.module_name == module:
            return statement
    return None
