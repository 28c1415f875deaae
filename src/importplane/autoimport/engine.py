"""Auto-import candidate search.

Matches a typed word against the module symbol map, and for each match
works out how the symbol would be imported into the current file.
"""

from __future__ import annotations

from collections.abc import Callable, Collection
from pathlib import Path

import structlog

from importplane.autoimport.models import (
    AutoImportOptions,
    AutoImportResult,
    AutoImportSymbol,
    ImportAliasData,
    ImportGroup,
    ImportNameInfo,
    ImportParts,
    ImportStatements,
    ModuleNameInfo,
    ModuleSymbolMap,
    ModuleSymbolTable,
    SymbolKind,
    TextEditsResult,
)
from importplane.autoimport.ordering import (
    get_import_group,
    get_import_group_from_auto_import_info,
)
from importplane.autoimport.statements import get_top_level_imports
from importplane.autoimport.synthesizer import get_text_edits_for_auto_import_by_file_path
from importplane.config.constants import INIT_STEM, SOURCE_EXTENSIONS, STUB_EXTENSION
from importplane.core.cancellation import NONE, CancellationToken, throw_if_cancellation_requested
from importplane.core.naming import is_public_constant_or_type_alias
from importplane.parsing.models import Position
from importplane.parsing.parser import ParsedFile
from importplane.resolution.models import AutoImportInfo, ImportCategory
from importplane.resolution.resolver import ImportResolver

logger = structlog.get_logger()

AutoImportResultMap = dict[str, list[AutoImportResult]]
AliasMap = dict[str, dict[str, ImportAliasData]]


def is_pattern_in_symbol(typed_value: str, symbol_name: str) -> bool:
    """Case-insensitive subsequence test."""
    typed = typed_value.lower()
    symbol = symbol_name.lower()
    typed_pos = 0
    for ch in symbol:
        if typed_pos == len(typed):
            break
        if typed[typed_pos] == ch:
            typed_pos += 1
    return typed_pos == len(typed)


def compare_import_alias_data(left: ImportAliasData, right: ImportAliasData) -> int:
    """Negative when *left* is the better way to import the same symbol."""
    group = left.import_group - right.import_group
    if group != 0:
        return group
    dots = left.import_parts.dot_count - right.import_parts.dot_count
    if dots != 0:
        return dots
    if left.symbol is not None and right.symbol is None:
        return -1
    if left.symbol is None and right.symbol is not None:
        return 1
    a, b = left.import_parts.import_name, right.import_parts.import_name
    return (a > b) - (a < b)


def add_to_alias_map(alias_map: AliasMap, owner_key: str, original_name: str, data: ImportAliasData) -> None:
    """Keep the best candidate per (defining module, original name)."""
    per_module = alias_map.setdefault(owner_key, {})
    existing = per_module.get(original_name)
    if existing is not None and compare_import_alias_data(existing, data) <= 0:
        return
    per_module[original_name] = data


class AutoImporter:
    """Auto-import candidates for one file at one invocation point.

    Usage::

        importer = AutoImporter(path, parsed, resolver, module_map, is_in_project=ws.is_in_project)
        for result in importer.get_auto_import_candidates("Ord", similarity_limit=0.25):
            print(result.name, result.source, result.insertion_text)
    """

    def __init__(
        self,
        source_file: Path,
        parsed: ParsedFile,
        resolver: ImportResolver,
        module_symbol_map: ModuleSymbolMap,
        *,
        is_in_project: Callable[[Path], bool] | None = None,
        invocation: Position | None = None,
        excludes: Collection[str] = (),
        options: AutoImportOptions | None = None,
        import_statements: ImportStatements | None = None,
    ) -> None:
        self._source_file = source_file
        self._parsed = parsed
        self._resolver = resolver
        self._module_symbol_map = module_symbol_map
        self._is_in_project = is_in_project or (lambda _path: False)
        self._invocation = invocation
        self._excludes = frozenset(excludes)
        self._options = options or AutoImportOptions()
        self._import_statements = import_statements or get_top_level_imports(parsed, resolver, source_file)

    @property
    def import_statements(self) -> ImportStatements:
        return self._import_statements

    def get_auto_import_candidates(
        self,
        word: str,
        similarity_limit: float,
        abbr_from_users: str | None = None,
        token: CancellationToken = NONE,
    ) -> list[AutoImportResult]:
        """Candidates for *word*; a limit of 1 requires an exact name match.

        Raises ``OperationCancelledError`` if *token* fires; partial results
        are discarded.
        """
        result_map = self.get_candidates(word, similarity_limit, abbr_from_users, token)
        results = [r for entries in result_map.values() for r in entries]
        logger.debug(
            "auto_import_candidates",
            word=word,
            modules=len(self._module_symbol_map),
            results=len(results),
        )
        return results

    def get_candidates(
        self,
        word: str,
        similarity_limit: float,
        abbr_from_users: str | None,
        token: CancellationToken,
    ) -> AutoImportResultMap:
        results: AutoImportResultMap = {}
        alias_map: AliasMap = {}
        for table in list(self._module_symbol_map.values()):
            self.process_module_symbol_table(
                table, word, similarity_limit, abbr_from_users, alias_map, results, token
            )
        self._add_imports_from_alias_map(alias_map, abbr_from_users, results, token)
        return results

    # -------------------------------------------------------------------------
    # Per module
    # -------------------------------------------------------------------------

    def _file_properties(self, path: Path) -> tuple[bool, bool, bool]:
        fs = self._resolver.fs
        is_stub = path.suffix == STUB_EXTENSION
        has_init = any(
            fs.path_key(path.parent / f"{INIT_STEM}{ext}") in self._module_symbol_map for ext in SOURCE_EXTENSIONS
        )
        return is_stub, has_init, bool(self._is_in_project(path))

    def process_module_symbol_table(
        self,
        table: ModuleSymbolTable,
        word: str,
        similarity_limit: float,
        abbr_from_users: str | None,
        alias_map: AliasMap,
        results: AutoImportResultMap,
        token: CancellationToken = NONE,
    ) -> None:
        throw_if_cancellation_requested(token, "get_auto_import_candidates")
        module_path = table.path
        target = self._import_parts_for_target_module(module_path)
        if target is None:
            return
        import_group, target_info = target
        module_name = target_info.module_name
        is_stub, has_init, is_user_code = self._file_properties(module_path)
        dot_count = module_name.count(".")
        module_key = self._resolver.fs.path_key(module_path)

        for auto_symbol in table.get_symbols():
            if not self._should_include_variable(auto_symbol, is_stub):
                continue
            name = auto_symbol.name
            if not self._is_similar(word, name, similarity_limit):
                continue
            if self._contains_name(name, module_name, results):
                continue

            if auto_symbol.import_alias is not None:
                alias = auto_symbol.import_alias
                add_to_alias_map(
                    alias_map,
                    self._resolver.fs.path_key(alias.module_path),
                    alias.original_name,
                    ImportAliasData(
                        import_parts=ImportParts(
                            import_name=name,
                            file_path=module_path,
                            dot_count=dot_count,
                            target_import_info=target_info,
                            symbol_name=name,
                            import_from=module_name,
                        ),
                        import_group=import_group,
                        file_path=alias.module_path,
                        symbol=auto_symbol.symbol,
                        kind=alias.kind,
                        in_dunder_all=auto_symbol.in_dunder_all,
                        has_redundant_alias=auto_symbol.has_redundant_alias,
                    ),
                )
                continue

            edits = self._text_edits_by_file_path(
                ImportNameInfo(name, abbr_from_users),
                ModuleNameInfo(module_name),
                name,
                import_group,
                module_key,
            )
            self._add_result(
                results,
                AutoImportResult(
                    name=name,
                    alias=abbr_from_users,
                    symbol=auto_symbol.symbol,
                    source=module_name,
                    kind=auto_symbol.kind,
                    insertion_text=edits.insertion_text,
                    edits=edits.edits,
                    decl_path=module_path,
                    original_name=name,
                    original_decl_path=module_path,
                ),
            )

        # a package member or stub outside user code can be imported as a module
        if not (is_stub or has_init) or is_user_code:
            return
        parts = self._import_parts(module_path)
        if parts is None:
            return
        if not self._is_similar(word, parts.import_name, similarity_limit):
            return
        if self._contains_name(parts.import_name, parts.import_from, results):
            return
        add_to_alias_map(
            alias_map,
            module_key,
            parts.import_name,
            ImportAliasData(
                import_parts=parts,
                import_group=import_group,
                file_path=module_path,
                kind=SymbolKind.MODULE,
            ),
        )

    # -------------------------------------------------------------------------
    # Aliases
    # -------------------------------------------------------------------------

    def _add_imports_from_alias_map(
        self,
        alias_map: AliasMap,
        abbr_from_users: str | None,
        results: AutoImportResultMap,
        token: CancellationToken,
    ) -> None:
        throw_if_cancellation_requested(token, "get_auto_import_candidates")
        fs = self._resolver.fs
        statements = self._import_statements
        for per_module in alias_map.values():
            for original_name, data in per_module.items():
                parts = data.import_parts
                if abbr_from_users:
                    # "import numpy" then "np|": the module is already imported
                    if fs.path_key(parts.file_path) in statements.map_by_file_path:
                        continue
                    # "from scipy import io as spio" then "io|"
                    if parts.import_from:
                        imported = next(
                            (s for s in statements.ordered_imports if s.module_name == parts.import_from),
                            None,
                        )
                        if (
                            imported is not None
                            and imported.node.is_from
                            and any(e.name == parts.symbol_name for e in imported.node.entries)
                        ):
                            continue

                if self._contains_name(parts.import_name, parts.import_from, results):
                    continue

                edits = self._text_edits_by_file_path(
                    ImportNameInfo(parts.symbol_name, abbr_from_users),
                    ModuleNameInfo(parts.import_from or parts.import_name),
                    parts.import_name,
                    data.import_group,
                    fs.path_key(parts.file_path),
                )
                self._add_result(
                    results,
                    AutoImportResult(
                        name=parts.import_name,
                        alias=abbr_from_users,
                        symbol=data.symbol,
                        kind=data.kind,
                        source=parts.import_from,
                        insertion_text=edits.insertion_text,
                        edits=edits.edits,
                        decl_path=parts.file_path,
                        original_name=original_name,
                        original_decl_path=data.file_path,
                    ),
                )

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _text_edits_by_file_path(
        self,
        import_name_info: ImportNameInfo,
        module_name_info: ModuleNameInfo,
        insertion_text: str,
        import_group: ImportGroup,
        file_key: str,
    ) -> TextEditsResult:
        return get_text_edits_for_auto_import_by_file_path(
            import_name_info,
            module_name_info,
            insertion_text,
            import_group,
            file_key,
            self._import_statements,
            self._parsed,
            self._invocation,
            lazy_edit=self._options.lazy_edit,
        )

    def _import_parts_for_target_module(self, path: Path) -> tuple[ImportGroup, AutoImportInfo] | None:
        local = self._import_statements.map_by_file_path.get(self._resolver.fs.path_key(path))
        if local is not None:
            return get_import_group(local), AutoImportInfo(local.module_name, ImportCategory.LOCAL)
        info = self._resolver.get_auto_import_info(self._source_file, path)
        if info is None:
            return None
        return get_import_group_from_auto_import_info(info), info

    def _import_parts(self, path: Path) -> ImportParts | None:
        stem = path.name.split(".", 1)[0]
        target = path.parent if stem == INIT_STEM else path
        info = self._resolver.get_auto_import_info(self._source_file, target)
        if info is None or not info.module_name:
            return None
        module_name = info.module_name
        index = module_name.rfind(".")
        import_name_part = module_name[index + 1 :] if index > 0 else None
        import_from = module_name[:index] if index > 0 else None
        return ImportParts(
            import_name=import_name_part or module_name,
            file_path=path,
            dot_count=module_name.count("."),
            target_import_info=info,
            symbol_name=import_name_part,
            import_from=import_from,
        )

    def _should_include_variable(self, auto_symbol: AutoImportSymbol, is_stub: bool) -> bool:
        if is_stub or auto_symbol.kind != SymbolKind.VARIABLE:
            return True
        return is_public_constant_or_type_alias(auto_symbol.name)

    def _is_similar(self, word: str, name: str, similarity_limit: float) -> bool:
        if similarity_limit == 1:
            return word == name
        if not word or not name:
            return False
        matcher = self._options.pattern_matcher
        if matcher is not None:
            return matcher(word, name)
        index = 1 if word[0] != "_" and name[0] == "_" and len(name) > 1 else 0
        if word[0].lower() != name[index].lower():
            return False
        return is_pattern_in_symbol(word, name)

    def _contains_name(self, name: str, source: str | None, results: AutoImportResultMap) -> bool:
        if name in self._excludes:
            return True
        return any(r.source == source for r in results.get(name, ()))

    @staticmethod
    def _add_result(results: AutoImportResultMap, result: AutoImportResult) -> None:
        results.setdefault(result.name, []).append(result)

