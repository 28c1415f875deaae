"""Index of a file's existing top-level imports."""

from __future__ import annotations

from pathlib import Path

import structlog

from importplane.autoimport.models import ImportStatement, ImportStatements
from importplane.parsing.models import ImportNode
from importplane.parsing.parser import ParsedFile
from importplane.resolution.models import ImportResult, ModuleName
from importplane.resolution.resolver import ImportResolver

logger = structlog.get_logger()


def get_top_level_imports(
    parsed: ParsedFile,
    resolver: ImportResolver,
    source_file: Path | None = None,
    *,
    include_implicit_imports: bool = True,
) -> ImportStatements:
    """Collect the module-level imports of *parsed*, resolved from *source_file*.

    ``map_by_file_path`` prefers ``from`` imports over plain imports, and
    among ``from`` imports the shortest module name.
    """
    source_file = source_file if source_file is not None else parsed.path
    statements = ImportStatements()
    follows_non_import = False
    found_first_import = False

    for statement in parsed.statements:
        if not statement.is_simple:
            follows_non_import = found_first_import
            continue
        for part in statement.parts:
            node = part.import_node
            if node is None:
                follows_non_import = found_first_import
                continue
            if node.is_from:
                _process_import_from(node, statements, follows_non_import, resolver, source_file, include_implicit_imports)
            else:
                _process_import(node, statements, follows_non_import, resolver, source_file)
            follows_non_import = False
            found_first_import = True

    logger.debug(
        "top_level_imports_collected",
        path=str(source_file) if source_file else None,
        imports=len(statements.ordered_imports),
        resolved=len(statements.map_by_file_path),
    )
    return statements


def _resolve(resolver: ImportResolver, source_file: Path | None, module: ModuleName) -> ImportResult | None:
    if not module.name_parts and not module.is_relative:
        return None
    return resolver.resolve_import(source_file, module)


def _process_import(
    node: ImportNode,
    statements: ImportStatements,
    follows_non_import: bool,
    resolver: ImportResolver,
    source_file: Path | None,
) -> None:
    fs = resolver.fs
    for entry in node.entries:
        module = node.module_for(entry)
        result = _resolve(resolver, source_file, module)
        resolved_path = result.resolved_path if result is not None and result.is_import_found else None
        local = ImportStatement(
            node=node,
            subnode=entry,
            import_result=result,
            resolved_path=resolved_path,
            module_name=str(module),
            follows_non_import_statement=follows_non_import,
        )
        statements.ordered_imports.append(local)
        if resolved_path is not None:
            statements.map_by_file_path.setdefault(fs.path_key(resolved_path), local)


def _process_import_from(
    node: ImportNode,
    statements: ImportStatements,
    follows_non_import: bool,
    resolver: ImportResolver,
    source_file: Path | None,
    include_implicit_imports: bool,
) -> None:
    fs = resolver.fs
    module = node.module or ModuleName()
    result = _resolve(resolver, source_file, module)
    resolved_path = result.resolved_path if result is not None and result.is_import_found else None

    if include_implicit_imports and result is not None:
        for implicit in result.implicit_imports:
            entry = next((e for e in node.entries if e.name == implicit.name), None)
            if entry is not None:
                statements.implicit_imports[fs.path_key(implicit.path)] = entry

    local = ImportStatement(
        node=node,
        import_result=result,
        resolved_path=resolved_path,
        module_name=str(module),
        follows_non_import_statement=follows_non_import,
    )
    statements.ordered_imports.append(local)
    if resolved_path is not None:
        key = fs.path_key(resolved_path)
        previous = statements.map_by_file_path.get(key)
        if previous is None or not previous.node.is_from or len(previous.module_name) > len(local.module_name):
            statements.map_by_file_path[key] = local
