"""Import statement synthesis.

Decides whether an existing import already provides a name, extends an
existing ``from`` import, or writes a new statement in the right import
group. All output is plain ``TextEdit`` values against the parsed text.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from functools import cmp_to_key

from importplane.autoimport.models import (
    AdditionEdit,
    ImportGroup,
    ImportNameInfo,
    ImportNameWithModuleInfo,
    ImportStatement,
    ImportStatements,
    InsertionEdit,
    ModuleNameInfo,
    TextEditsResult,
)
from importplane.autoimport.ordering import (
    compare_import_names,
    get_import_group,
    get_import_group_from_auto_import_info,
    merge_addition_edits,
    merge_insertion_edits,
)
from importplane.core.naming import is_dunder_name
from importplane.parsing.models import ImportNode, Position, Range, StatementKind, TextEdit
from importplane.parsing.parser import ParsedFile

_INDENT_RE = re.compile(r"^\s*$")


# =============================================================================
# Reuse or insert
# =============================================================================


def get_text_edits_for_auto_import_by_file_path(
    import_name_info: ImportNameInfo,
    module_name_info: ModuleNameInfo,
    insertion_text: str,
    import_group: ImportGroup,
    file_key: str,
    import_statements: ImportStatements,
    parsed: ParsedFile,
    invocation: Position | None = None,
    *,
    lazy_edit: bool = False,
) -> TextEditsResult:
    """Text to complete with, plus the edits that make it resolve.

    *file_key* is the path key of the module file being imported. When an
    existing statement already binds the name, no edits are produced; with
    *lazy_edit* the edits of a new or extended statement are left as None.
    """
    name = import_name_info.name
    statement = import_statements.map_by_file_path.get(file_key)
    if statement is not None:
        node = statement.node
        if not node.is_from:
            if name:
                # import module  ->  module.name
                return TextEditsResult(f"{statement.alias or statement.module_name}.{name}")
            if statement.alias:
                return TextEditsResult(statement.alias)

        if name and node.is_from and not node.is_wildcard:
            existing = next((e for e in node.entries if e.name == name), None)
            if existing is not None:
                return TextEditsResult(existing.alias or name)
            # never extend "from os.path import dirname" with "path"
            if module_name_info.name == statement.module_name:
                return TextEditsResult(
                    import_name_info.alias or insertion_text,
                    None if lazy_edit else get_text_edits_for_symbol_addition(import_name_info, statement, parsed),
                )
    elif name:
        imported = next(
            (s for s in import_statements.ordered_imports if s.module_name == module_name_info.name),
            None,
        )
        if imported is not None and imported.node.is_from and not imported.node.is_wildcard:
            existing = next((e for e in imported.node.entries if e.name == name), None)
            if existing is None:
                return TextEditsResult(
                    import_name_info.alias or insertion_text,
                    None if lazy_edit else get_text_edits_for_symbol_addition(import_name_info, imported, parsed),
                )
            if existing.alias:
                return TextEditsResult(existing.alias)

        implicit = import_statements.implicit_imports.get(file_key)
        if implicit is not None:
            return TextEditsResult(f"{implicit.alias or implicit.name}.{name}")

    return TextEditsResult(
        import_name_info.alias or insertion_text,
        None
        if lazy_edit
        else get_text_edits_for_insertion(
            import_name_info,
            module_name_info,
            import_statements,
            import_group,
            parsed,
            invocation,
        ),
    )


# =============================================================================
# Extending an existing from-import
# =============================================================================


def get_text_edits_for_symbol_addition(
    import_name_info: ImportNameInfo | Sequence[ImportNameInfo],
    statement: ImportStatement,
    parsed: ParsedFile,
) -> list[TextEdit]:
    """Add names to an existing ``from ... import`` keeping its layout."""
    node = statement.node
    if not node.is_from or node.is_wildcard:
        return []
    infos = [import_name_info] if isinstance(import_name_info, ImportNameInfo) else list(import_name_info)
    infos = [
        info
        for info in infos
        if info.name and not any(e.name == info.name and e.alias == info.alias for e in node.entries)
    ]
    if not infos:
        return []
    additions = [_symbol_addition(info.name or "", info.alias, node, parsed) for info in infos]
    return merge_addition_edits(additions)


def _symbol_addition(name: str, alias: str | None, node: ImportNode, parsed: ParsedFile) -> AdditionEdit:
    prior = None
    for entry in node.entries:
        if compare_import_names(entry.name, name) > 0:
            break
        prior = entry

    # from x import a, b, c     or     from x import (
    #                                       a,
    #                                   )
    one_per_line = False
    indent_text = ""
    if node.entries:
        statement_pos = parsed.offset_to_position(node.start)
        first_pos = parsed.offset_to_position(node.entries[0].start)
        second_pos = parsed.offset_to_position(node.entries[1].start) if len(node.entries) > 1 else None
        if first_pos.line > statement_pos.line and (second_pos is None or second_pos.line > first_pos.line):
            line_start = parsed.line_start_offset(first_pos.line)
            indent_text = parsed.text[line_start : line_start + first_pos.character]
            one_per_line = bool(_INDENT_RE.match(indent_text))

    if prior is not None:
        offset = prior.end
    elif node.entries:
        offset = node.entries[0].start
    else:
        offset = node.end
    position = parsed.offset_to_position(offset)

    text = f"{name} as {alias}" if alias else name
    if one_per_line:
        eol = parsed.eol
        replacement = f",{eol}{indent_text}{text}" if prior is not None else f"{text},{eol}{indent_text}"
    else:
        replacement = f", {text}" if prior is not None else f"{text}, "
    return AdditionEdit(Range.point(position), name, replacement)


# =============================================================================
# New statements
# =============================================================================


def get_text_edits_for_insertions(
    import_name_info: ImportNameWithModuleInfo | Sequence[ImportNameWithModuleInfo],
    import_statements: ImportStatements,
    parsed: ParsedFile,
    invocation: Position | None = None,
) -> list[TextEdit]:
    """New statements for names from possibly several modules, merged by location."""
    infos = (
        [import_name_info] if isinstance(import_name_info, ImportNameWithModuleInfo) else list(import_name_info)
    )
    if not infos:
        return []

    by_module: dict[tuple[str, str], list[ImportNameWithModuleInfo]] = {}
    for info in infos:
        by_module.setdefault((info.module.module_name, info.name_for_import_from or ""), []).append(info)

    edits: list[InsertionEdit] = []
    for group in by_module.values():
        first = group[0]
        edits.extend(
            get_insertion_edits(
                [ImportNameInfo(i.name, i.alias) for i in group],
                ModuleNameInfo(first.module.module_name, first.name_for_import_from),
                import_statements,
                get_import_group_from_auto_import_info(first.module),
                parsed,
                invocation,
            )
        )
    return merge_insertion_edits(edits, parsed.eol)


def get_text_edits_for_insertion(
    import_name_info: ImportNameInfo | Sequence[ImportNameInfo],
    module_name_info: ModuleNameInfo,
    import_statements: ImportStatements,
    import_group: ImportGroup,
    parsed: ParsedFile,
    invocation: Position | None = None,
) -> list[TextEdit]:
    edits = get_insertion_edits(
        import_name_info, module_name_info, import_statements, import_group, parsed, invocation
    )
    return merge_insertion_edits(edits, parsed.eol)


def get_insertion_edits(
    import_name_info: ImportNameInfo | Sequence[ImportNameInfo],
    module_name_info: ModuleNameInfo,
    import_statements: ImportStatements,
    import_group: ImportGroup,
    parsed: ParsedFile,
    invocation: Position | None = None,
) -> list[InsertionEdit]:
    """``import M`` for module-only entries, ``from M import ...`` for the rest."""
    infos = [import_name_info] if isinstance(import_name_info, ImportNameInfo) else list(import_name_info)
    if not infos:
        infos = [ImportNameInfo()]

    module_only = [i for i in infos if not i.name]
    with_names = [i for i in infos if i.name]
    edits: list[InsertionEdit] = []

    def import_names(group: list[ImportNameInfo]) -> list[str]:
        entries = []
        for info in group:
            text = info.name or module_name_info.name
            entries.append((text, f"{text} as {info.alias}" if info.alias else text))
        entries.sort(key=cmp_to_key(lambda a, b: compare_import_names(a[0], b[0])))
        unique: list[str] = []
        for _, text in entries:
            if text not in unique:
                unique.append(text)
        return unique

    if module_only:
        statement = f"import {', '.join(import_names(module_only))}"
        edits.append(
            _insertion_edit(statement, import_statements, module_name_info.name, import_group, parsed, invocation)
        )
    if with_names:
        source = module_name_info.name_for_import_from or module_name_info.name
        statement = f"from {source} import {', '.join(import_names(with_names))}"
        edits.append(
            _insertion_edit(statement, import_statements, module_name_info.name, import_group, parsed, invocation)
        )
    return edits


def _insertion_edit(
    import_statement: str,
    import_statements: ImportStatements,
    module_name: str,
    import_group: ImportGroup,
    parsed: ParsedFile,
    invocation: Position | None,
) -> InsertionEdit:
    eol = parsed.eol
    pre_change = ""
    post_change = ""
    invocation_offset = len(parsed.text) if invocation is None else parsed.position_to_offset(invocation)
    ordered = import_statements.ordered_imports

    if ordered and invocation_offset > ordered[0].node.start:
        insert_before = True
        insertion_import = ordered[0]
        prev_group = ImportGroup.STDLIB
        for current in ordered:
            current_group = get_import_group(current) if current.import_result is not None else prev_group

            if import_group < current_group:
                if not insert_before and prev_group < import_group:
                    pre_change = eol + pre_change
                break

            if import_group == current_group and current.module_name > module_name:
                insert_before = True
                insertion_import = current
                break

            # end of the contiguous import block
            if current.follows_non_import_statement:
                if import_group > prev_group:
                    pre_change = eol + pre_change
                break

            if current is ordered[-1] and import_group > current_group:
                pre_change = eol + pre_change

            insert_before = not insert_before and import_group < prev_group and import_group == current_group
            prev_group = current_group
            insertion_import = current

        if insert_before:
            post_change = post_change + eol
        else:
            pre_change = eol + pre_change
        node = insertion_import.node
        position = parsed.offset_to_position(node.start if insert_before else node.end)
    else:
        position, skipped_header = _top_of_file_position(parsed)
        post_change = post_change + eol + eol
        if skipped_header:
            pre_change = eol + pre_change
        else:
            post_change = post_change + eol

    return InsertionEdit(Range.point(position), pre_change, import_statement, post_change, import_group)


def _top_of_file_position(parsed: ParsedFile) -> tuple[Position, bool]:
    """Insertion point after a leading docstring and ``__dunder__ = ...`` banner lines."""
    position = Position(0, 0)
    skipped = False
    for statement in parsed.statements:
        stop_here = True
        if len(statement.parts) == 1:
            part = statement.parts[0]
            if part.kind == StatementKind.STRING:
                stop_here = False
            elif part.kind == StatementKind.ASSIGNMENT and part.assigned_name and is_dunder_name(part.assigned_name):
                stop_here = False
        if stop_here:
            return parsed.offset_to_position(statement.start), False
        position = parsed.offset_to_position(statement.end)
        skipped = True
    return position, skipped
