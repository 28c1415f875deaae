"""Import ordering and edit merging.

Names inside an import sort the way isort does by default: constants,
then CamelCase names, then everything else, with ``_`` sorting before
letters. Edits landing on the same spot are merged into one so callers
never receive overlapping edits.
"""

from __future__ import annotations

from functools import cmp_to_key

from importplane.autoimport.models import (
    AdditionEdit,
    ImportGroup,
    ImportStatement,
    InsertionEdit,
)
from importplane.core.naming import (
    is_constant_name,
    is_dunder_name,
    is_private_name,
    is_private_or_protected_name,
    is_protected_name,
    is_public_constant_or_type_alias,
    is_type_alias_name,
)
from importplane.parsing.models import TextEdit
from importplane.resolution.models import AutoImportInfo, ImportCategory, ImportType

__all__ = [
    "compare_import_names",
    "compare_import_statements",
    "get_import_group",
    "get_import_group_from_auto_import_info",
    "import_name_sort_key",
    "import_symbol_name_type",
    "is_constant_name",
    "is_dunder_name",
    "is_private_name",
    "is_private_or_protected_name",
    "is_protected_name",
    "is_public_constant_or_type_alias",
    "is_type_alias_name",
    "merge_addition_edits",
    "merge_insertion_edits",
]


def import_symbol_name_type(name: str) -> int:
    """0 for CONSTANT_NAME, 1 for CamelCaseName, 2 for anything else."""
    if is_constant_name(name):
        return 0
    if is_type_alias_name(name):
        return 1
    return 2


def _compare(a: str, b: str) -> int:
    return (a > b) - (a < b)


def compare_import_names(name1: str, name2: str) -> int:
    category = import_symbol_name_type(name1) - import_symbol_name_type(name2)
    if category != 0:
        return category
    # '=' sorts below letters and digits and never appears in identifiers
    return _compare(name1.replace("_", "="), name2.replace("_", "="))


import_name_sort_key = cmp_to_key(compare_import_names)


def compare_import_statements(a: str, b: str) -> int:
    """``import x`` statements before ``from x import y``, then by text."""
    a_is_import = a.startswith("import")
    b_is_import = b.startswith("import")
    if a_is_import == b_is_import:
        return -1 if a < b else 1
    return -1 if a_is_import else 1


def get_import_group(statement: ImportStatement) -> ImportGroup:
    result = statement.import_result
    if result is not None:
        if result.import_type == ImportType.STDLIB:
            return ImportGroup.STDLIB
        if result.import_type == ImportType.THIRD_PARTY or result.is_local_typings_file:
            return ImportGroup.EXTERNAL
        if result.is_relative:
            return ImportGroup.LOCAL_RELATIVE
    return ImportGroup.LOCAL


def get_import_group_from_auto_import_info(info: AutoImportInfo) -> ImportGroup:
    if info.category in (ImportCategory.LOCAL_STUB, ImportCategory.EXTERNAL):
        return ImportGroup.EXTERNAL
    if info.category == ImportCategory.STDLIB:
        return ImportGroup.STDLIB
    if info.module_name.startswith("."):
        return ImportGroup.LOCAL_RELATIVE
    return ImportGroup.LOCAL


def merge_insertion_edits(edits: list[InsertionEdit], eol: str) -> list[TextEdit]:
    """Collapse insertions sharing (group, range) into one block of statements."""
    if len(edits) < 2:
        return [TextEdit(e.range, e.pre_change + e.import_statement + e.post_change) for e in edits]

    grouped: dict[tuple[ImportGroup, object], list[InsertionEdit]] = {}
    for edit in edits:
        grouped.setdefault((edit.import_group, edit.range), []).append(edit)

    merged: list[TextEdit] = []
    for key in sorted(grouped, key=lambda k: (k[0], k[1])):
        group = grouped[key]
        first = group[0]
        if len(group) == 1:
            merged.append(TextEdit(first.range, first.pre_change + first.import_statement + first.post_change))
            continue
        statements = sorted((e.import_statement for e in group), key=cmp_to_key(compare_import_statements))
        merged.append(TextEdit(first.range, first.pre_change + eol.join(statements) + first.post_change))
    return merged


def merge_addition_edits(edits: list[AdditionEdit]) -> list[TextEdit]:
    """Concatenate symbol additions at the same position in name order."""
    grouped: dict[object, list[AdditionEdit]] = {}
    for edit in edits:
        grouped.setdefault(edit.range, []).append(edit)

    merged: list[TextEdit] = []
    for group in grouped.values():
        if len(group) == 1:
            merged.append(group[0].to_text_edit())
            continue
        ordered = sorted(group, key=lambda e: import_name_sort_key(e.import_name))
        merged.append(TextEdit(group[0].range, "".join(e.replacement_text for e in ordered)))
    return merged
