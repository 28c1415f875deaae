"""Tests for extending an existing ``from ... import`` statement."""

from __future__ import annotations

import pytest

from importplane.autoimport.models import ImportNameInfo, ImportStatement
from importplane.autoimport.synthesizer import get_text_edits_for_symbol_addition
from importplane.parsing.models import apply_text_edits
from importplane.parsing.parser import ParsedFile


def _add(text: str, *infos: ImportNameInfo) -> str:
    parsed = ParsedFile.parse(text)
    node = parsed.imports[0]
    statement = ImportStatement(
        node=node,
        module_name=str(node.module),
        import_result=None,
        resolved_path=None,
        follows_non_import_statement=False,
    )
    edits = get_text_edits_for_symbol_addition(list(infos), statement, parsed)
    return apply_text_edits(text, edits)


class TestInline:
    @pytest.mark.parametrize(
        ("text", "name", "expected"),
        [
            ("from m import a, c\n", "b", "from m import a, b, c\n"),
            ("from m import a\n", "z", "from m import a, z\n"),
            ("from m import b\n", "a", "from m import a, b\n"),
            ("from m import helper\n", "HelperClass", "from m import HelperClass, helper\n"),
            ("from m import a\n", "_a", "from m import _a, a\n"),
            ("from m import (a, c)\n", "b", "from m import (a, b, c)\n"),
        ],
    )
    def test_insertion_point(self, text: str, name: str, expected: str) -> None:
        assert _add(text, ImportNameInfo(name)) == expected

    def test_alias(self) -> None:
        assert _add("from m import a\n", ImportNameInfo("b", "bb")) == "from m import a, b as bb\n"

    def test_simultaneous_additions_merge(self) -> None:
        # Given one existing name
        text = "from sys import argv\n"

        # When two aliased names are added at once
        result = _add(text, ImportNameInfo("noon", "n"), ImportNameInfo("meta_path", "m"))

        # Then both land in one edit, in name order
        assert result == "from sys import argv, meta_path as m, noon as n\n"


class TestOnePerLine:
    def test_after_existing_name(self) -> None:
        text = "from m import (\n    a,\n    c,\n)\n"

        assert _add(text, ImportNameInfo("b")) == "from m import (\n    a,\n    b,\n    c,\n)\n"

    def test_before_first_name(self) -> None:
        text = "from m import (\n    b,\n    c,\n)\n"

        assert _add(text, ImportNameInfo("a")) == "from m import (\n    a,\n    b,\n    c,\n)\n"

    def test_crlf(self) -> None:
        text = "from m import (\r\n    a,\r\n    c,\r\n)\r\n"

        assert _add(text, ImportNameInfo("b")) == "from m import (\r\n    a,\r\n    b,\r\n    c,\r\n)\r\n"

    def test_two_names_on_second_line_stay_inline(self) -> None:
        text = "from m import (\n    a, c,\n)\n"

        assert _add(text, ImportNameInfo("b")) == "from m import (\n    a, b, c,\n)\n"


class TestNoEdits:
    def test_same_name_and_alias_already_present(self) -> None:
        parsed = ParsedFile.parse("from m import a as x\n")
        node = parsed.imports[0]
        statement = ImportStatement(node, "m", None, None, False)

        assert get_text_edits_for_symbol_addition(ImportNameInfo("a", "x"), statement, parsed) == []

    @pytest.mark.parametrize("text", ["from m import *\n", "import m\n"])
    def test_wildcard_and_plain_imports_cannot_be_extended(self, text: str) -> None:
        parsed = ParsedFile.parse(text)
        statement = ImportStatement(parsed.imports[0], "m", None, None, False)

        assert get_text_edits_for_symbol_addition(ImportNameInfo("a"), statement, parsed) == []
