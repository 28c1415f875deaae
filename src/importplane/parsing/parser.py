"""Tree-sitter backed view of a Python source file.

Exposes exactly what import synthesis needs: the module-level statement
list, top-level import statements, a line index and the file's
predominant end-of-line sequence. Tree-sitter is error tolerant, so any
text yields a ``ParsedFile``.
"""

from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any

import structlog
import tree_sitter
import tree_sitter_python

from importplane.config.constants import STUB_EXTENSION
from importplane.parsing.models import (
    ImportAs,
    ImportNode,
    Position,
    SimpleStatement,
    StatementKind,
    TopLevelStatement,
)
from importplane.resolution.models import ModuleName

logger = structlog.get_logger()

_SIMPLE_STATEMENT_TYPES = frozenset(
    {
        "import_statement",
        "import_from_statement",
        "future_import_statement",
        "expression_statement",
        "print_statement",
        "assert_statement",
        "return_statement",
        "delete_statement",
        "raise_statement",
        "pass_statement",
        "break_statement",
        "continue_statement",
        "global_statement",
        "nonlocal_statement",
        "exec_statement",
        "type_alias_statement",
    }
)

_STRING_TYPES = frozenset({"string", "concatenated_string"})


@lru_cache(maxsize=1)
def python_language() -> tree_sitter.Language:
    return tree_sitter.Language(tree_sitter_python.language())


def parse_tree(source: bytes) -> Any:
    parser = tree_sitter.Parser()
    parser.language = python_language()
    return parser.parse(source)


def node_text(node: Any) -> str:
    return node.text.decode("utf-8", errors="replace") if node is not None and node.text else ""


def detect_eol(text: str) -> str:
    """Most frequent line terminator; ``\\n`` when there is none or on ties."""
    crlf = text.count("\r\n")
    lf = text.count("\n") - crlf
    cr = text.count("\r") - crlf
    if crlf > lf and crlf >= cr:
        return "\r\n"
    if cr > lf and cr > crlf:
        return "\r"
    return "\n"


@dataclass
class ParsedFile:
    """Parsed source with a character-based line index.

    Usage::

        parsed = ParsedFile.parse(text, path=Path("pkg/mod.py"))
        parsed.imports        # top-level ImportNode list, in file order
        parsed.statements     # module-level statement list
        parsed.offset_to_position(parsed.imports[0].start)
    """

    text: str
    path: Path | None = None
    tree: Any = field(default=None, repr=False)
    eol: str = "\n"
    statements: list[TopLevelStatement] = field(default_factory=list)
    error_count: int = 0
    _line_starts: list[int] = field(default_factory=list, repr=False)
    _byte_line_starts: list[int] = field(default_factory=list, repr=False)
    _source: bytes = field(default=b"", repr=False)

    @classmethod
    def parse(cls, text: str, path: Path | None = None) -> ParsedFile:
        source = text.encode("utf-8")
        parsed = cls(text=text, path=path, eol=detect_eol(text), _source=source)
        parsed._build_line_index()
        parsed.tree = parse_tree(source)
        parsed.statements = parsed._collect_statements(parsed.tree.root_node)
        parsed.error_count = _count_errors(parsed.tree.root_node)
        if parsed.error_count:
            logger.debug("parse_errors", path=str(path) if path else None, errors=parsed.error_count)
        return parsed

    @property
    def is_stub(self) -> bool:
        return self.path is not None and self.path.suffix == STUB_EXTENSION

    @property
    def imports(self) -> list[ImportNode]:
        return [
            part.import_node
            for statement in self.statements
            for part in statement.parts
            if part.import_node is not None
        ]

    @property
    def line_count(self) -> int:
        return len(self._line_starts)

    # -------------------------------------------------------------------------
    # Line index
    # -------------------------------------------------------------------------

    def _build_line_index(self) -> None:
        self._line_starts = [0]
        self._byte_line_starts = [0]
        byte_offset = 0
        for i, ch in enumerate(self.text):
            byte_offset += len(ch.encode("utf-8")) if ord(ch) > 0x7F else 1
            if ch == "\n":
                self._line_starts.append(i + 1)
                self._byte_line_starts.append(byte_offset)

    def char_offset(self, byte_offset: int) -> int:
        line = bisect_right(self._byte_line_starts, byte_offset) - 1
        line_byte_start = self._byte_line_starts[line]
        column = self._source[line_byte_start:byte_offset].decode("utf-8", errors="ignore")
        return self._line_starts[line] + len(column)

    def offset_to_position(self, offset: int) -> Position:
        offset = max(0, min(offset, len(self.text)))
        line = bisect_right(self._line_starts, offset) - 1
        return Position(line, offset - self._line_starts[line])

    def position_to_offset(self, position: Position) -> int:
        if position.line >= len(self._line_starts):
            return len(self.text)
        line_start = self._line_starts[position.line]
        line_end = (
            self._line_starts[position.line + 1]
            if position.line + 1 < len(self._line_starts)
            else len(self.text)
        )
        return min(line_start + position.character, line_end)

    def line_start_offset(self, line: int) -> int:
        return self._line_starts[line]

    @property
    def end_position(self) -> Position:
        return self.offset_to_position(len(self.text))

    # -------------------------------------------------------------------------
    # Statements
    # -------------------------------------------------------------------------

    def _span(self, node: Any) -> tuple[int, int]:
        return self.char_offset(node.start_byte), self.char_offset(node.end_byte)

    def _collect_statements(self, root: Any) -> list[TopLevelStatement]:
        statements: list[TopLevelStatement] = []
        group: list[SimpleStatement] = []
        joined = False

        def flush() -> None:
            if group:
                statements.append(TopLevelStatement(group[0].start, group[-1].end, tuple(group)))
                group.clear()

        for child in root.children:
            if child.type == ";":
                joined = True
                continue
            if child.type == "comment":
                continue
            if child.type in _SIMPLE_STATEMENT_TYPES:
                if not joined:
                    flush()
                group.append(self._simple_statement(child))
            else:
                flush()
                start, end = self._span(child)
                statements.append(TopLevelStatement(start, end))
            joined = False
        flush()
        return statements

    def _simple_statement(self, node: Any) -> SimpleStatement:
        start, end = self._span(node)
        if node.type == "import_statement":
            return SimpleStatement(StatementKind.IMPORT, start, end, import_node=self._import_node(node))
        if node.type in ("import_from_statement", "future_import_statement"):
            return SimpleStatement(StatementKind.IMPORT_FROM, start, end, import_node=self._import_from_node(node))
        if node.type == "expression_statement":
            named = node.named_children
            if len(named) == 1 and named[0].type in _STRING_TYPES:
                return SimpleStatement(StatementKind.STRING, start, end)
            if len(named) == 1 and named[0].type == "assignment":
                assignment = named[0]
                left = assignment.child_by_field_name("left")
                target = None
                if left is not None and left.type == "identifier" and assignment.child_by_field_name("type") is None:
                    target = node_text(left)
                return SimpleStatement(StatementKind.ASSIGNMENT, start, end, assigned_name=target)
        return SimpleStatement(StatementKind.OTHER, start, end)

    def _import_as(self, node: Any) -> ImportAs | None:
        start, end = self._span(node)
        if node.type == "aliased_import":
            name = node.child_by_field_name("name")
            alias = node.child_by_field_name("alias")
            return ImportAs(node_text(name), node_text(alias) or None, start, end)
        if node.type in ("dotted_name", "identifier"):
            return ImportAs(node_text(node), None, start, end)
        return None

    def _import_node(self, node: Any) -> ImportNode:
        start, end = self._span(node)
        entries = [self._import_as(n) for n in node.children_by_field_name("name")]
        return ImportNode(
            is_from=False,
            start=start,
            end=end,
            entries=tuple(e for e in entries if e is not None),
        )

    def _import_from_node(self, node: Any) -> ImportNode:
        start, end = self._span(node)
        if node.type == "future_import_statement":
            module = ModuleName(0, ("__future__",))
        else:
            module = module_name_from_node(node.child_by_field_name("module_name"))
        entries = [self._import_as(n) for n in node.children_by_field_name("name")]
        is_wildcard = any(c.type == "wildcard_import" for c in node.children)
        return ImportNode(
            is_from=True,
            start=start,
            end=end,
            entries=tuple(e for e in entries if e is not None),
            module=module,
            is_wildcard=is_wildcard,
        )


def module_name_from_node(node: Any) -> ModuleName:
    if node is None:
        return ModuleName()
    if node.type == "relative_import":
        dots = 0
        parts: tuple[str, ...] = ()
        for child in node.children:
            if child.type == "import_prefix":
                dots = len(node_text(child).strip())
            elif child.type == "dotted_name":
                parts = tuple(node_text(child).split("."))
        return ModuleName(dots, parts)
    return ModuleName(0, tuple(p.strip() for p in node_text(node).split(".")))


def _count_errors(node: Any) -> int:
    count = 0
    stack = [node]
    while stack:
        current = stack.pop()
        if current.type == "ERROR" or current.is_missing:
            count += 1
        stack.extend(current.children)
    return count
