"""Source positions, edits and the syntactic view of top-level statements.

Offsets and characters count Unicode code points, not bytes.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from importplane.resolution.models import ModuleName


@dataclass(frozen=True, slots=True, order=True)
class Position:
    line: int  # 0-based
    character: int  # 0-based, code points

    def __str__(self) -> str:
        return f"{self.line}:{self.character}"


@dataclass(frozen=True, slots=True, order=True)
class Range:
    start: Position
    end: Position

    @classmethod
    def point(cls, position: Position) -> Range:
        return cls(position, position)

    @property
    def is_empty(self) -> bool:
        return self.start == self.end

    def __str__(self) -> str:
        return f"({self.start}-{self.end})"


@dataclass(frozen=True, slots=True)
class TextEdit:
    range: Range
    replacement_text: str

    def to_dict(self) -> dict[str, object]:
        return {
            "range": {
                "start": {"line": self.range.start.line, "character": self.range.start.character},
                "end": {"line": self.range.end.line, "character": self.range.end.character},
            },
            "replacement_text": self.replacement_text,
        }


def apply_text_edits(text: str, edits: list[TextEdit]) -> str:
    """Apply non-overlapping edits to *text*; later positions are applied first."""
    line_starts = [0]
    for i, ch in enumerate(text):
        if ch == "\n":
            line_starts.append(i + 1)

    def to_offset(pos: Position) -> int:
        if pos.line >= len(line_starts):
            return len(text)
        return min(line_starts[pos.line] + pos.character, len(text))

    result = text
    for edit in sorted(edits, key=lambda e: e.range.start, reverse=True):
        start, end = to_offset(edit.range.start), to_offset(edit.range.end)
        result = result[:start] + edit.replacement_text + result[end:]
    return result


@dataclass(frozen=True, slots=True)
class ImportAs:
    """One ``name [as alias]`` entry of an import statement.

    For ``import a.b`` the name is dotted; for ``from m import x`` it is ``x``.
    """

    name: str
    alias: str | None
    start: int
    end: int

    @property
    def bound_name(self) -> str:
        """Name the entry introduces into the importing module."""
        if self.alias:
            return self.alias
        return self.name.split(".", 1)[0]


@dataclass(frozen=True, slots=True)
class ImportNode:
    """A top-level ``import`` or ``from ... import`` statement."""

    is_from: bool
    start: int
    end: int
    entries: tuple[ImportAs, ...]
    module: ModuleName | None = None  # from-imports only
    is_wildcard: bool = False

    def module_for(self, entry: ImportAs) -> ModuleName:
        """Module an ``import`` entry names, or the from-import's module."""
        if self.is_from and self.module is not None:
            return self.module
        return ModuleName(0, tuple(entry.name.split(".")))


class StatementKind(str, Enum):
    IMPORT = "import"
    IMPORT_FROM = "import_from"
    STRING = "string"
    ASSIGNMENT = "assignment"
    OTHER = "other"


@dataclass(frozen=True, slots=True)
class SimpleStatement:
    kind: StatementKind
    start: int
    end: int
    import_node: ImportNode | None = None
    assigned_name: str | None = None  # plain ``name = value`` target


@dataclass(frozen=True, slots=True)
class TopLevelStatement:
    """A module-level statement.

    Simple statements joined by ``;`` on one line form one statement list;
    compound statements (``def``, ``class``, ``if``...) have no parts.
    """

    start: int
    end: int
    parts: tuple[SimpleStatement, ...] = ()

    @property
    def is_simple(self) -> bool:
        return bool(self.parts)
