"""Source parsing: positions, edits, top-level statements and symbol tables."""

from importplane.parsing.models import (
    ImportAs,
    ImportNode,
    Position,
    Range,
    SimpleStatement,
    StatementKind,
    TextEdit,
    TopLevelStatement,
    apply_text_edits,
)
from importplane.parsing.parser import ParsedFile, detect_eol
from importplane.parsing.symbols import (
    Declaration,
    DeclarationType,
    Symbol,
    SymbolTable,
    build_symbol_table,
)

__all__ = [
    "Declaration",
    "DeclarationType",
    "ImportAs",
    "ImportNode",
    "ParsedFile",
    "Position",
    "Range",
    "SimpleStatement",
    "StatementKind",
    "Symbol",
    "SymbolTable",
    "TextEdit",
    "TopLevelStatement",
    "apply_text_edits",
    "build_symbol_table",
    "detect_eol",
]
