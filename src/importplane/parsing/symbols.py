"""Module-scope symbol tables.

Binds the names a module defines at top level (classes, functions,
variables, type aliases and import aliases) and decides which of them
are visible to importers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from importplane.core.naming import is_constant_name, is_private_or_protected_name
from importplane.parsing.parser import ParsedFile, module_name_from_node, node_text
from importplane.resolution.models import ModuleName

if TYPE_CHECKING:
    from collections.abc import Iterator

    from tree_sitter import Node

_BLOCK_CONTAINERS = frozenset(
    {
        "if_statement",
        "elif_clause",
        "else_clause",
        "try_statement",
        "except_clause",
        "except_group_clause",
        "finally_clause",
        "with_statement",
        "for_statement",
        "while_statement",
        "block",
    }
)

_FINAL_NAMES = frozenset({"Final", "typing.Final", "typing_extensions.Final"})
_TYPE_ALIAS_NAMES = frozenset({"TypeAlias", "typing.TypeAlias", "typing_extensions.TypeAlias"})


class DeclarationType(str, Enum):
    CLASS = "class"
    FUNCTION = "function"
    VARIABLE = "variable"
    TYPE_ALIAS = "type_alias"
    ALIAS = "alias"  # bound by an import statement


@dataclass(frozen=True, slots=True)
class Declaration:
    type: DeclarationType
    name: str
    offset: int
    is_constant: bool = False
    is_final: bool = False
    # ALIAS only: the imported module, and the name taken from it for from-imports
    module: ModuleName | None = None
    imported_name: str | None = None
    uses_redundant_alias: bool = False


@dataclass
class Symbol:
    name: str
    declarations: list[Declaration] = field(default_factory=list)
    is_externally_hidden: bool = False
    in_dunder_all: bool = False

    @property
    def primary_declaration(self) -> Declaration | None:
        return self.declarations[0] if self.declarations else None

    @property
    def is_alias(self) -> bool:
        decl = self.primary_declaration
        return decl is not None and decl.type == DeclarationType.ALIAS

    @property
    def is_visible_externally(self) -> bool:
        return not self.is_externally_hidden


@dataclass
class SymbolTable:
    """Top-level symbols of one module, in binding order."""

    symbols: dict[str, Symbol] = field(default_factory=dict)
    dunder_all: list[str] | None = None
    is_stub: bool = False

    def __iter__(self) -> Iterator[Symbol]:
        return iter(self.symbols.values())

    def __len__(self) -> int:
        return len(self.symbols)

    def __contains__(self, name: object) -> bool:
        return name in self.symbols

    def get(self, name: str) -> Symbol | None:
        return self.symbols.get(name)

    def visible_symbols(self) -> list[Symbol]:
        return [s for s in self.symbols.values() if s.is_visible_externally]


def build_symbol_table(parsed: ParsedFile, is_stub: bool | None = None) -> SymbolTable:
    """Bind the module-scope names of *parsed*.

    Visibility rules:
        - with ``__all__``, only listed names are visible
        - otherwise private and protected names are hidden
        - in stubs an import is a re-export only as ``import x as x``,
          ``from m import x as x`` or ``from . import x``
    """
    if is_stub is None:
        is_stub = parsed.is_stub
    binder = _Binder(parsed, is_stub)
    binder.visit_block(parsed.tree.root_node)

    table = SymbolTable(symbols=binder.symbols, dunder_all=binder.dunder_all, is_stub=is_stub)
    all_names = set(binder.dunder_all) if binder.dunder_all is not None else None
    for symbol in table.symbols.values():
        symbol.in_dunder_all = all_names is not None and symbol.name in all_names
        symbol.is_externally_hidden = _is_hidden(symbol, all_names, is_stub)
    return table


def _is_hidden(symbol: Symbol, all_names: set[str] | None, is_stub: bool) -> bool:
    if all_names is not None:
        return symbol.name not in all_names
    if is_private_or_protected_name(symbol.name):
        return True
    decl = symbol.primary_declaration
    if is_stub and decl is not None and decl.type == DeclarationType.ALIAS:
        relative_form = (
            decl.module is not None and decl.module.is_relative and not decl.module.name_parts
        )
        return not (decl.uses_redundant_alias or relative_form)
    return False


def _string_value(node: Node) -> str | None:
    if node.type != "string":
        return None
    return "".join(node_text(c) for c in node.children if c.type == "string_content")


def _string_items(node: Node | None) -> list[str]:
    if node is None or node.type not in ("list", "tuple"):
        return []
    values = (_string_value(c) for c in node.named_children)
    return [v for v in values if v is not None]


def _annotation_base(node: Node | None) -> str:
    if node is None:
        return ""
    text = node_text(node).strip()
    return text.split("[", 1)[0].strip()


class _Binder:
    def __init__(self, parsed: ParsedFile, is_stub: bool) -> None:
        self.parsed = parsed
        self.is_stub = is_stub
        self.symbols: dict[str, Symbol] = {}
        self.dunder_all: list[str] | None = None

    def _offset(self, node: Node) -> int:
        return self.parsed.char_offset(node.start_byte)

    def bind(self, decl: Declaration) -> None:
        symbol = self.symbols.get(decl.name)
        if symbol is None:
            symbol = self.symbols[decl.name] = Symbol(decl.name)
        symbol.declarations.append(decl)

    def visit_block(self, node: Node) -> None:
        for child in node.children:
            self.visit_statement(child)

    def visit_statement(self, node: Node) -> None:
        kind = node.type
        if kind in _BLOCK_CONTAINERS:
            self.visit_block(node)
        elif kind == "decorated_definition":
            definition = node.child_by_field_name("definition")
            if definition is not None:
                self.visit_statement(definition)
        elif kind == "class_definition":
            self._bind_named(node, DeclarationType.CLASS)
        elif kind == "function_definition":
            self._bind_named(node, DeclarationType.FUNCTION)
        elif kind == "expression_statement":
            for child in node.named_children:
                self._visit_expression(child)
        elif kind == "type_alias_statement":
            left = node.child_by_field_name("left")
            name = _first_identifier(left)
            if name is not None:
                self.bind(Declaration(DeclarationType.TYPE_ALIAS, node_text(name), self._offset(name)))
        elif kind == "import_statement":
            self._visit_import(node)
        elif kind == "import_from_statement":
            self._visit_import_from(node)

    def _bind_named(self, node: Node, decl_type: DeclarationType) -> None:
        name = node.child_by_field_name("name")
        if name is not None:
            self.bind(Declaration(decl_type, node_text(name), self._offset(name)))

    def _visit_expression(self, node: Node) -> None:
        if node.type == "assignment":
            self._visit_assignment(node)
        elif node.type == "augmented_assignment":
            left = node.child_by_field_name("left")
            if node_text(left) == "__all__" and self.dunder_all is not None:
                self.dunder_all.extend(_string_items(node.child_by_field_name("right")))
        elif node.type == "call":
            self._visit_dunder_all_call(node)

    def _visit_assignment(self, node: Node) -> None:
        left = node.child_by_field_name("left")
        right = node.child_by_field_name("right")
        annotation = _annotation_base(node.child_by_field_name("type"))

        if left is not None and left.type == "identifier" and node_text(left) == "__all__":
            self.dunder_all = _string_items(right)

        is_final = annotation in _FINAL_NAMES
        decl_type = DeclarationType.TYPE_ALIAS if annotation in _TYPE_ALIAS_NAMES else DeclarationType.VARIABLE
        for target in _assignment_targets(left):
            name = node_text(target)
            self.bind(
                Declaration(
                    decl_type,
                    name,
                    self._offset(target),
                    is_constant=is_constant_name(name),
                    is_final=is_final,
                )
            )
        # a = b = value
        if right is not None and right.type == "assignment":
            self._visit_assignment(right)

    def _visit_dunder_all_call(self, node: Node) -> None:
        function = node.child_by_field_name("function")
        if function is None or function.type != "attribute" or self.dunder_all is None:
            return
        obj = function.child_by_field_name("object")
        attr = function.child_by_field_name("attribute")
        if node_text(obj) != "__all__":
            return
        args = node.child_by_field_name("arguments")
        arg_nodes = args.named_children if args is not None else []
        if node_text(attr) == "extend" and arg_nodes:
            self.dunder_all.extend(_string_items(arg_nodes[0]))
        elif node_text(attr) == "append" and arg_nodes:
            value = _string_value(arg_nodes[0])
            if value is not None:
                self.dunder_all.append(value)
        elif node_text(attr) == "remove" and arg_nodes:
            value = _string_value(arg_nodes[0])
            if value in self.dunder_all:
                self.dunder_all.remove(value)

    def _visit_import(self, node: Node) -> None:
        for entry in node.children_by_field_name("name"):
            if entry.type == "aliased_import":
                dotted = node_text(entry.child_by_field_name("name"))
                alias = node_text(entry.child_by_field_name("alias"))
                module = ModuleName(0, tuple(dotted.split(".")))
                self.bind(
                    Declaration(
                        DeclarationType.ALIAS,
                        alias,
                        self._offset(entry),
                        module=module,
                        uses_redundant_alias=alias == dotted,
                    )
                )
            else:
                dotted = node_text(entry)
                first = dotted.split(".", 1)[0]
                self.bind(
                    Declaration(
                        DeclarationType.ALIAS,
                        first,
                        self._offset(entry),
                        module=ModuleName(0, (first,)),
                    )
                )

    def _visit_import_from(self, node: Node) -> None:
        module_node = node.child_by_field_name("module_name")
        module = module_name_from_node(module_node)
        if module.name_parts == ("__future__",):
            return
        for entry in node.children_by_field_name("name"):
            if entry.type == "aliased_import":
                name = node_text(entry.child_by_field_name("name"))
                alias = node_text(entry.child_by_field_name("alias"))
                self.bind(
                    Declaration(
                        DeclarationType.ALIAS,
                        alias,
                        self._offset(entry),
                        module=module,
                        imported_name=name,
                        uses_redundant_alias=alias == name,
                    )
                )
            else:
                name = node_text(entry)
                self.bind(
                    Declaration(
                        DeclarationType.ALIAS,
                        name,
                        self._offset(entry),
                        module=module,
                        imported_name=name,
                    )
                )


def _first_identifier(node: Node | None) -> Node | None:
    if node is None:
        return None
    if node.type == "identifier":
        return node
    for child in node.children:
        found = _first_identifier(child)
        if found is not None:
            return found
    return None


def _assignment_targets(node: Node | None) -> list[Node]:
    if node is None:
        return []
    if node.type == "identifier":
        return [node]
    if node.type in ("pattern_list", "tuple_pattern", "list_pattern"):
        targets: list[Node] = []
        for child in node.named_children:
            targets.extend(_assignment_targets(child))
        return targets
    return []
