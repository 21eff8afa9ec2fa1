"""Symbol tables built from parse trees.

A SymbolTable is the global scope and owns every symbol in a flat arena;
symbols point at their enclosing scope by index. Scopes remember the parse
tree node that opened them so the completion engine can map a caret node
back to a scope.

Which rules declare what is data: each language hands SymbolTableBuilder a
mapping from rule name to Declaration.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field

from caret.tree import ParseNode, ParseTree

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class Symbol:
    """A named entity declared somewhere in the source.

    ``index`` and ``parent`` are assigned when the symbol joins a table.
    ``context`` is the index of the declaring parse tree node, if any.
    """

    name: str
    context: int | None = None
    index: int = -1
    parent: int | None = None

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


@dataclass(eq=False, repr=False)
class ScopedSymbol(Symbol):
    """A symbol that owns nested symbols."""

    children: list[int] = field(default_factory=list)


class VariableSymbol(Symbol):
    pass


class ParameterSymbol(VariableSymbol):
    pass


class FunctionSymbol(ScopedSymbol):
    pass


class ClassSymbol(ScopedSymbol):
    pass


class BlockSymbol(ScopedSymbol):
    pass


class ElementSymbol(ScopedSymbol):
    """A model element of the architecture DSL; elements nest other elements."""


class SymbolTable(ScopedSymbol):
    """The global scope; owns the arena of all symbols."""

    def __init__(self) -> None:
        super().__init__(name="", index=0)
        self.symbols: list[Symbol] = [self]
        self._scopes: dict[int, ScopedSymbol] = {}

    def __repr__(self) -> str:
        return f"SymbolTable({len(self.symbols) - 1} symbols)"

    def add(self, symbol: Symbol, scope: ScopedSymbol | None = None) -> Symbol:
        """Declare ``symbol`` inside ``scope`` (the global scope by default)."""
        scope = scope or self
        symbol.index = len(self.symbols)
        symbol.parent = scope.index
        self.symbols.append(symbol)
        scope.children.append(symbol.index)
        if isinstance(symbol, ScopedSymbol) and symbol.context is not None:
            self._scopes[symbol.context] = symbol
        return symbol

    def parent_of(self, symbol: Symbol) -> ScopedSymbol | None:
        if symbol.parent is None:
            return None
        return self.symbols[symbol.parent]

    def children_of(self, scope: ScopedSymbol) -> list[Symbol]:
        return [self.symbols[i] for i in scope.children]

    def descendants(self, scope: ScopedSymbol) -> Iterator[Symbol]:
        """Every symbol nested in ``scope``, depth first in declaration order."""
        stack = [self.symbols[i] for i in reversed(scope.children)]
        while stack:
            symbol = stack.pop()
            yield symbol
            if isinstance(symbol, ScopedSymbol):
                stack.extend(self.symbols[i] for i in reversed(symbol.children))

    def scope_for(self, node_index: int) -> ScopedSymbol | None:
        """The scope opened by the parse tree node ``node_index``, if any."""
        return self._scopes.get(node_index)

    def symbols_of_type(self, kind: type[Symbol]) -> list[Symbol]:
        """All symbols of ``kind`` anywhere in the table, in declaration order."""
        return [s for s in self.descendants(self) if isinstance(s, kind)]


@dataclass(frozen=True)
class Declaration:
    """How a grammar rule declares a symbol.

    Attributes:
        kind: Symbol class to create.
        name_rule: Direct child rule whose text names the symbol. None for
            anonymous scopes such as blocks.
    """

    kind: type[Symbol]
    name_rule: str | None = None


class SymbolTableBuilder:
    """Builds a SymbolTable from a parse tree using a declaration table."""

    def __init__(self, declarations: Mapping[str, Declaration]) -> None:
        self.declarations = dict(declarations)

    def build(self, tree: ParseTree) -> SymbolTable:
        table = SymbolTable()
        stack: list[tuple[ParseNode, ScopedSymbol]] = [(tree.root, table)]
        while stack:
            node, scope = stack.pop()
            inner = scope
            declaration = self.declarations.get(node.rule) if node.rule else None
            if declaration is not None:
                symbol = self._declare(tree, node, declaration)
                if symbol is not None:
                    table.add(symbol, scope)
                    if isinstance(symbol, ScopedSymbol):
                        inner = symbol
            stack.extend((child, inner) for child in reversed(tree.children(node)))
        return table

    def _declare(self, tree: ParseTree, node: ParseNode, declaration: Declaration) -> Symbol | None:
        name = ""
        if declaration.name_rule is not None:
            name_node = tree.find_rule(node, declaration.name_rule)
            name = tree.text(name_node) if name_node is not None else ""
            if not name and not issubclass(declaration.kind, ScopedSymbol):
                # Names conjured by parser recovery have no text.
                logger.debug(f"symbols: skipping unnamed {node.rule}")
                return None
        return declaration.kind(name, context=node.index)
