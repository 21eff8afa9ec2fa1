"""Scope resolution and visible-symbol aggregation at a parse tree node."""

from __future__ import annotations

from caret.symbols import ScopedSymbol, Symbol, SymbolTable
from caret.tree import ParseNode, ParseTree


def resolve_scope(node: ParseNode | None, tree: ParseTree, table: SymbolTable) -> ScopedSymbol | None:
    """Innermost scope opened by ``node`` or one of its ancestors.

    Returns None when no ancestor opened a scope; callers treat that as the
    global scope.
    """
    if node is None:
        return None
    for ancestor in tree.ancestors(node):
        scope = table.scope_for(ancestor.index)
        if scope is not None:
            return scope
    return None


def collect_visible(table: SymbolTable, scope: ScopedSymbol, kind: type[Symbol]) -> list[Symbol]:
    """Symbols of ``kind`` visible from ``scope``, nearest first.

    Everything declared in ``scope`` and its nested scopes comes first, then
    what each enclosing scope declares directly, out to the global scope.
    Symbols in sibling scopes are not visible. Shadowed names are kept.
    """
    visible = [s for s in table.descendants(scope) if isinstance(s, kind)]
    enclosing = table.parent_of(scope)
    while enclosing is not None:
        visible.extend(s for s in table.children_of(enclosing) if isinstance(s, kind))
        enclosing = table.parent_of(enclosing)
    return visible
