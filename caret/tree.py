"""Arena parse tree.

Nodes live in a flat list owned by ParseTree and refer to each other by
index. The ``parent`` index is a lookup aid only; ownership runs top-down
from the arena. All walks are iterative so deeply nested input cannot hit
the recursion limit.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from lark import Token as LarkToken
from lark import Tree

from caret.tokens import Token, TokenStream, Vocabulary


@dataclass(eq=False)
class ParseNode:
    """One node of a ParseTree: a rule node or a terminal node."""

    index: int
    parent: int | None
    rule: str | None = None
    token: Token | None = None
    children: list[int] = field(default_factory=list)

    @property
    def is_terminal(self) -> bool:
        return self.token is not None

    def __repr__(self) -> str:
        if self.token is not None:
            return f"ParseNode({self.index}, token={self.token.text!r})"
        return f"ParseNode({self.index}, rule={self.rule!r})"


class ParseTree:
    """A parse tree stored as an arena of ParseNodes; node 0 is the root."""

    def __init__(self, nodes: list[ParseNode]) -> None:
        if not nodes:
            raise ValueError("a parse tree needs at least a root node")
        self.nodes = nodes

    @property
    def root(self) -> ParseNode:
        return self.nodes[0]

    def __len__(self) -> int:
        return len(self.nodes)

    def node(self, index: int) -> ParseNode:
        return self.nodes[index]

    def parent(self, node: ParseNode) -> ParseNode | None:
        return None if node.parent is None else self.nodes[node.parent]

    def children(self, node: ParseNode) -> list[ParseNode]:
        return [self.nodes[i] for i in node.children]

    def ancestors(self, node: ParseNode) -> Iterator[ParseNode]:
        """Yield ``node`` and then each ancestor up to the root."""
        current: ParseNode | None = node
        while current is not None:
            yield current
            current = self.parent(current)

    def walk(self, node: ParseNode | None = None) -> Iterator[ParseNode]:
        """Pre-order traversal of the subtree rooted at ``node``."""
        stack = [node or self.root]
        while stack:
            current = stack.pop()
            yield current
            stack.extend(self.nodes[i] for i in reversed(current.children))

    def terminals(self, node: ParseNode | None = None) -> Iterator[ParseNode]:
        return (n for n in self.walk(node) if n.is_terminal)

    def text(self, node: ParseNode) -> str:
        """Source text of the node's tokens joined by single spaces."""
        return " ".join(n.token.text for n in self.terminals(node) if n.token.text)

    def token_range(self, node: ParseNode) -> tuple[Token, Token] | None:
        """First and last stream tokens under ``node``; conjured tokens are skipped."""
        streamed = [n.token for n in self.terminals(node) if not n.token.conjured]
        if not streamed:
            return None
        return streamed[0], streamed[-1]

    def find_rule(self, node: ParseNode, rule: str) -> ParseNode | None:
        """First direct child of ``node`` produced by ``rule``."""
        for child in self.children(node):
            if child.rule == rule:
                return child
        return None

    @classmethod
    def from_lark(
        cls,
        tree: Tree,
        stream: TokenStream,
        vocabulary: Vocabulary,
        stream_index: dict[tuple[int, str], int],
        skipped: Iterable[Token] = (),
    ) -> ParseTree:
        """Flatten a lark tree into an arena.

        ``stream_index`` maps (start offset, terminal name) of each token the
        parser took from ``stream`` to its stream index; empty tokens and
        tokens missing from it were conjured during recovery. ``skipped`` are
        stream tokens the parser discarded; each is kept as an error terminal
        under the deepest rule node spanning it.
        The stream's EOF token is appended as the root's last child.
        """
        nodes: list[ParseNode] = []
        stack: list[tuple[Tree | LarkToken, int | None]] = [(tree, None)]
        while stack:
            item, parent = stack.pop()
            index = len(nodes)
            if isinstance(item, Tree):
                nodes.append(ParseNode(index, parent, rule=str(item.data)))
                stack.extend((child, index) for child in reversed(item.children) if child is not None)
            else:
                nodes.append(ParseNode(index, parent, token=_to_token(item, stream, vocabulary, stream_index)))
            if parent is not None:
                nodes[parent].children.append(index)

        eof = ParseNode(len(nodes), 0, token=stream.eof)
        nodes.append(eof)
        nodes[0].children.append(eof.index)

        parse_tree = cls(nodes)
        for token in skipped:
            parse_tree._attach(token)
        return parse_tree

    def _attach(self, token: Token) -> None:
        parent = self.root
        while True:
            for child in self.children(parent):
                if child.is_terminal:
                    continue
                bounds = self.token_range(child)
                if bounds is not None and bounds[0].index < token.index < bounds[1].index:
                    parent = child
                    break
            else:
                break

        node = ParseNode(len(self.nodes), parent.index, token=token)
        self.nodes.append(node)
        position = len(parent.children)
        for i, child in enumerate(self.children(parent)):
            first = self._first_index(child)
            if first is not None and first > token.index:
                position = i
                break
        parent.children.insert(position, node.index)

    def _first_index(self, node: ParseNode) -> int | None:
        if node.is_terminal:
            return node.token.index
        bounds = self.token_range(node)
        return None if bounds is None else bounds[0].index


def _to_token(
    token: LarkToken, stream: TokenStream, vocabulary: Vocabulary, stream_index: dict[tuple[int, str], int]
) -> Token:
    index = stream_index.get((token.start_pos, str(token.type))) if token.value else None
    if index is not None:
        return stream[index]
    return Token(
        type=vocabulary.get(token.type) or 0,
        text=str(token),
        index=None,
        line=token.line or stream.eof.line,
        column=(token.column - 1) if token.column else stream.eof.column,
        start=token.start_pos if token.start_pos is not None else stream.eof.start,
    )
