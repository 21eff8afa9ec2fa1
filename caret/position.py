"""Mapping a caret in the source text to a token of the parse tree."""

from __future__ import annotations

import logging
from collections.abc import Callable

from pydantic import BaseModel, ConfigDict, Field

from caret.tokens import Token, TokenStream
from caret.tree import ParseNode, ParseTree

logger = logging.getLogger(__name__)


class CaretPosition(BaseModel):
    """Caret location: 1-based line, 0-based column."""

    model_config = ConfigDict(frozen=True)

    line: int = Field(ge=1)
    column: int = Field(ge=0)


class TokenPosition(BaseModel):
    """The token the caret sits on.

    Attributes:
        index: Stream index of the token; candidates are computed here.
        context: Parse tree node holding the caret.
        text: Part of the token's text left of the caret.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    index: int
    context: ParseNode
    text: str


PositionMapper = Callable[[ParseTree, TokenStream, CaretPosition], TokenPosition | None]


def compute_token_position(tree: ParseTree, tokens: TokenStream, caret: CaretPosition) -> TokenPosition | None:
    """Find the token under ``caret``.

    Terminals are tried depth first, left to right; the caret matches a
    token on its line when it lies between the token's first column and the
    column just past it. Rule nodes entirely above or below the caret line
    are pruned. When no terminal below a rule node matches, every stream
    token in the node's range is tried, hidden ones included, and the rule
    node becomes the context.

    Returns None when nothing matches or the caret is inside a comment.
    """
    stack: list[tuple[ParseNode, bool]] = [(tree.root, False)]
    while stack:
        node, visited = stack.pop()
        if node.is_terminal:
            if not node.token.conjured and _covers(node.token, caret):
                return _position(node.token, node, caret)
            continue

        if not visited:
            bounds = tree.token_range(node)
            if bounds is not None and (bounds[0].line > caret.line or bounds[1].line < caret.line):
                continue
            stack.append((node, True))
            stack.extend((child, False) for child in reversed(tree.children(node)))
            continue

        bounds = tree.token_range(node)
        if bounds is None:
            continue
        first, last = bounds
        for token in tokens[first.index : last.index + 1]:
            if not _covers(token, caret):
                continue
            if token.comment:
                logger.debug(f"position: {caret.line}:{caret.column} is inside a comment")
                return None
            return _position(token, node, caret)

    logger.debug(f"position: no token at {caret.line}:{caret.column}")
    return None


def _covers(token: Token, caret: CaretPosition) -> bool:
    return token.line == caret.line and token.column <= caret.column <= token.stop_column


def _position(token: Token, context: ParseNode, caret: CaretPosition) -> TokenPosition:
    return TokenPosition(index=token.index, context=context, text=token.text[: caret.column - token.column])
