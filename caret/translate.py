"""Turning grammar candidates into suggestion strings.

Each language supplies a Translator subclass. The shared pieces are the
declarative TokenTable, which says how vocabulary tokens are rendered, and
the rule that a caret sitting on an ignored token has typed nothing yet.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field

from caret.analysis import CandidateSet
from caret.matching import TokenMatcher, filter_tokens, starts_with
from caret.position import TokenPosition
from caret.symbols import SymbolTable
from caret.tokens import Vocabulary
from caret.tree import ParseTree

SymbolTableFactory = Callable[[], SymbolTable]


@dataclass(frozen=True)
class TokenTable:
    """How candidate token types are rendered.

    ``renderings`` is keyed by symbolic name or by numeric token type; a
    listed token maps to the given literal, or is dropped when it is None.
    Every other token renders as its lowercased symbolic name; tokens
    without a symbolic name are dropped.
    """

    renderings: Mapping[str | int, str | None] = field(default_factory=dict)

    def by_type(self, vocabulary: Vocabulary) -> dict[int, str | None]:
        """``renderings`` keyed by token type."""
        return {
            key if isinstance(key, int) else vocabulary.token_type(key): text
            for key, text in self.renderings.items()
        }

    def render(self, candidates: CandidateSet, vocabulary: Vocabulary) -> list[str]:
        renderings = self.by_type(vocabulary)
        rendered = []
        for token_type in candidates.tokens:
            if token_type in renderings:
                text = renderings[token_type]
            else:
                name = vocabulary.symbolic_name(token_type)
                text = name.lower() if name is not None else None
            if text is not None:
                rendered.append(text)
        return rendered


def text_to_match(position: TokenPosition, ignored_tokens: frozenset[int]) -> str:
    """Typed text to filter with; empty when the caret is on an ignored token."""
    context = position.context
    if context.is_terminal and context.token.type in ignored_tokens:
        return ""
    return position.text


class Translator:
    """Base for per-language candidate translation.

    Subclasses set ``token_table`` and ``preferred_rules`` and say which token
    types are ignored. ``translate`` here covers languages that only ever
    suggest vocabulary tokens.
    """

    token_table: TokenTable = TokenTable()
    preferred_rules: frozenset[str] = frozenset()

    def __init__(self, vocabulary: Vocabulary) -> None:
        self.vocabulary = vocabulary
        self.ignored_tokens = frozenset(self.ignored(vocabulary))

    def ignored(self, vocabulary: Vocabulary) -> Iterable[int]:
        return ()

    def translate(
        self,
        candidates: CandidateSet,
        position: TokenPosition,
        symbol_table_factory: SymbolTableFactory,
        *,
        tree: ParseTree,
        matcher: TokenMatcher = starts_with,
    ) -> list[str]:
        return self.vocabulary_suggestions(candidates, position, matcher)

    def vocabulary_suggestions(
        self, candidates: CandidateSet, position: TokenPosition, matcher: TokenMatcher
    ) -> list[str]:
        suggestions = self.token_table.render(candidates, self.vocabulary)
        return filter_tokens(text_to_match(position, self.ignored_tokens), suggestions, matcher)
