"""Completion requests: source text and caret in, suggestion strings out."""

from __future__ import annotations

import logging
from functools import cache, partial

from caret.analysis import CandidateCollector
from caret.config import DEFAULT_CONFIG, CompletionConfig
from caret.languages import Language, LanguageSupport, get_support
from caret.matching import TokenMatcher
from caret.position import CaretPosition, PositionMapper, compute_token_position
from caret.symbols import SymbolTableBuilder

logger = logging.getLogger(__name__)


class CompletionEngine:
    """Completes source text of one language.

    The engine holds the matcher used to filter suggestions; everything
    derived from the source (tokens, tree, symbols) lives only for one
    ``suggest`` call.

    Usage:
        engine = CompletionEngine(Language.KOTLIN)
        engine.suggest("val x = 1\\nval y = ", CaretPosition(line=2, column=8))
    """

    def __init__(self, language: str | Language, config: CompletionConfig | None = None) -> None:
        self.support: LanguageSupport = get_support(language)
        self.config = config or DEFAULT_CONFIG
        self._builder = SymbolTableBuilder(self.support.declarations)

    @property
    def language(self) -> Language:
        return self.support.language

    def __repr__(self) -> str:
        return f"CompletionEngine({self.language.value})"

    def set_token_matcher(self, matcher: TokenMatcher) -> None:
        """Filter every later suggestion on this engine with ``matcher``."""
        self.config = self.config.with_matcher(matcher)

    def suggest(
        self,
        code: str,
        caret: CaretPosition,
        compute_token_position: PositionMapper = compute_token_position,
    ) -> list[str]:
        """Suggestions for ``caret`` in ``code``; empty when the caret maps to no token."""
        grammar = self.support.grammar
        translator = self.support.translator

        tokens = grammar.tokenize(code)
        tree = grammar.parse(tokens)
        position = compute_token_position(tree, tokens, caret)
        if position is None:
            return []

        collector = CandidateCollector(
            grammar,
            tokens,
            ignored_tokens=translator.ignored_tokens,
            preferred_rules=translator.preferred_rules,
        )
        candidates = collector.collect(position.index)
        symbol_table = cache(partial(self._builder.build, tree))

        suggestions = translator.translate(
            candidates,
            position,
            symbol_table,
            tree=tree,
            matcher=self.config.matcher,
        )
        logger.debug(f"{grammar.name}: {len(suggestions)} suggestions at {caret.line}:{caret.column}")
        return suggestions


def get_structurizr_suggestions(
    code: str,
    caret: CaretPosition,
    compute_token_position: PositionMapper = compute_token_position,
    config: CompletionConfig | None = None,
) -> list[str]:
    """Keyword suggestions for the architecture DSL."""
    return CompletionEngine(Language.STRUCTURIZR, config).suggest(code, caret, compute_token_position)


def get_kotlin_suggestions(
    code: str,
    caret: CaretPosition,
    compute_token_position: PositionMapper = compute_token_position,
    config: CompletionConfig | None = None,
) -> list[str]:
    """Variable and keyword suggestions for the Kotlin-like language."""
    return CompletionEngine(Language.KOTLIN, config).suggest(code, caret, compute_token_position)
