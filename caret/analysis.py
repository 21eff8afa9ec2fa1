"""Grammar analysis: which tokens and rules may appear at a given token index.

The parser used for trees is LALR, which cannot answer "what could come
here" once it has committed to a state. This module runs an Earley
recognizer over the same compiled rules instead, then walks the grammar
from every item still open at the caret:

- a terminal reached in the walk becomes a token candidate, together with
  the terminals that follow it unconditionally in the same production;
- a preferred rule reached in the walk is reported by name and not
  expanded, so the tokens it would start do not leak into the token set;
- a nullable nonterminal is expanded and also stepped over.

Tokens that cannot be consumed are skipped, mirroring the parser's own
recovery, so candidates are still produced for broken input.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from functools import cache

from caret.grammar import Grammar
from caret.tokens import TokenStream, Vocabulary

logger = logging.getLogger(__name__)

Item = tuple[int, int, int]
"""Earley item: (production index, dot position, origin set)."""


@dataclass
class CandidateSet:
    """Result of candidate collection at one token index.

    Attributes:
        tokens: Viable token type -> token types that must follow it.
            Insertion ordered; EOF never appears.
        rules: Names of preferred rules reachable at the index.
    """

    tokens: dict[int, list[int]] = field(default_factory=dict)
    rules: set[str] = field(default_factory=set)


@dataclass(frozen=True)
class Production:
    origin: str
    symbols: tuple[str, ...]


class RuleTable:
    """Static view of a compiled grammar: productions, terminals, nullables."""

    def __init__(self, productions: list[Production], terminals: Iterable[str], start: str) -> None:
        self.productions = productions
        self.terminals = frozenset(terminals)
        self.start = start
        self.by_origin: dict[str, list[int]] = {}
        for i, production in enumerate(productions):
            self.by_origin.setdefault(production.origin, []).append(i)
        self.nullable = self._nullable()

    @classmethod
    def from_grammar(cls, grammar: Grammar) -> RuleTable:
        productions = []
        terminals = set()
        for rule in grammar.lark.rules:
            symbols = []
            for symbol in rule.expansion:
                symbols.append(str(symbol.name))
                if symbol.is_term:
                    terminals.add(str(symbol.name))
            productions.append(Production(str(rule.origin.name), tuple(symbols)))
        return cls(productions, terminals, grammar.start)

    def _nullable(self) -> frozenset[str]:
        nullable: set[str] = set()
        changed = True
        while changed:
            changed = False
            for production in self.productions:
                if production.origin in nullable:
                    continue
                if all(s in nullable for s in production.symbols):
                    nullable.add(production.origin)
                    changed = True
        return frozenset(nullable)

    def __repr__(self) -> str:
        return f"RuleTable({len(self.productions)} productions, start={self.start!r})"


@cache
def rule_table(grammar: Grammar) -> RuleTable:
    """Rule table for ``grammar``, built once per process."""
    return RuleTable.from_grammar(grammar)


class CandidateCollector:
    """Collects completion candidates for one token stream.

    Args:
        grammar: Grammar whose rules drive the analysis.
        stream: Token stream of the source text.
        ignored_tokens: Token types never reported as candidates.
        preferred_rules: Rule names reported as a whole instead of expanded.
    """

    def __init__(
        self,
        grammar: Grammar,
        stream: TokenStream,
        *,
        ignored_tokens: Iterable[int] = (),
        preferred_rules: Iterable[str] = (),
    ) -> None:
        self.grammar = grammar
        self.stream = stream
        self.ignored_tokens = frozenset(ignored_tokens)
        self.preferred_rules = frozenset(preferred_rules)

    def collect(self, index: int) -> CandidateSet:
        """Candidates for the token at stream index ``index``."""
        vocabulary = self.grammar.vocabulary
        table = rule_table(self.grammar)
        names = [vocabulary.symbolic_name(t.type) or "" for t in self.stream.visible(stop=index)]

        sets = recognize(table, names)
        candidates = self._walk(table, sets[-1], len(names), vocabulary)
        logger.debug(
            f"{self.grammar.name}: {len(candidates.tokens)} token and "
            f"{len(candidates.rules)} rule candidates at token {index}"
        )
        return candidates

    def _walk(self, table: RuleTable, column: dict[Item, None], n: int, vocabulary: Vocabulary) -> CandidateSet:
        result = CandidateSet()
        if n == 0:
            roots = [(p, 0) for p in table.by_origin.get(table.start, ())]
        else:
            # Items predicted at n are reached again through the walk; starting
            # from them would bypass preferred rules.
            roots = [(p, dot) for p, dot, origin in column if origin < n]

        queue = list(dict.fromkeys(roots))
        seen = set(queue)
        i = 0
        while i < len(queue):
            p, dot = queue[i]
            i += 1
            symbols = table.productions[p].symbols
            for pos in range(dot, len(symbols)):
                symbol = symbols[pos]
                if symbol in table.terminals:
                    self._add_token(result, symbol, symbols[pos + 1 :], table, vocabulary)
                    break
                if symbol in self.preferred_rules:
                    result.rules.add(symbol)
                else:
                    for q in table.by_origin.get(symbol, ()):
                        if (q, 0) not in seen:
                            seen.add((q, 0))
                            queue.append((q, 0))
                if symbol not in table.nullable:
                    break
        return result

    def _add_token(
        self,
        result: CandidateSet,
        symbol: str,
        rest: tuple[str, ...],
        table: RuleTable,
        vocabulary: Vocabulary,
    ) -> None:
        token_type = vocabulary.get(symbol)
        if token_type is None or token_type in self.ignored_tokens or token_type in result.tokens:
            return
        following = []
        for name in rest:
            if name not in table.terminals:
                break
            follow_type = vocabulary.get(name)
            if follow_type is not None:
                following.append(follow_type)
        result.tokens[token_type] = following


def recognize(table: RuleTable, names: list[str]) -> list[dict[Item, None]]:
    """Earley recognition of the terminal names ``names``.

    Returns one ordered item set per input position, the last being the set
    at the end of input. Nullable nonterminals are stepped over at
    prediction time (Aycock and Horspool). A token no item can scan is
    skipped by carrying the current set forward unchanged.
    """
    sets: list[dict[Item, None]] = [{} for _ in range(len(names) + 1)]
    for p in table.by_origin.get(table.start, ()):
        sets[0][(p, 0, 0)] = None

    for i in range(len(names) + 1):
        column = sets[i]
        worklist = list(column)
        k = 0
        while k < len(worklist):
            p, dot, origin = worklist[k]
            k += 1
            production = table.productions[p]
            symbols = production.symbols

            if dot == len(symbols):
                for wp, wdot, worigin in list(sets[origin]):
                    waiting = table.productions[wp].symbols
                    if wdot < len(waiting) and waiting[wdot] == production.origin:
                        _add(column, worklist, (wp, wdot + 1, worigin))
                continue

            symbol = symbols[dot]
            if symbol in table.terminals:
                if i < len(names) and names[i] == symbol:
                    sets[i + 1][(p, dot + 1, origin)] = None
                continue

            for q in table.by_origin.get(symbol, ()):
                _add(column, worklist, (q, 0, i))
            if symbol in table.nullable:
                _add(column, worklist, (p, dot + 1, origin))

        if i < len(names) and not sets[i + 1]:
            logger.debug(f"analysis: skipping unexpected {names[i]} at position {i}")
            sets[i + 1] = dict(column)

    return sets


def _add(column: dict[Item, None], worklist: list[Item], item: Item) -> None:
    if item not in column:
        column[item] = None
        worklist.append(item)
