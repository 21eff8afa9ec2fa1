"""Tokens, token streams and grammar vocabularies.

Token types are small integers assigned by a Vocabulary in declaration
order, starting at 1. The order is meaningful: grammars may rely on every
punctuation/operator token sorting before the first keyword.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass

EOF = -1
"""Token type of the end-of-input token that terminates every stream."""


@dataclass(frozen=True)
class Token:
    """A lexed (or parser-conjured) token.

    Attributes:
        type: Numeric token type from the grammar's vocabulary, or EOF.
        text: Matched source text. Empty for EOF and conjured tokens.
        index: Position in the token stream. None for tokens the parser
            inserted during error recovery; those exist only in the tree.
        line: 1-based line of the first character.
        column: 0-based column of the first character.
        start: 0-based character offset into the source.
        hidden: True for tokens the parser never sees (whitespace, comments).
        comment: True for comment tokens; no completion happens inside them.
    """

    type: int
    text: str
    index: int | None
    line: int
    column: int
    start: int = 0
    hidden: bool = False
    comment: bool = False

    @property
    def stop_column(self) -> int:
        """Column just past the token's last character on its first line."""
        first_line = self.text.split("\n", 1)[0]
        return self.column + len(first_line)

    @property
    def conjured(self) -> bool:
        return self.index is None


class TokenStream(Sequence[Token]):
    """All tokens of one source text, hidden ones included, ending with EOF."""

    def __init__(self, tokens: list[Token]) -> None:
        if not tokens or tokens[-1].type != EOF:
            raise ValueError("token stream must end with an EOF token")
        self._tokens = tokens

    def __getitem__(self, i):
        return self._tokens[i]

    def __len__(self) -> int:
        return len(self._tokens)

    def __iter__(self) -> Iterator[Token]:
        return iter(self._tokens)

    @property
    def eof(self) -> Token:
        return self._tokens[-1]

    def visible(self, stop: int | None = None) -> list[Token]:
        """Non-hidden, non-EOF tokens strictly before stream index ``stop``."""
        tokens = self._tokens if stop is None else self._tokens[:stop]
        return [t for t in tokens if not t.hidden and t.type != EOF]

    def __repr__(self) -> str:
        return f"TokenStream({len(self._tokens)} tokens)"


class Vocabulary:
    """Bidirectional map between numeric token types and symbolic names.

    ``symbolic_names[i]`` names token type ``i + 1``. A ``None`` entry is a
    token type with no symbolic name (a literal-only token).
    """

    def __init__(self, symbolic_names: Sequence[str | None]) -> None:
        self._names: tuple[str | None, ...] = tuple(symbolic_names)
        self._types: dict[str, int] = {}
        for i, name in enumerate(self._names, start=1):
            if name is None:
                continue
            if name in self._types:
                raise ValueError(f"duplicate symbolic name {name!r}")
            self._types[name] = i

    @property
    def max_token_type(self) -> int:
        return len(self._names)

    def symbolic_name(self, token_type: int) -> str | None:
        """Symbolic name of ``token_type``, or None if it has none."""
        if 1 <= token_type <= len(self._names):
            return self._names[token_type - 1]
        return None

    def token_type(self, name: str) -> int:
        """Numeric type of the token named ``name``.

        Raises:
            KeyError: If no token has that symbolic name.
        """
        return self._types[name]

    def get(self, name: str) -> int | None:
        return self._types.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._types

    def __len__(self) -> int:
        return len(self._names)

    def __repr__(self) -> str:
        return f"Vocabulary({len(self._names)} token types)"
