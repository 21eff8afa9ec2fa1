"""Lexing and error-tolerant parsing on top of lark.

A Grammar bundles a lark grammar file with the numeric Vocabulary the
completion engine works in. Parsing feeds tokens one at a time to lark's
interactive LALR parser so that live-typing input still yields a tree:

- before a token the parser cannot take, one token from the grammar's
  repair list may be conjured if that makes the token acceptable;
  otherwise the token is skipped, and later hung into the tree as an
  error terminal;
- at end of input, missing tokens are conjured (empty text, no stream
  index) from the grammar's repair list until the parser accepts;
- if that fails, the partial parse on the value stack becomes the tree.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from functools import cached_property
from pathlib import Path

from lark import Lark, Tree
from lark import Token as LarkToken
from lark.exceptions import LarkError, UnexpectedCharacters, UnexpectedToken
from lark.lark import PostLex

from caret.exceptions import GrammarError
from caret.tokens import EOF, Token, TokenStream, Vocabulary
from caret.tree import ParseTree

logger = logging.getLogger(__name__)

MAX_REPAIRS = 32
END = "$END"


class KeepTerminals(PostLex):
    """Post-lexer that only pins terminals the grammar rules never reference.

    lark drops unused terminals from the lexer; tokens such as an error
    catch-all or raw string tokens split later must survive.
    """

    def __init__(self, always_accept: Iterable[str] = ()) -> None:
        self.always_accept = tuple(always_accept)

    def process(self, stream: Iterator[LarkToken]) -> Iterator[LarkToken]:
        return stream


class Grammar:
    """A lark grammar plus the vocabulary and recovery policy for one language.

    Args:
        name: Short language name, used in logs and errors.
        path: Path to the ``.lark`` grammar file.
        start: Top rule of the grammar.
        vocabulary: Token types in the order the language depends on.
            Every lark terminal the lexer can emit must be named here.
        hidden: Terminal names that never reach the parser.
        comments: Hidden terminal names that are comments.
        repair_tokens: Terminal names the parser may conjure during recovery,
            most preferred first.
        postlex: lark post-lexer; must pin any terminal that is emitted but
            not referenced by a rule.
    """

    def __init__(
        self,
        name: str,
        path: Path,
        start: str,
        vocabulary: Vocabulary,
        *,
        hidden: Iterable[str] = (),
        comments: Iterable[str] = (),
        repair_tokens: Iterable[str] = (),
        postlex: PostLex | None = None,
    ) -> None:
        self.name = name
        self.path = path
        self.start = start
        self.vocabulary = vocabulary
        self.hidden = frozenset(hidden)
        self.comments = frozenset(comments)
        self.repair_tokens = tuple(repair_tokens)
        self.postlex = postlex or KeepTerminals()

    def __repr__(self) -> str:
        return f"Grammar({self.name!r})"

    @cached_property
    def lark(self) -> Lark:
        """The compiled LALR parser, built once per grammar."""
        try:
            source = self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise GrammarError(f"Cannot read grammar file {self.path}", grammar=self.name, cause=e)
        try:
            return Lark(
                source,
                start=self.start,
                parser="lalr",
                lexer="basic",
                keep_all_tokens=True,
                maybe_placeholders=False,
                postlex=self.postlex,
            )
        except LarkError as e:
            raise GrammarError(f"Grammar {self.name!r} failed to compile: {e}", grammar=self.name, cause=e)

    def tokenize(self, text: str) -> TokenStream:
        """Lex ``text`` into a stream of every token, hidden ones included."""
        tokens: list[Token] = []
        try:
            for lark_token in self.lark.lex(text, dont_ignore=True):
                tokens.append(self._token(lark_token, len(tokens)))
        except UnexpectedCharacters as e:
            # Grammars carry an ERROR_CHAR catch-all, so this only trips on a broken grammar.
            logger.debug(f"{self.name}: lexing stopped at {e.line}:{e.column}")

        line = text.count("\n") + 1
        column = len(text) - (text.rfind("\n") + 1)
        tokens.append(Token(EOF, "", len(tokens), line, column, start=len(text)))
        return TokenStream(tokens)

    def _token(self, lark_token: LarkToken, index: int) -> Token:
        token_type = self.vocabulary.get(lark_token.type)
        if token_type is None:
            raise GrammarError(
                f"Terminal {lark_token.type} is missing from the {self.name} vocabulary",
                grammar=self.name,
            )
        return Token(
            type=token_type,
            text=str(lark_token),
            index=index,
            line=lark_token.line,
            column=lark_token.column - 1,
            start=lark_token.start_pos,
            hidden=lark_token.type in self.hidden,
            comment=lark_token.type in self.comments,
        )

    def parse(self, stream: TokenStream) -> ParseTree:
        """Parse the visible tokens of ``stream`` into an arena tree.

        Never raises on bad input; see the module docstring for recovery.
        """
        parser = self.lark.parse_interactive()
        # Tokens are matched back to the stream by offset and type; lark
        # tokens carry no stream index.
        stream_index: dict[tuple[int, str], int] = {}
        skipped: list[Token] = []

        for token in stream.visible():
            lark_token = self._lark_token(token)
            try:
                parser.feed_token(lark_token)
            except UnexpectedToken:
                repaired = self._insert_before(parser, lark_token)
                if repaired is None:
                    logger.debug(
                        f"{self.name}: skipping unexpected {lark_token.type} "
                        f"at {token.line}:{token.column}"
                    )
                    skipped.append(token)
                    continue
                parser = repaired
            stream_index[(token.start, lark_token.type)] = token.index

        tree = self._finish(parser, stream.eof)
        return ParseTree.from_lark(tree, stream, self.vocabulary, stream_index, skipped)

    def _insert_before(self, parser, lark_token: LarkToken):
        """A copy of ``parser`` that took one conjured token and then ``lark_token``.

        Returns None when no repair token makes ``lark_token`` acceptable.
        """
        accepted = acceptable_terminals(parser)
        for name in self.repair_tokens:
            if name not in accepted:
                continue
            probe = parser.copy(deepcopy_values=False)
            probe.feed_token(self._conjure(name, lark_token))
            try:
                probe.feed_token(lark_token)
            except UnexpectedToken:
                continue
            logger.debug(
                f"{self.name}: conjured {name} before {lark_token.type} "
                f"at {lark_token.line}:{lark_token.column - 1}"
            )
            return probe
        return None

    def _lark_token(self, token: Token) -> LarkToken:
        return LarkToken(
            self.vocabulary.symbolic_name(token.type),
            token.text,
            start_pos=token.start,
            line=token.line,
            column=token.column + 1,
            end_pos=token.start + len(token.text),
        )

    def _conjure(self, name: str, at: LarkToken) -> LarkToken:
        """Empty token of type ``name`` positioned where ``at`` starts."""
        return LarkToken(name, "", start_pos=at.start_pos, line=at.line, column=at.column, end_pos=at.start_pos)

    def _finish(self, parser, eof: Token) -> Tree:
        end = LarkToken(END, "", start_pos=eof.start, line=eof.line, column=eof.column + 1)
        for _ in range(MAX_REPAIRS):
            accepted = acceptable_terminals(parser)
            if END in accepted:
                return parser.feed_token(self._conjure(END, end))
            name = next((n for n in self.repair_tokens if n in accepted), None)
            if name is None:
                break
            logger.debug(f"{self.name}: conjuring {name} at end of input")
            parser.feed_token(self._conjure(name, end))

        logger.debug(f"{self.name}: input incomplete, using partial parse")
        return Tree(self.start, _flatten(parser.parser_state.value_stack))


def acceptable_terminals(parser) -> set[str]:
    """Terminal names (including ``$END``) the interactive parser can take next."""
    return parser.accepts()


def _flatten(values: list) -> list:
    """Splice unreduced inline (``_``-prefixed) subtrees into their parent."""
    result = []
    stack = list(reversed(values))
    while stack:
        value = stack.pop()
        if isinstance(value, Tree) and str(value.data).startswith("_"):
            stack.extend(reversed(value.children))
        elif isinstance(value, (Tree, LarkToken)):
            result.append(value)
    return result
