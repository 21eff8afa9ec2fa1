"""Kotlin-like scripting language: grammar, symbols and candidate translation."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Iterator
from pathlib import Path

from lark import Token as LarkToken
from lark.lark import PostLex

from caret.analysis import CandidateSet
from caret.grammar import Grammar
from caret.languages import Language, LanguageSupport
from caret.matching import TokenMatcher, filter_tokens, starts_with
from caret.position import TokenPosition
from caret.scopes import collect_visible, resolve_scope
from caret.symbols import (
    BlockSymbol,
    ClassSymbol,
    Declaration,
    FunctionSymbol,
    ParameterSymbol,
    VariableSymbol,
)
from caret.tokens import Vocabulary
from caret.translate import SymbolTableFactory, TokenTable, Translator
from caret.tree import ParseTree

logger = logging.getLogger(__name__)

# Order matters: every token before PACKAGE is hidden, punctuation or an
# operator and is never suggested.
VOCABULARY = Vocabulary([
    "DELIMITED_COMMENT",
    "LINE_COMMENT",
    "WS",
    "NL",
    "ERROR_CHAR",
    "DOT",
    "COMMA",
    "LPAREN",
    "RPAREN",
    "LSQUARE",
    "RSQUARE",
    "LCURL",
    "RCURL",
    "MULT",
    "MOD",
    "DIV",
    "ADD",
    "SUB",
    "INCR",
    "DECR",
    "CONJ",
    "DISJ",
    "EXCL",
    "COLON",
    "SEMICOLON",
    "ASSIGNMENT",
    "ADD_ASSIGNMENT",
    "SUB_ASSIGNMENT",
    "MULT_ASSIGNMENT",
    "DIV_ASSIGNMENT",
    "MOD_ASSIGNMENT",
    "ARROW",
    "RANGE",
    "SAFE_DOT",
    "ELVIS",
    "QUEST",
    "LANGLE",
    "RANGLE",
    "LE",
    "GE",
    "EXCL_EQ",
    "EXCL_EQEQ",
    "EQEQ",
    "EQEQEQ",
    "AS_SAFE",
    "PACKAGE",
    "IMPORT",
    "CLASS",
    "OBJECT",
    "FUN",
    "VAL",
    "VAR",
    "THIS",
    "IF",
    "ELSE",
    "WHEN",
    "TRY",
    "CATCH",
    "FINALLY",
    "FOR",
    "DO",
    "WHILE",
    "THROW",
    "RETURN",
    "CONTINUE",
    "BREAK",
    "AS",
    "IS",
    "IN",
    "NOT_IS",
    "NOT_IN",
    "LABEL_REFERENCE",
    "LABEL_DEFINITION",
    "REAL",
    "DOUBLE",
    "INTEGER",
    "HEX",
    "BIN",
    "LONG",
    "BOOLEAN",
    "NULL",
    "CHARACTER",
    "IDENTIFIER",
    "QUOTE_OPEN",
    "TRIPLE_QUOTE_OPEN",
    "QUOTE_CLOSE",
    "LINE_STR_TEXT",
    "TRIPLE_QUOTE_CLOSE",
    "MULTI_LINE_STR_TEXT",
])

COMMENTS = ("DELIMITED_COMMENT", "LINE_COMMENT")

HIDDEN = COMMENTS + ("WS", "ERROR_CHAR")

LITERALS = ("BIN", "BOOLEAN", "CHARACTER", "DOUBLE", "HEX", "INTEGER", "LONG", "NULL", "REAL")

_LINE_STRING = re.compile(r'"((?:\\.|[^"\\\r\n])*)("?)')

_OPENERS = {"LPAREN": "RPAREN", "LSQUARE": "RSQUARE", "LCURL": "RCURL"}


class KotlinPostLex(PostLex):
    """Splits string tokens into quote and text parts and hides bracketed newlines.

    A newline directly inside ``(...)`` or ``[...]`` is whitespace; inside
    ``{...}`` it separates statements again, even when the braces sit in
    parentheses.
    """

    always_accept = ("LINE_STRING", "MULTI_LINE_STRING")

    def process(self, stream: Iterator[LarkToken]) -> Iterator[LarkToken]:
        brackets: list[str] = []
        for token in stream:
            if token.type == "LINE_STRING":
                yield from _split_line_string(token)
            elif token.type == "MULTI_LINE_STRING":
                yield from _split_multi_line_string(token)
            elif token.type == "NL" and brackets and brackets[-1] != "RCURL":
                yield LarkToken.new_borrow_pos("WS", token.value, token)
            else:
                if token.type in _OPENERS:
                    brackets.append(_OPENERS[token.type])
                elif brackets and token.type == brackets[-1]:
                    brackets.pop()
                yield token


def _piece(token: LarkToken, type_: str, offset: int, length: int) -> LarkToken:
    prefix = token.value[:offset]
    newlines = prefix.count("\n")
    column = len(prefix) - prefix.rfind("\n") if newlines else token.column + offset
    start = token.start_pos + offset
    return LarkToken(
        type_,
        token.value[offset : offset + length],
        start_pos=start,
        line=token.line + newlines,
        column=column,
        end_pos=start + length,
    )


def _split_line_string(token: LarkToken) -> Iterator[LarkToken]:
    match = _LINE_STRING.fullmatch(token.value)
    text, close = match.group(1), match.group(2)
    yield _piece(token, "QUOTE_OPEN", 0, 1)
    if text:
        yield _piece(token, "LINE_STR_TEXT", 1, len(text))
    if close:
        yield _piece(token, "QUOTE_CLOSE", 1 + len(text), 1)


def _split_multi_line_string(token: LarkToken) -> Iterator[LarkToken]:
    value = token.value
    closed = len(value) >= 6 and value.endswith('"""')
    text = value[3:-3] if closed else value[3:]
    yield _piece(token, "TRIPLE_QUOTE_OPEN", 0, 3)
    if text:
        yield _piece(token, "MULTI_LINE_STR_TEXT", 3, len(text))
    if closed:
        yield _piece(token, "TRIPLE_QUOTE_CLOSE", 3 + len(text), 3)


GRAMMAR = Grammar(
    "kotlin",
    Path(__file__).with_name("kotlin.lark"),
    "kotlin_file",
    VOCABULARY,
    hidden=HIDDEN,
    comments=COMMENTS,
    repair_tokens=(
        "RPAREN",
        "RSQUARE",
        "RCURL",
        "RANGLE",
        "QUOTE_CLOSE",
        "TRIPLE_QUOTE_CLOSE",
        "IDENTIFIER",
        "COLON",
        "ARROW",
        "IN",
    ),
    postlex=KotlinPostLex(),
)

DECLARATIONS = {
    "function_declaration": Declaration(FunctionSymbol, "simple_identifier"),
    "class_declaration": Declaration(ClassSymbol, "simple_identifier"),
    "object_declaration": Declaration(ClassSymbol, "simple_identifier"),
    "block": Declaration(BlockSymbol),
    "lambda_literal": Declaration(BlockSymbol),
    "for_statement": Declaration(BlockSymbol),
    "catch_block": Declaration(BlockSymbol),
    "variable_declaration": Declaration(VariableSymbol, "simple_identifier"),
    "class_parameter": Declaration(VariableSymbol, "simple_identifier"),
    "for_variable": Declaration(VariableSymbol, "simple_identifier"),
    "function_value_parameter": Declaration(ParameterSymbol, "simple_identifier"),
    "lambda_parameter": Declaration(ParameterSymbol, "simple_identifier"),
    "catch_parameter": Declaration(ParameterSymbol, "simple_identifier"),
}


class KotlinTranslator(Translator):
    """Suggests visible variables where an identifier is read, plus keywords.

    Variables come first, filtered by the identifier typed so far; keywords
    follow, filtered by the typed text. Shadowed names are not collapsed.
    """

    token_table = TokenTable({"IDENTIFIER": None, "NOT_IN": "!in", "NOT_IS": "!is"})
    preferred_rules = frozenset({"variable_read", "suggest_argument"})

    def ignored(self, vocabulary: Vocabulary) -> Iterable[int]:
        first_keyword = vocabulary.token_type("PACKAGE")
        yield from range(1, first_keyword)
        for name in (
            *LITERALS,
            *COMMENTS,
            "QUOTE_OPEN",
            "QUOTE_CLOSE",
            "TRIPLE_QUOTE_OPEN",
            "LABEL_DEFINITION",
            "LABEL_REFERENCE",
        ):
            yield vocabulary.token_type(name)

    def translate(
        self,
        candidates: CandidateSet,
        position: TokenPosition,
        symbol_table_factory: SymbolTableFactory,
        *,
        tree: ParseTree,
        matcher: TokenMatcher = starts_with,
    ) -> list[str]:
        suggestions = []
        if candidates.rules & self.preferred_rules:
            suggestions.extend(self.variable_suggestions(position, symbol_table_factory, tree, matcher))
        suggestions.extend(self.vocabulary_suggestions(candidates, position, matcher))
        return suggestions

    def variable_suggestions(
        self,
        position: TokenPosition,
        symbol_table_factory: SymbolTableFactory,
        tree: ParseTree,
        matcher: TokenMatcher,
    ) -> list[str]:
        table = symbol_table_factory()
        scope = resolve_scope(position.context, tree, table)
        if scope is None:
            symbols = [s for s in table.children_of(table) if isinstance(s, VariableSymbol)]
        else:
            symbols = collect_visible(table, scope, VariableSymbol)
        names = [s.name for s in symbols]

        reading = any(node.rule == "variable_read" for node in tree.ancestors(position.context))
        prefix = position.text if reading else ""
        logger.debug(f"kotlin: {len(names)} visible variables, prefix {prefix!r}")
        return filter_tokens(prefix, names, matcher)


SUPPORT = LanguageSupport(
    language=Language.KOTLIN,
    grammar=GRAMMAR,
    translator=KotlinTranslator(VOCABULARY),
    declarations=DECLARATIONS,
    extensions=(".kt", ".kts"),
    pygments_lexer="kotlin",
)
