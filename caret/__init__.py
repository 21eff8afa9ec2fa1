"""Caret: grammar-driven code completion for an architecture DSL and a Kotlin-like language."""

from caret.analysis import CandidateCollector, CandidateSet
from caret.config import CompletionConfig
from caret.engine import CompletionEngine, get_kotlin_suggestions, get_structurizr_suggestions
from caret.exceptions import CaretError, GrammarError, UnknownLanguageError
from caret.grammar import Grammar
from caret.languages import Language, get_support, language_for_path
from caret.matching import TokenMatcher, filter_tokens, fuzzy, starts_with
from caret.position import CaretPosition, TokenPosition, compute_token_position
from caret.scopes import collect_visible, resolve_scope
from caret.symbols import (
    BlockSymbol,
    ClassSymbol,
    ElementSymbol,
    FunctionSymbol,
    ParameterSymbol,
    ScopedSymbol,
    Symbol,
    SymbolTable,
    SymbolTableBuilder,
    VariableSymbol,
)
from caret.tokens import EOF, Token, TokenStream, Vocabulary
from caret.tree import ParseNode, ParseTree

__all__ = [
    # Entry points
    "get_structurizr_suggestions",
    "get_kotlin_suggestions",
    "CompletionEngine",
    "CompletionConfig",
    "Language",
    "get_support",
    "language_for_path",
    # Positions
    "CaretPosition",
    "TokenPosition",
    "compute_token_position",
    # Matching
    "TokenMatcher",
    "filter_tokens",
    "starts_with",
    "fuzzy",
    # Scopes and symbols
    "resolve_scope",
    "collect_visible",
    "Symbol",
    "ScopedSymbol",
    "VariableSymbol",
    "ParameterSymbol",
    "FunctionSymbol",
    "ClassSymbol",
    "BlockSymbol",
    "ElementSymbol",
    "SymbolTable",
    "SymbolTableBuilder",
    # Parsing
    "Grammar",
    "Token",
    "TokenStream",
    "Vocabulary",
    "EOF",
    "ParseNode",
    "ParseTree",
    "CandidateCollector",
    "CandidateSet",
    # Exceptions
    "CaretError",
    "GrammarError",
    "UnknownLanguageError",
]
