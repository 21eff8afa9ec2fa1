"""Structurizr-style architecture DSL: grammar and candidate translation.

Completion here is keyword-only; identifiers are never suggested.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from caret.grammar import Grammar
from caret.languages import Language, LanguageSupport
from caret.symbols import BlockSymbol, Declaration, ElementSymbol
from caret.tokens import Vocabulary
from caret.translate import TokenTable, Translator

VOCABULARY = Vocabulary([
    "WS",
    "LINE_COMMENT",
    "BLOCK_COMMENT",
    "ERROR_CHAR",
    "NL",
    "LBRACE",
    "RBRACE",
    "EQUALS",
    "ARROW",
    "WILDCARD",
    "WORKSPACE",
    "EXTENDS",
    "NAME",
    "DESCRIPTION",
    "PROPERTIES",
    "IDENTIFIERS",
    "DOCS",
    "ADRS",
    "MODEL",
    "ENTERPRISE",
    "GROUP",
    "PERSON",
    "SOFTWARE_SYSTEM",
    "CONTAINER",
    "COMPONENT",
    "DEPLOYMENT_ENVIRONMENT",
    "DEPLOYMENT_NODE",
    "INFRASTRUCTURE_NODE",
    "SOFTWARE_SYSTEM_INSTANCE",
    "CONTAINER_INSTANCE",
    "TAGS",
    "URL",
    "TECHNOLOGY",
    "PERSPECTIVES",
    "VIEWS",
    "SYSTEM_LANDSCAPE",
    "SYSTEM_CONTEXT",
    "DYNAMIC",
    "DEPLOYMENT",
    "FILTERED",
    "INCLUDE",
    "EXCLUDE",
    "AUTOLAYOUT",
    "TITLE",
    "ANIMATION",
    "STYLES",
    "ELEMENT",
    "RELATIONSHIP",
    "THEME",
    "THEMES",
    "BRANDING",
    "CONFIGURATION",
    "USERS",
    "HEX_COLOR",
    "NUMBER",
    "STRING",
    "ID",
])

GRAMMAR = Grammar(
    "structurizr",
    Path(__file__).with_name("structurizr.lark"),
    "structurizr_file",
    VOCABULARY,
    hidden=("WS", "LINE_COMMENT", "BLOCK_COMMENT", "ERROR_CHAR"),
    comments=("LINE_COMMENT", "BLOCK_COMMENT"),
    repair_tokens=("RBRACE", "LBRACE", "ID", "STRING"),
)

DECLARATIONS = {
    "element": Declaration(ElementSymbol, "identifier"),
    "model": Declaration(BlockSymbol),
    "views": Declaration(BlockSymbol),
    "group": Declaration(BlockSymbol),
    "enterprise": Declaration(BlockSymbol),
}


class StructurizrTranslator(Translator):
    """Keyword suggestions in lowercase symbolic form; ``ID`` is never offered."""

    token_table = TokenTable({"ID": None})

    def ignored(self, vocabulary: Vocabulary) -> Iterable[int]:
        return (vocabulary.token_type("NL"),)


SUPPORT = LanguageSupport(
    language=Language.STRUCTURIZR,
    grammar=GRAMMAR,
    translator=StructurizrTranslator(VOCABULARY),
    declarations=DECLARATIONS,
    extensions=(".dsl",),
)
