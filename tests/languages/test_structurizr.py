"""Tests for the architecture DSL: lexing, symbols and keyword suggestions."""

from caret.config import CompletionConfig
from caret.engine import get_structurizr_suggestions
from caret.languages.structurizr import DECLARATIONS, GRAMMAR, SUPPORT, VOCABULARY, StructurizrTranslator
from caret.matching import fuzzy
from caret.position import CaretPosition
from caret.symbols import ElementSymbol, SymbolTableBuilder


def _visible_types(code):
    return [VOCABULARY.symbolic_name(t.type) for t in GRAMMAR.tokenize(code).visible()]


def _suggest(code, line, column, **kwargs):
    return get_structurizr_suggestions(code, CaretPosition(line=line, column=column), **kwargs)


def _end(code):
    lines = code.split("\n")
    return len(lines), len(lines[-1])


MODEL = """workspace "Demo" {
    model {
        user = person "User"
        web = softwareSystem "Web" {
            api = container "API"
        }
        user -> web "Uses"
    }
}
"""


class TestLexing:
    """Keywords are case-insensitive; newlines are significant."""

    def test_keywords_any_case(self):
        """softwareSystem matches regardless of case."""
        assert _visible_types("softwareSystem SOFTWARESYSTEM softwaresystem") == ["SOFTWARE_SYSTEM"] * 3

    def test_identifiers_and_strings(self):
        """Non-keywords are IDs; quoted text is a STRING."""
        assert _visible_types('web = softwareSystem "Web"') == ["ID", "EQUALS", "SOFTWARE_SYSTEM", "STRING"]

    def test_directives(self):
        """Bang directives are keywords."""
        assert _visible_types("!identifiers hierarchical") == ["IDENTIFIERS", "ID"]

    def test_comments_hidden(self):
        """Both comment styles are hidden; hex colours are not comments."""
        assert _visible_types("# note\n// note\nbackground #ffffff") == ["NL", "NL", "ID", "HEX_COLOR"]

    def test_newlines(self):
        """Newlines are tokens."""
        assert _visible_types("model {\n}") == ["MODEL", "LBRACE", "NL", "RBRACE"]


class TestSymbols:
    """Elements are named scopes."""

    def test_elements(self):
        """Assigned elements are declared under their parents."""
        table = SymbolTableBuilder(DECLARATIONS).build(GRAMMAR.parse(GRAMMAR.tokenize(MODEL)))
        elements = {s.name: s for s in table.symbols_of_type(ElementSymbol)}
        assert set(elements) == {"user", "web", "api"}
        assert table.parent_of(elements["api"]) is elements["web"]


class TestSuggestions:
    """Keyword-only suggestions."""

    def test_file_start(self):
        """An empty file can only start a workspace."""
        assert _suggest("", 1, 0) == ["workspace"]

    def test_typed_prefix(self):
        """mo inside a workspace completes to model."""
        assert _suggest("workspace {\n    mo", 2, 6) == ["model"]

    def test_typed_prefix_any_case(self):
        """Typed text is matched case-insensitively."""
        assert _suggest("workspace {\n    MO", 2, 6) == ["model"]

    def test_workspace_sections(self):
        """An empty workspace line offers every section keyword."""
        suggestions = _suggest("workspace {\n    \n}\n", 2, 4)
        assert {"model", "views", "configuration", "name", "description"} <= set(suggestions)

    def test_element_keywords(self):
        """After ``id =`` the element kinds are offered in lowercase symbolic form."""
        code = "workspace {\n  model {\n    u = "
        suggestions = _suggest(code, *_end(code))
        assert {"person", "software_system", "container", "deployment_node"} <= set(suggestions)
        assert all(s == s.lower() for s in suggestions)

    def test_never_suggests_identifiers(self):
        """Declared identifiers are never offered."""
        code = MODEL.replace('        user -> web "Uses"\n', "        user -> \n")
        line = code.split("\n").index("        user -> ") + 1
        assert _suggest(code, line, 16) == []

    def test_only_vocabulary_strings(self):
        """Every suggestion is a vocabulary name."""
        names = {VOCABULARY.symbolic_name(t).lower() for t in range(1, VOCABULARY.max_token_type + 1)}
        code = "workspace {\n  model {\n    u = person\n    "
        assert set(_suggest(code, *_end(code))) <= names

    def test_fuzzy_config(self):
        """A fuzzy matcher can be passed per request."""
        suggestions = _suggest("workspace {\n    mdl", 2, 7, config=CompletionConfig(matcher=fuzzy))
        assert suggestions == ["model"]

    def test_deterministic(self):
        """Identical requests give identical results."""
        assert _suggest(MODEL, 3, 8) == _suggest(MODEL, 3, 8)


class TestTranslator:
    """StructurizrTranslator configuration."""

    def test_ignores_newlines(self):
        """Only NL is ignored."""
        assert StructurizrTranslator(VOCABULARY).ignored_tokens == frozenset({VOCABULARY.token_type("NL")})

    def test_support(self):
        """The support bundle claims .dsl files."""
        assert SUPPORT.extensions == (".dsl",)
        assert isinstance(SUPPORT.translator, StructurizrTranslator)
