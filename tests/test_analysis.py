"""Tests for Earley-based candidate collection."""

from caret.analysis import CandidateCollector, RuleTable, rule_table
from caret.languages import kotlin, structurizr


def _collect(grammar, code, index=None, **kwargs):
    stream = grammar.tokenize(code)
    collector = CandidateCollector(grammar, stream, **kwargs)
    return collector.collect(stream.eof.index if index is None else index)


def _names(grammar, candidates):
    return {grammar.vocabulary.symbolic_name(t) for t in candidates.tokens}


# =============================================================================
# Test: RuleTable
# =============================================================================


class TestRuleTable:
    """RuleTable mirrors the compiled lark rules."""

    def test_start_productions(self):
        """The start rule has productions."""
        table = rule_table(structurizr.GRAMMAR)
        assert table.start == "structurizr_file"
        assert table.by_origin["structurizr_file"]

    def test_terminals(self):
        """Terminals are collected from rule expansions."""
        table = rule_table(structurizr.GRAMMAR)
        assert {"WORKSPACE", "LBRACE", "RBRACE", "ID"} <= table.terminals

    def test_nullable(self):
        """Rules that can derive nothing are nullable."""
        table = rule_table(structurizr.GRAMMAR)
        assert "structurizr_file" in table.nullable
        assert "workspace_body" in table.nullable
        assert "workspace" not in table.nullable

    def test_cached(self):
        """The table is built once per grammar."""
        assert rule_table(kotlin.GRAMMAR) is rule_table(kotlin.GRAMMAR)

    def test_from_grammar(self):
        """A fresh table matches the cached one."""
        table = RuleTable.from_grammar(structurizr.GRAMMAR)
        assert len(table.productions) == len(rule_table(structurizr.GRAMMAR).productions)


# =============================================================================
# Test: CandidateCollector
# =============================================================================


class TestStructurizrCandidates:
    """Keyword candidates in the architecture DSL."""

    def test_file_start(self):
        """Only a workspace (or a newline) can start a file."""
        assert _names(structurizr.GRAMMAR, _collect(structurizr.GRAMMAR, "")) == {"WORKSPACE", "NL"}

    def test_workspace_body(self):
        """Inside a workspace, its sections and the closing brace are viable."""
        names = _names(structurizr.GRAMMAR, _collect(structurizr.GRAMMAR, "workspace {\n"))
        assert {"MODEL", "VIEWS", "CONFIGURATION", "NAME", "RBRACE"} <= names
        assert "PERSON" not in names

    def test_element_kinds_after_assignment(self):
        """After ``id =`` every element keyword is viable."""
        names = _names(structurizr.GRAMMAR, _collect(structurizr.GRAMMAR, "workspace {\n  model {\n    u = "))
        assert {"PERSON", "SOFTWARE_SYSTEM", "CONTAINER", "DEPLOYMENT_NODE"} <= names
        assert "MODEL" not in names

    def test_index_inside_stream(self):
        """Candidates at an index ignore the tokens from that index on."""
        stream = structurizr.GRAMMAR.tokenize("workspace {\n  model {\n")
        model = next(t for t in stream if t.text == "model")
        candidates = CandidateCollector(structurizr.GRAMMAR, stream).collect(model.index)
        assert "MODEL" in _names(structurizr.GRAMMAR, candidates)

    def test_ignored_tokens(self):
        """Ignored token types are never candidates."""
        nl = structurizr.VOCABULARY.token_type("NL")
        candidates = _collect(structurizr.GRAMMAR, "", ignored_tokens=[nl])
        assert _names(structurizr.GRAMMAR, candidates) == {"WORKSPACE"}

    def test_following_tokens(self):
        """A candidate records the terminals that must follow it."""
        vocabulary = structurizr.VOCABULARY
        candidates = _collect(structurizr.GRAMMAR, "workspace {\n")
        assert candidates.tokens[vocabulary.token_type("MODEL")] == [vocabulary.token_type("LBRACE")]


class TestKotlinCandidates:
    """Keyword and rule candidates in the Kotlin-like language."""

    def test_preferred_rule_reported(self):
        """variable_read is reported where an expression may start."""
        candidates = _collect(kotlin.GRAMMAR, "val y = ", preferred_rules={"variable_read"})
        assert "variable_read" in candidates.rules

    def test_preferred_rule_not_expanded(self):
        """Tokens only reachable through a preferred rule are left out."""
        candidates = _collect(kotlin.GRAMMAR, "val y = ", preferred_rules={"variable_read"})
        assert "IDENTIFIER" not in _names(kotlin.GRAMMAR, candidates)

    def test_without_preferred_rules(self):
        """Without preferred rules, identifiers show up as tokens."""
        candidates = _collect(kotlin.GRAMMAR, "val y = ")
        assert "IDENTIFIER" in _names(kotlin.GRAMMAR, candidates)
        assert candidates.rules == set()

    def test_expression_keywords(self):
        """Expression keywords are viable after an assignment."""
        names = _names(kotlin.GRAMMAR, _collect(kotlin.GRAMMAR, "val y = "))
        assert {"IF", "WHEN", "TRY", "THIS", "RETURN"} <= names
        assert "VAL" not in names

    def test_following_tokens(self):
        """``for`` must be followed by ``(``."""
        vocabulary = kotlin.VOCABULARY
        candidates = _collect(kotlin.GRAMMAR, "")
        assert candidates.tokens[vocabulary.token_type("FOR")] == [vocabulary.token_type("LPAREN")]

    def test_operators_after_expression(self):
        """After an operand, infix keywords are viable."""
        names = _names(kotlin.GRAMMAR, _collect(kotlin.GRAMMAR, "val y = x "))
        assert {"IN", "NOT_IN", "IS", "NOT_IS", "AS"} <= names

    def test_garbage_input(self):
        """Unparseable tokens are skipped instead of failing."""
        candidates = _collect(kotlin.GRAMMAR, ") ) ] val y = ")
        assert "IF" in _names(kotlin.GRAMMAR, candidates)
