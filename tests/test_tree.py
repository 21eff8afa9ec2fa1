"""Tests for the arena parse tree."""

import pytest

from caret.tokens import EOF, Token
from caret.tree import ParseNode, ParseTree


@pytest.fixture
def tree():
    """statement(declaration(val, name(x)), conjured, ERR) followed by EOF."""
    return ParseTree([
        ParseNode(0, None, rule="file", children=[1, 8]),
        ParseNode(1, 0, rule="statement", children=[2, 6, 7]),
        ParseNode(2, 1, rule="declaration", children=[3, 4]),
        ParseNode(3, 2, token=Token(1, "val", 0, 1, 0)),
        ParseNode(4, 2, rule="name", children=[5]),
        ParseNode(5, 4, token=Token(2, "x", 2, 1, 4, start=4)),
        ParseNode(6, 1, token=Token(3, "", None, 1, 5)),
        ParseNode(7, 1, token=Token(4, "=", 3, 1, 6, start=6)),
        ParseNode(8, 0, token=Token(EOF, "", 4, 1, 7, start=7)),
    ])


class TestParseTree:
    """Navigation over the arena."""

    def test_needs_root(self):
        """An empty arena is rejected."""
        with pytest.raises(ValueError):
            ParseTree([])

    def test_root_and_len(self, tree):
        """Node 0 is the root."""
        assert tree.root.rule == "file"
        assert len(tree) == 9

    def test_parent_and_children(self, tree):
        """parent and children resolve indices to nodes."""
        name = tree.node(4)
        assert tree.parent(name).rule == "declaration"
        assert tree.parent(tree.root) is None
        assert [c.index for c in tree.children(tree.node(2))] == [3, 4]

    def test_ancestors_include_self(self, tree):
        """ancestors starts at the node and ends at the root."""
        assert [n.index for n in tree.ancestors(tree.node(5))] == [5, 4, 2, 1, 0]

    def test_walk_pre_order(self, tree):
        """walk visits nodes in pre-order."""
        assert [n.index for n in tree.walk()] == [0, 1, 2, 3, 4, 5, 6, 7, 8]
        assert [n.index for n in tree.walk(tree.node(2))] == [2, 3, 4, 5]

    def test_terminals(self, tree):
        """terminals yields leaf nodes left to right."""
        assert [n.index for n in tree.terminals(tree.node(1))] == [3, 5, 6, 7]

    def test_text_skips_empty_tokens(self, tree):
        """text joins non-empty token texts with single spaces."""
        assert tree.text(tree.node(1)) == "val x ="
        assert tree.text(tree.node(6)) == ""

    def test_token_range_skips_conjured(self, tree):
        """token_range spans the first and last stream tokens."""
        first, last = tree.token_range(tree.node(1))
        assert (first.index, last.index) == (0, 3)
        assert tree.token_range(tree.node(6)) is None

    def test_find_rule_direct_children_only(self, tree):
        """find_rule looks at direct children only."""
        assert tree.find_rule(tree.node(2), "name").index == 4
        assert tree.find_rule(tree.node(1), "name") is None

    def test_is_terminal(self, tree):
        """Terminal nodes carry a token; rule nodes a rule name."""
        assert tree.node(3).is_terminal
        assert not tree.node(2).is_terminal
        assert repr(tree.node(3)) == "ParseNode(3, token='val')"
        assert repr(tree.node(2)) == "ParseNode(2, rule='declaration')"
