"""Tests for parse tree nodes and precedence ranks."""

from __future__ import annotations

import dataclasses

import pytest

from prattle.node import Composite, Simple
from prattle.precedence import PrecedenceLevel


class TestNodes:
    def test_str(self):
        tree = Composite("+", (Simple("a"), Composite("*", (Simple("b"), Simple("c")))))
        assert str(Simple("a")) == "Simple(a)"
        assert str(tree) == (
            "Composite(token: +, children: [Simple(a), "
            "Composite(token: *, children: [Simple(b), Simple(c)])])"
        )

    def test_children_become_tuple(self):
        node = Composite("f", [Simple("x")])
        assert node.children == (Simple("x"),)
        assert node == Composite("f", (Simple("x"),))

    def test_frozen(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            Simple("a").token = "b"

    def test_with_child_returns_copy(self):
        node = Composite("seq", (Simple("a"),))
        grown = node.with_child(Simple("b"))
        assert node.children == (Simple("a"),)
        assert grown.children == (Simple("a"), Simple("b"))

    def test_pretty(self):
        tree = Composite("+", (Simple("a"), Composite("-", (Simple("b"),))))
        assert tree.pretty() == "+\n  a\n  -\n    b"

    def test_walk_is_preorder(self):
        tree = Composite("+", (Simple("a"), Composite("*", (Simple("b"), Simple("c")))))
        assert [n.token for n in tree.walk()] == ["+", "a", "*", "b", "c"]

    def test_hashable(self):
        assert len({Simple("a"), Simple("a"), Composite("a")}) == 2


class TestPrecedenceLevel:
    def test_ordering(self):
        levels = list(PrecedenceLevel)
        assert levels == sorted(levels)
        assert PrecedenceLevel.ROOT < PrecedenceLevel.FIRST < PrecedenceLevel.HIGHEST

    def test_str(self):
        assert str(PrecedenceLevel.SECOND) == "(Precedence: 10)"
