"""Arithmetic over plain string tokens.

Tokens are the raw strings themselves; ``classify_text`` maps numerals to
``"number"`` and words to ``"ident"`` so one rule covers every identifier.

    + -        FIRST, left-associative
    * / %      SECOND, left-associative
    ^          right-associative, binds tighter than * and unary minus
    -x         unary minus, binds tighter than * / %
    ( ... )    grouping
"""

from __future__ import annotations

from functools import cache
from typing import Any

from prattle.errors import MissingRuleError, RuleRole
from prattle.grammars.scanner import Scanner
from prattle.node import Composite, Node, Simple
from prattle.parser import Parser
from prattle.precedence import PrecedenceLevel
from prattle.spec import ParserSpec, RuleTable

_SCANNER = Scanner([
    (r"\s+", None),
    (r"[A-Za-z0-9]+", "word"),
    (r"\S", "symbol"),
])


def tokenize(text: str) -> list[str]:
    return [tok.value for tok in _SCANNER.scan(text)]


def _leaf(parser: Parser, token: Any, bp: PrecedenceLevel) -> Node:
    return Simple(token)


def _binary(parser: Parser, token: Any, bp: PrecedenceLevel, left: Node) -> Node:
    return Composite(token, (left, parser.parse_expr(bp)))


def _parens(parser: Parser, token: Any, bp: PrecedenceLevel) -> Node:
    inner = parser.parse_expr(PrecedenceLevel.ROOT)
    parser.consume(")")
    return inner


def _negate(parser: Parser, token: Any, bp: PrecedenceLevel) -> Node:
    return Composite(token, (parser.parse_expr(bp),))


def build_spec() -> ParserSpec:
    spec = ParserSpec()
    spec.add_prefixes(["ident", "number"], PrecedenceLevel.ROOT, _leaf)
    spec.add_prefix("(", PrecedenceLevel.FIRST, _parens)
    spec.add_prefix("-", PrecedenceLevel.THIRD, _negate)
    spec.add_infixes(["+", "-"], PrecedenceLevel.FIRST, _binary)
    spec.add_infixes(["*", "/", "%"], PrecedenceLevel.SECOND, _binary)
    spec.add_infix_asym("^", PrecedenceLevel.FOURTH, PrecedenceLevel.THIRD, _binary)
    return spec


@cache
def rules() -> RuleTable:
    return build_spec().build()


def parse_program(parser: Parser) -> list[Node]:
    """Parse exactly one expression; leftover tokens are an error."""
    node = parser.parse()
    leftover = parser.peek()
    if leftover is not None:
        raise MissingRuleError(leftover, RuleRole.INFIX)
    return [node]
