"""Shared test helpers for the prattle test suite."""

from __future__ import annotations

from prattle.lexer import ListLexer
from prattle.node import Composite, Simple
from prattle.parser import GeneralParser
from prattle.precedence import PrecedenceLevel
from prattle.spec import ParserSpec
from prattle.tokens import classify_text

P = PrecedenceLevel


def leaf(parser, token, bp):
    return Simple(token)


def binary(parser, token, bp, left):
    return Composite(token, (left, parser.parse_expr(bp)))


def negate(parser, token, bp):
    return Composite(token, (parser.parse_expr(bp),))


def parens(parser, token, bp):
    inner = parser.parse_expr(P.ROOT)
    parser.consume(")")
    return inner


def S(token) -> Simple:
    return Simple(token)


def C(token, *children) -> Composite:
    return Composite(token, children)


def calculator_spec(*, pow_left=P.FOURTH, pow_right=P.THIRD) -> ParserSpec:
    """Identifiers, + - * / with the usual precedence, unary minus, parens and ^."""
    spec = ParserSpec()
    spec.add_prefixes(["ident", "number"], P.ROOT, leaf)
    spec.add_prefix("-", P.THIRD, negate)
    spec.add_prefix("(", P.ROOT, parens)
    spec.add_infixes(["+", "-"], P.FIRST, binary)
    spec.add_infixes(["*", "/"], P.SECOND, binary)
    spec.add_infix_asym("^", pow_left, pow_right, binary)
    return spec


def calc_parser(source: str, **kwargs) -> GeneralParser:
    """A parser over whitespace-separated string tokens."""
    return GeneralParser(calculator_spec(**kwargs), ListLexer(source.split()), classify_text)


def parse_calc(source: str, **kwargs):
    return calc_parser(source, **kwargs).parse()


def sexp(node) -> str:
    """Render a tree as an s-expression of token texts."""
    label = str(getattr(node.token, "value", node.token) or node.token)
    if isinstance(node, Simple):
        return label
    return "(" + " ".join([label, *(sexp(c) for c in node.children)]) + ")"


def sexps(nodes) -> list[str]:
    return [sexp(n) for n in nodes]
