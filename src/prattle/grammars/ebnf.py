"""EBNF rule definitions, one rule per ``;``-terminated entry.

    grammar        : rule + ;
    rule           : nonterminal ':' productionrule ';' ;
    productionrule : production [ '|' production ] * ;
    production     : term * ;
    term           : element repeats ;
    element        : LITERAL | IDENTIFIER | '[' productionrule ']' ;
    repeats        : [ '*' | '+' ] NUMBER ? | NUMBER ? | '?' ;

Juxtaposed elements form a SEQUENCE node, ``* + NUMBER`` postfixes form a
REPEATS node, ``?`` an OPT node and brackets a GROUP node.
"""

from __future__ import annotations

from enum import Enum, auto
from functools import cache
from typing import Callable, Iterator

from prattle.errors import ParseError
from prattle.grammars.scanner import Scanner
from prattle.node import Composite, Node, Simple
from prattle.parser import Parser
from prattle.precedence import PrecedenceLevel
from prattle.spec import ParserSpec, RuleTable
from prattle.tokens import Token


class EBNFKind(Enum):
    STAR = auto()
    PLUS = auto()
    QUESTION = auto()
    PIPE = auto()
    LBRACKET = auto()
    RBRACKET = auto()
    SEMICOLON = auto()
    COLON = auto()
    NUMBER = auto()
    IDENT = auto()
    STRING = auto()

    # Parse-only markers
    REPEATS = auto()
    OPT = auto()
    GROUP = auto()
    SEQUENCE = auto()
    RULE = auto()


_PUNCT = {
    "*": EBNFKind.STAR, "+": EBNFKind.PLUS, "?": EBNFKind.QUESTION,
    "|": EBNFKind.PIPE, "[": EBNFKind.LBRACKET, "]": EBNFKind.RBRACKET,
    ";": EBNFKind.SEMICOLON, ":": EBNFKind.COLON,
}

_SCANNER = Scanner([
    (r"\s+", None),
    (r"'(?:''|[^'])*'|\"[^\"]*\"", EBNFKind.STRING),
    (r"[0-9]+", EBNFKind.NUMBER),
    (r"[A-Za-z_][A-Za-z0-9_]*", EBNFKind.IDENT),
    (r"[*+?|\[\];:]", _PUNCT.__getitem__),
])

SEMICOLON = Token(EBNFKind.SEMICOLON, ";")
RBRACKET = Token(EBNFKind.RBRACKET, "]")


def marker(kind: EBNFKind) -> Token:
    return Token(kind, kind.name.lower())


def tokenize(text: str) -> Iterator[Token]:
    return _SCANNER.scan(text)


def _is(node: Node, kind: EBNFKind) -> bool:
    return isinstance(node, Composite) and node.token.kind is kind


def _extend_sequence(left: Node, item: Node) -> Node:
    if _is(left, EBNFKind.SEQUENCE):
        return left.with_child(item)
    return Composite(marker(EBNFKind.SEQUENCE), (left, item))


def _element(parser: Parser, token: Token, bp: PrecedenceLevel) -> Node:
    return Simple(token)


def _rule(parser: Parser, token: Token, bp: PrecedenceLevel, left: Node) -> Node:
    return Composite(marker(EBNFKind.RULE), (left, parser.parse_expr(bp)))


def _alternative(parser: Parser, token: Token, bp: PrecedenceLevel, left: Node) -> Node:
    return Composite(token, (left, parser.parse_expr(bp)))


def _on_last(left: Node, build: Callable[[Node], Node]) -> Node:
    """Apply a postfix to the last element of a sequence, or to ``left`` itself."""
    if _is(left, EBNFKind.SEQUENCE):
        *head, last = left.children
        return Composite(left.token, (*head, build(last)))
    return build(left)


def _repeat(parser: Parser, token: Token, bp: PrecedenceLevel, left: Node) -> Node:
    def build(node: Node) -> Node:
        # A count after * or + joins the same REPEATS node: term * 3
        if token.kind is EBNFKind.NUMBER and _is(node, EBNFKind.REPEATS):
            return node.with_child(Simple(token))
        return Composite(marker(EBNFKind.REPEATS), (node, Simple(token)))
    return _on_last(left, build)


def _optional(parser: Parser, token: Token, bp: PrecedenceLevel, left: Node) -> Node:
    return _on_last(left, lambda node: Composite(marker(EBNFKind.OPT), (node,)))


def _juxtapose(parser: Parser, token: Token, bp: PrecedenceLevel, left: Node) -> Node:
    return _extend_sequence(left, Simple(token))


def _group(parser: Parser) -> Node:
    inner = parser.parse_expr(PrecedenceLevel.FIRST)
    parser.consume(RBRACKET)
    return Composite(marker(EBNFKind.GROUP), (inner,))


def _group_prefix(parser: Parser, token: Token, bp: PrecedenceLevel) -> Node:
    return _group(parser)


def _group_infix(parser: Parser, token: Token, bp: PrecedenceLevel, left: Node) -> Node:
    return _extend_sequence(left, _group(parser))


def build_spec() -> ParserSpec:
    spec = ParserSpec()
    spec.add_prefixes([EBNFKind.IDENT, EBNFKind.STRING], PrecedenceLevel.ROOT, _element)
    spec.add_prefix(EBNFKind.LBRACKET, PrecedenceLevel.ROOT, _group_prefix)

    spec.add_infix(EBNFKind.COLON, PrecedenceLevel.FIRST, _rule)
    spec.add_infix(EBNFKind.PIPE, PrecedenceLevel.SECOND, _alternative)
    spec.add_infixes([EBNFKind.STAR, EBNFKind.PLUS, EBNFKind.NUMBER],
                     PrecedenceLevel.FOURTH, _repeat)
    spec.add_infix(EBNFKind.QUESTION, PrecedenceLevel.FOURTH, _optional)
    spec.add_infixes([EBNFKind.IDENT, EBNFKind.STRING], PrecedenceLevel.THIRD, _juxtapose)
    spec.add_infix(EBNFKind.LBRACKET, PrecedenceLevel.THIRD, _group_infix)
    return spec


@cache
def rules() -> RuleTable:
    return build_spec().build()


def parse_program(parser: Parser) -> list[Node]:
    """Parse every ``;``-separated rule, raising the first failure."""
    nodes: list[Node] = []
    for outcome in parser.parse_sequence(PrecedenceLevel.ROOT, SEMICOLON):
        if isinstance(outcome, ParseError):
            raise outcome
        nodes.append(outcome)
    return nodes
