"""A C-like grammar: expressions, declarations and a few statements.

Binding powers, loosest first:

    = *= /= %= += -= <<= >>= &= ^= |=   SECOND/FIRST (right-assoc)
    ?:                                   THIRD/SECOND (right-assoc)
    ||  &&  |  ^  &                      FOURTH .. EIGHTH
    == !=   < > <= >=   << >>            NINTH .. ELEVENTH
    + -   * / %                          TWELFTH, THIRTEENTH
    unary ++ -- sizeof & * + - ~ !       operand parsed at THIRTEENTH
    postfix ++ -- () [] . ->             HIGHEST

Declarations are built by juxtaposition: a specifier keyword after another
one extends a DECL_SPECS node, and an identifier after a type forms a
DECLARATION. ``struct``/``union``/``enum`` take an optional tag and an
optional body.

Statements (``goto``, ``continue``, ``break``, ``return``, ``case``,
``default``, ``if``, ``while`` and ``{ ... }`` blocks) consume their own
terminators. Expression statements end in ``;``.
"""

from __future__ import annotations

import re
from enum import Enum, auto
from functools import cache
from typing import Iterator

from prattle.errors import (
    ConsumeFailedError,
    IncompleteError,
    MalformedSyntaxError,
    ParseError,
)
from prattle.grammars.scanner import Scanner
from prattle.node import Composite, Node, Simple
from prattle.parser import Parser
from prattle.precedence import PrecedenceLevel
from prattle.spec import ParserSpec, RuleTable
from prattle.tokens import Token

P = PrecedenceLevel


class CKind(Enum):
    # Value-carrying terminals
    IDENT = auto()
    INT_CONST = auto()
    FLT_CONST = auto()
    CHR_CONST = auto()
    STRING = auto()

    # Tagged types
    STRUCT = auto()
    UNION = auto()
    ENUM = auto()

    # Type qualifiers
    CONST = auto()
    VOLATILE = auto()

    # Type specifiers
    VOID = auto()
    CHAR = auto()
    SHORT = auto()
    INT = auto()
    LONG = auto()
    FLOAT = auto()
    DOUBLE = auto()
    SIGNED = auto()
    UNSIGNED = auto()

    # Storage classes
    AUTO = auto()
    REGISTER = auto()
    STATIC = auto()
    EXTERN = auto()
    TYPEDEF = auto()

    # Operators
    INC = auto()
    DEC = auto()
    SIZEOF = auto()
    MUL = auto()
    DIV = auto()
    MOD = auto()
    ADD = auto()
    SUB = auto()
    SHL = auto()
    SHR = auto()
    LT = auto()
    GT = auto()
    LTE = auto()
    GTE = auto()
    EQS = auto()
    NEQS = auto()
    AND = auto()
    XOR = auto()
    INCL_OR = auto()
    LOG_AND = auto()
    LOG_OR = auto()
    QUESTION = auto()
    DOT = auto()
    DEREF = auto()
    BIT_NEG = auto()
    NOT = auto()

    # Assignment
    EQUAL = auto()
    MUL_EQ = auto()
    DIV_EQ = auto()
    MOD_EQ = auto()
    ADD_EQ = auto()
    SUB_EQ = auto()
    SHL_EQ = auto()
    SHR_EQ = auto()
    AND_EQ = auto()
    XOR_EQ = auto()
    OR_EQ = auto()

    # Groupings
    LPAREN = auto()
    RPAREN = auto()
    LBRACKET = auto()
    RBRACKET = auto()
    LBRACE = auto()
    RBRACE = auto()

    # Punctuation
    SEMICOLON = auto()
    COMMA = auto()
    COLON = auto()

    # Statements
    CASE = auto()
    DEFAULT = auto()
    IF = auto()
    ELSE = auto()
    WHILE = auto()
    GOTO = auto()
    CONTINUE = auto()
    BREAK = auto()
    RETURN = auto()

    # Parse-only markers
    DECL_SPECS = auto()
    DECLARATION = auto()
    TERNARY = auto()
    POSTFIX = auto()
    CALL = auto()
    INDEX = auto()
    BODY = auto()
    BLOCK = auto()


KEYWORDS: dict[str, CKind] = {
    "struct": CKind.STRUCT, "union": CKind.UNION, "enum": CKind.ENUM,
    "const": CKind.CONST, "volatile": CKind.VOLATILE,
    "void": CKind.VOID, "char": CKind.CHAR, "short": CKind.SHORT,
    "int": CKind.INT, "long": CKind.LONG, "float": CKind.FLOAT,
    "double": CKind.DOUBLE, "signed": CKind.SIGNED, "unsigned": CKind.UNSIGNED,
    "auto": CKind.AUTO, "register": CKind.REGISTER, "static": CKind.STATIC,
    "extern": CKind.EXTERN, "typedef": CKind.TYPEDEF,
    "sizeof": CKind.SIZEOF,
    "case": CKind.CASE, "default": CKind.DEFAULT,
    "if": CKind.IF, "else": CKind.ELSE, "while": CKind.WHILE,
    "goto": CKind.GOTO, "continue": CKind.CONTINUE,
    "break": CKind.BREAK, "return": CKind.RETURN,
}

OPERATORS: dict[str, CKind] = {
    "<<=": CKind.SHL_EQ, ">>=": CKind.SHR_EQ,
    "->": CKind.DEREF, "++": CKind.INC, "--": CKind.DEC,
    "<<": CKind.SHL, ">>": CKind.SHR, "<=": CKind.LTE, ">=": CKind.GTE,
    "==": CKind.EQS, "!=": CKind.NEQS, "&&": CKind.LOG_AND, "||": CKind.LOG_OR,
    "*=": CKind.MUL_EQ, "/=": CKind.DIV_EQ, "%=": CKind.MOD_EQ,
    "+=": CKind.ADD_EQ, "-=": CKind.SUB_EQ, "&=": CKind.AND_EQ,
    "^=": CKind.XOR_EQ, "|=": CKind.OR_EQ,
    "*": CKind.MUL, "/": CKind.DIV, "%": CKind.MOD, "+": CKind.ADD,
    "-": CKind.SUB, "<": CKind.LT, ">": CKind.GT, "&": CKind.AND,
    "^": CKind.XOR, "|": CKind.INCL_OR, "?": CKind.QUESTION,
    ".": CKind.DOT, "~": CKind.BIT_NEG, "!": CKind.NOT, "=": CKind.EQUAL,
    "(": CKind.LPAREN, ")": CKind.RPAREN, "[": CKind.LBRACKET,
    "]": CKind.RBRACKET, "{": CKind.LBRACE, "}": CKind.RBRACE,
    ";": CKind.SEMICOLON, ",": CKind.COMMA, ":": CKind.COLON,
}

_SCANNER = Scanner([
    (r"\s+", None),
    (r"//[^\n]*|/\*[\s\S]*?\*/", None),
    (r"[0-9]+\.[0-9]*(?:[eE][+-]?[0-9]+)?|\.[0-9]+(?:[eE][+-]?[0-9]+)?", CKind.FLT_CONST),
    (r"0[xX][0-9a-fA-F]+|[0-9]+", CKind.INT_CONST),
    (r"'(?:\\.|[^'\\])'", CKind.CHR_CONST),
    (r'"(?:\\.|[^"\\])*"', CKind.STRING),
    (r"[A-Za-z_][A-Za-z0-9_]*", lambda word: KEYWORDS.get(word, CKind.IDENT)),
    ("|".join(re.escape(op) for op in sorted(OPERATORS, key=len, reverse=True)),
     OPERATORS.__getitem__),
])

DECL_SPEC_KINDS = frozenset({
    CKind.AUTO, CKind.REGISTER, CKind.STATIC, CKind.EXTERN, CKind.TYPEDEF,
    CKind.VOID, CKind.CHAR, CKind.SHORT, CKind.INT, CKind.LONG,
    CKind.FLOAT, CKind.DOUBLE, CKind.SIGNED, CKind.UNSIGNED,
    CKind.CONST, CKind.VOLATILE,
})
TAGGED_KINDS = frozenset({CKind.STRUCT, CKind.UNION, CKind.ENUM})
STATEMENT_KINDS = frozenset({
    CKind.GOTO, CKind.CONTINUE, CKind.BREAK, CKind.RETURN,
    CKind.CASE, CKind.DEFAULT, CKind.IF, CKind.WHILE, CKind.LBRACE,
})
ASSIGN_KINDS = (
    CKind.EQUAL, CKind.MUL_EQ, CKind.DIV_EQ, CKind.MOD_EQ, CKind.ADD_EQ,
    CKind.SUB_EQ, CKind.SHL_EQ, CKind.SHR_EQ, CKind.AND_EQ, CKind.XOR_EQ,
    CKind.OR_EQ,
)


def tok(kind: CKind) -> Token:
    """The canonical token for a punctuation or keyword kind."""
    for text, k in OPERATORS.items():
        if k is kind:
            return Token(kind, text)
    for text, k in KEYWORDS.items():
        if k is kind:
            return Token(kind, text)
    return Token(kind, kind.name.lower())


SEMICOLON = tok(CKind.SEMICOLON)
COMMA = tok(CKind.COMMA)
COLON = tok(CKind.COLON)
LPAREN = tok(CKind.LPAREN)
RPAREN = tok(CKind.RPAREN)
RBRACKET = tok(CKind.RBRACKET)
LBRACE = tok(CKind.LBRACE)
RBRACE = tok(CKind.RBRACE)
ELSE = tok(CKind.ELSE)


def tokenize(text: str) -> Iterator[Token]:
    return _SCANNER.scan(text)


def _kind(node: Node) -> CKind:
    return node.token.kind


def _is_ident(node: Node) -> bool:
    return isinstance(node, Simple) and node.token.kind is CKind.IDENT


def _is_type(node: Node) -> bool:
    kind = _kind(node)
    if isinstance(node, Simple):
        return kind in DECL_SPEC_KINDS
    return kind is CKind.DECL_SPECS or kind in TAGGED_KINDS


def _collect(outcomes: list[Node | ParseError]) -> list[Node]:
    nodes = []
    for outcome in outcomes:
        if isinstance(outcome, ParseError):
            raise outcome
        nodes.append(outcome)
    return nodes


def _terminate(parser: Parser, node: Node) -> None:
    try:
        parser.consume(SEMICOLON)
    except ConsumeFailedError as e:
        raise MalformedSyntaxError(node, e.found) from e


# ── Expressions ──────────────────────────────────────────────────


def _leaf(parser: Parser, token: Token, bp: P) -> Node:
    return Simple(token)


def _binary(parser: Parser, token: Token, bp: P, left: Node) -> Node:
    return Composite(token, (left, parser.parse_expr(bp)))


def _mul_or_pointer(parser: Parser, token: Token, bp: P, left: Node) -> Node:
    # After a type, ``*`` starts a pointer declarator: int *p
    if _is_type(left):
        declarator = Composite(token, (parser.parse_expr(bp),))
        return Composite(tok(CKind.DECLARATION), (left, declarator))
    return _binary(parser, token, bp, left)


def _unary(parser: Parser, token: Token, bp: P) -> Node:
    return Composite(token, (parser.parse_expr(bp),))


def _parens(parser: Parser, token: Token, bp: P) -> Node:
    inner = parser.parse_expr(P.ROOT)
    parser.consume(RPAREN)
    return inner


def _ternary(parser: Parser, token: Token, bp: P, cond: Node) -> Node:
    then = parser.parse_expr(P.ROOT)
    try:
        parser.consume(COLON)
    except ConsumeFailedError as e:
        raise MalformedSyntaxError(then, e.found) from e
    otherwise = parser.parse_expr(bp)
    return Composite(tok(CKind.TERNARY), (cond, then, otherwise))


def _postfix(parser: Parser, token: Token, bp: P, left: Node) -> Node:
    return Composite(tok(CKind.POSTFIX), (left, Simple(token)))


def _call(parser: Parser, token: Token, bp: P, callee: Node) -> Node:
    try:
        parser.consume(RPAREN)
    except ConsumeFailedError:
        args = _collect(parser.parse_sequence(P.ROOT, COMMA, RPAREN))
        return Composite(tok(CKind.CALL), (callee, *args))
    return Composite(tok(CKind.CALL), (callee,))


def _index(parser: Parser, token: Token, bp: P, left: Node) -> Node:
    index = parser.parse_expr(P.ROOT)
    parser.consume(RBRACKET)
    return Composite(tok(CKind.INDEX), (left, index))


def _member(parser: Parser, token: Token, bp: P, left: Node) -> Node:
    member = parser.parse_expr(P.HIGHEST)
    if not _is_ident(member):
        raise MalformedSyntaxError(member, token)
    return Composite(token, (left, member))


# ── Declarations ─────────────────────────────────────────────────


def _extend_specs(left: Node, token: Token, spec: Node) -> Node:
    if _kind(left) is CKind.DECL_SPECS:
        return left.with_child(spec)
    if _is_type(left):
        return Composite(tok(CKind.DECL_SPECS), (left, spec))
    raise MalformedSyntaxError(left, token)


def _decl_spec(parser: Parser, token: Token, bp: P, left: Node) -> Node:
    return _extend_specs(left, token, Simple(token))


def _declarator(parser: Parser, token: Token, bp: P, left: Node) -> Node:
    if not _is_type(left):
        raise MalformedSyntaxError(left, token)
    return Composite(tok(CKind.DECLARATION), (left, Simple(token)))


def _record_body(parser: Parser) -> Node:
    fields = []
    while True:
        try:
            parser.consume(RBRACE)
        except ConsumeFailedError:
            field = parser.parse_expr(P.ROOT)
            _terminate(parser, field)
            fields.append(field)
        else:
            return Composite(tok(CKind.BODY), tuple(fields))


def _enum_body(parser: Parser, token: Token) -> Node:
    """Enumerators up to ``}``; a trailing comma is allowed."""
    items = []
    while True:
        try:
            parser.consume(RBRACE)
        except ConsumeFailedError:
            items.append(parser.parse_expr(P.ROOT))
        else:
            break
        try:
            parser.consume(COMMA)
        except ConsumeFailedError:
            parser.consume(RBRACE)
            break
    for item in items:
        named = item.children[0] if _kind(item) is CKind.EQUAL else item
        if not _is_ident(named):
            raise MalformedSyntaxError(item, token)
    return Composite(tok(CKind.BODY), tuple(items))


def _tagged(parser: Parser, token: Token, bp: P) -> Node:
    """struct/union/enum [tag] [{ body }]"""
    try:
        parser.consume(LBRACE)
    except ConsumeFailedError:
        tag = parser.parse_expr(P.HIGHEST)
        if not _is_ident(tag):
            raise MalformedSyntaxError(tag, token)
        try:
            parser.consume(LBRACE)
        except (ConsumeFailedError, IncompleteError):
            return Composite(token, (tag,))
        children: tuple[Node, ...] = (tag,)
    else:
        children = ()
    if token.kind is CKind.ENUM:
        body = _enum_body(parser, token)
    else:
        body = _record_body(parser)
    return Composite(token, (*children, body))


def _tagged_spec(parser: Parser, token: Token, bp: P, left: Node) -> Node:
    return _extend_specs(left, token, _tagged(parser, token, bp))


# ── Statements ───────────────────────────────────────────────────


def statement(parser: Parser, *, require_semicolon: bool = True) -> Node:
    """Parse one statement.

    Statement keywords are parsed at HIGHEST so that no operator can treat
    the finished statement as its left operand.
    """
    nxt = parser.peek()
    if nxt is not None and nxt.kind in STATEMENT_KINDS:
        return parser.parse_expr(P.HIGHEST)
    node = parser.parse_expr(P.ROOT)
    if require_semicolon or parser.peek() is not None:
        _terminate(parser, node)
    return node


def _goto(parser: Parser, token: Token, bp: P) -> Node:
    label = parser.parse_expr(P.HIGHEST)
    if not _is_ident(label):
        raise MalformedSyntaxError(Simple(token), label.token)
    node = Composite(token, (label,))
    _terminate(parser, node)
    return node


def _jump(parser: Parser, token: Token, bp: P) -> Node:
    node = Composite(token, ())
    _terminate(parser, node)
    return node


def _return(parser: Parser, token: Token, bp: P) -> Node:
    try:
        parser.consume(SEMICOLON)
    except ConsumeFailedError:
        node = Composite(token, (parser.parse_expr(P.ROOT),))
        _terminate(parser, node)
        return node
    return Composite(token, ())


def _expect_colon(parser: Parser, node: Node) -> None:
    try:
        parser.consume(COLON)
    except ConsumeFailedError as e:
        raise MalformedSyntaxError(node, e.found) from e


def _default(parser: Parser, token: Token, bp: P) -> Node:
    _expect_colon(parser, Simple(token))
    return Composite(token, (statement(parser),))


def _case(parser: Parser, token: Token, bp: P) -> Node:
    value = parser.parse_expr(P.ROOT)
    _expect_colon(parser, Composite(token, (value,)))
    return Composite(token, (value, statement(parser)))


def _condition(parser: Parser) -> Node:
    parser.consume(LPAREN)
    cond = parser.parse_expr(P.ROOT)
    parser.consume(RPAREN)
    return cond


def _if(parser: Parser, token: Token, bp: P) -> Node:
    cond = _condition(parser)
    then = statement(parser)
    try:
        parser.consume(ELSE)
    except (ConsumeFailedError, IncompleteError):
        return Composite(token, (cond, then))
    return Composite(token, (cond, then, statement(parser)))


def _while(parser: Parser, token: Token, bp: P) -> Node:
    cond = _condition(parser)
    return Composite(token, (cond, statement(parser)))


def _block(parser: Parser, token: Token, bp: P) -> Node:
    body = []
    while True:
        try:
            parser.consume(RBRACE)
        except ConsumeFailedError:
            body.append(statement(parser))
        else:
            return Composite(tok(CKind.BLOCK), tuple(body))


# ── Specification ────────────────────────────────────────────────


def build_spec() -> ParserSpec:
    spec = ParserSpec()

    spec.add_prefixes(
        [CKind.IDENT, CKind.INT_CONST, CKind.CHR_CONST, CKind.FLT_CONST, CKind.STRING],
        P.ROOT, _leaf,
    )
    spec.add_prefixes(sorted(DECL_SPEC_KINDS, key=lambda k: k.value), P.ROOT, _leaf)
    spec.add_prefixes([CKind.STRUCT, CKind.UNION, CKind.ENUM], P.ROOT, _tagged)
    spec.add_prefixes(
        [CKind.INC, CKind.DEC, CKind.SIZEOF, CKind.AND, CKind.MUL,
         CKind.ADD, CKind.SUB, CKind.BIT_NEG, CKind.NOT],
        P.THIRTEENTH, _unary,
    )
    spec.add_prefix(CKind.LPAREN, P.ROOT, _parens)

    # Declarations
    spec.add_infixes(sorted(DECL_SPEC_KINDS, key=lambda k: k.value), P.HIGHEST, _decl_spec)
    spec.add_infixes([CKind.STRUCT, CKind.UNION, CKind.ENUM], P.HIGHEST, _tagged_spec)
    spec.add_infix(CKind.IDENT, P.HIGHEST, _declarator)

    # Binary operators
    spec.add_infixes_asym(ASSIGN_KINDS, P.SECOND, P.FIRST, _binary)
    spec.add_infix_asym(CKind.QUESTION, P.THIRD, P.SECOND, _ternary)
    spec.add_infix(CKind.LOG_OR, P.FOURTH, _binary)
    spec.add_infix(CKind.LOG_AND, P.FIFTH, _binary)
    spec.add_infix(CKind.INCL_OR, P.SIXTH, _binary)
    spec.add_infix(CKind.XOR, P.SEVENTH, _binary)
    spec.add_infix(CKind.AND, P.EIGHTH, _binary)
    spec.add_infixes([CKind.EQS, CKind.NEQS], P.NINTH, _binary)
    spec.add_infixes([CKind.LT, CKind.GT, CKind.LTE, CKind.GTE], P.TENTH, _binary)
    spec.add_infixes([CKind.SHL, CKind.SHR], P.ELEVENTH, _binary)
    spec.add_infixes([CKind.ADD, CKind.SUB], P.TWELFTH, _binary)
    spec.add_infixes([CKind.DIV, CKind.MOD], P.THIRTEENTH, _binary)
    spec.add_infix(CKind.MUL, P.THIRTEENTH, _mul_or_pointer)

    # Postfix operators
    spec.add_infixes([CKind.INC, CKind.DEC], P.HIGHEST, _postfix)
    spec.add_infix(CKind.LPAREN, P.HIGHEST, _call)
    spec.add_infix(CKind.LBRACKET, P.HIGHEST, _index)
    spec.add_infixes([CKind.DOT, CKind.DEREF], P.HIGHEST, _member)

    # Statements
    spec.add_prefix(CKind.GOTO, P.ROOT, _goto)
    spec.add_prefixes([CKind.CONTINUE, CKind.BREAK], P.ROOT, _jump)
    spec.add_prefix(CKind.RETURN, P.ROOT, _return)
    spec.add_prefix(CKind.DEFAULT, P.ROOT, _default)
    spec.add_prefix(CKind.CASE, P.ROOT, _case)
    spec.add_prefix(CKind.IF, P.ROOT, _if)
    spec.add_prefix(CKind.WHILE, P.ROOT, _while)
    spec.add_prefix(CKind.LBRACE, P.ROOT, _block)
    return spec


@cache
def rules() -> RuleTable:
    return build_spec().build()


def parse_program(parser: Parser) -> list[Node]:
    """Parse statements until the input ends; the last ``;`` is optional."""
    nodes = []
    while parser.peek() is not None:
        nodes.append(statement(parser, require_semicolon=False))
    return nodes
