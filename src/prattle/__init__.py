"""A configurable, general-purpose Pratt parser.

A Pratt (top-down operator precedence) parser associates parsing rules with
tokens rather than with grammar productions. For ``a + b * c`` three rules
and two binding powers suffice: identifiers are leaves, ``+`` combines its
left operand with an expression parsed at its own power, and ``*`` does the
same at a higher power, so ``b * c`` groups first.

Example::

    from prattle import Composite, GeneralParser, ListLexer, ParserSpec, PrecedenceLevel, Simple

    spec = ParserSpec()
    spec.add_prefixes(["a", "b", "c"], PrecedenceLevel.ROOT,
                      lambda parser, token, bp: Simple(token))

    def binary(parser, token, bp, left):
        return Composite(token, (left, parser.parse_expr(bp)))

    spec.add_infix("+", PrecedenceLevel.FIRST, binary)
    spec.add_infix("*", PrecedenceLevel.SECOND, binary)

    parser = GeneralParser(spec, ListLexer(["a", "+", "b", "*", "c"]))
    parser.parse()  # Composite('+', (Simple('a'), Composite('*', ...)))

Reference: Vaughan R. Pratt. 1973. Top down operator precedence. POPL '73.
"""

from prattle.errors import (
    ConsumeFailedError,
    DuplicateRuleError,
    IncompleteError,
    MalformedSyntaxError,
    MissingRuleError,
    NestingTooDeepError,
    ParseError,
    RuleRole,
    SpecificationError,
)
from prattle.lexer import IteratorLexer, Lexer, ListLexer
from prattle.node import Composite, Node, Simple
from prattle.parser import DepthLimitedParser, GeneralParser, Parser
from prattle.precedence import PrecedenceLevel
from prattle.spec import InfixRule, ParserSpec, PrefixRule, RuleTable
from prattle.tokens import Token, classify_text, token_kind

__version__ = "0.3.0"

__all__ = [
    "Composite",
    "ConsumeFailedError",
    "DepthLimitedParser",
    "DuplicateRuleError",
    "GeneralParser",
    "IncompleteError",
    "InfixRule",
    "IteratorLexer",
    "Lexer",
    "ListLexer",
    "MalformedSyntaxError",
    "MissingRuleError",
    "NestingTooDeepError",
    "Node",
    "ParseError",
    "Parser",
    "ParserSpec",
    "PrecedenceLevel",
    "PrefixRule",
    "RuleRole",
    "RuleTable",
    "Simple",
    "SpecificationError",
    "Token",
    "classify_text",
    "token_kind",
]
