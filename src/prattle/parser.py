"""The precedence-climbing engine.

The algorithm, for a caller-supplied threshold ``rbp``::

    token = next token
    left  = prefix rule of token(parser, token, bp)
    while the next token's infix left power > rbp:
        token = next token
        left  = infix rule of token(parser, token, right power, left)
    return left

Rule handlers receive the parser itself and may call back into
``parse_expr``, ``consume``, ``parse_sequence`` or ``peek`` to read their operands.
They are typed against the ``Parser`` protocol rather than a concrete class,
so one ``RuleTable`` can drive several parser implementations.
"""

from __future__ import annotations

import logging
from typing import Any, Hashable, Protocol

from prattle.errors import (
    ConsumeFailedError,
    IncompleteError,
    MissingRuleError,
    NestingTooDeepError,
    ParseError,
    RuleRole,
)
from prattle.lexer import Lexer
from prattle.node import Node
from prattle.precedence import PrecedenceLevel
from prattle.spec import InfixRule, ParserSpec, RuleTable
from prattle.tokens import Classifier, token_kind

logger = logging.getLogger(__name__)


class Parser(Protocol):
    """The interface rule handlers program against."""

    def parse(self) -> Node: ...

    def peek(self) -> Any | None: ...

    def parse_expr(self, rbp: PrecedenceLevel) -> Node: ...

    def next_binds_tighter_than(self, rbp: PrecedenceLevel) -> bool: ...

    def consume(self, expected: Any) -> None: ...

    def parse_sequence(
        self,
        level: PrecedenceLevel,
        separator: Any | None = None,
        end: Any | None = None,
    ) -> list[Node | ParseError]: ...


class GeneralParser:
    """Parses tokens from ``lexer`` using the rules of a grammar.

    ``rules`` may be a ``ParserSpec`` (which is sealed by this call) or an
    already built ``RuleTable``. ``classify`` maps a token to the kind its
    rules are registered under; by default a token's ``kind`` attribute, or
    the token itself.
    """

    def __init__(
        self,
        rules: ParserSpec | RuleTable,
        lexer: Lexer,
        classify: Classifier = token_kind,
    ) -> None:
        self.rules = rules.build() if isinstance(rules, ParserSpec) else rules
        self.lexer = lexer
        self.classify = classify

    # ── Rule lookup ──────────────────────────────────────────────

    def _kind(self, token: Any) -> Hashable:
        kind = self.classify(token)
        logger.debug("%s => %s", token, kind)
        return kind

    def _infix_rule(self, token: Any) -> InfixRule | None:
        return self.rules.infix_rule(self.classify(token))

    # ── Public interface ─────────────────────────────────────────

    def parse(self) -> Node:
        return self.parse_expr(PrecedenceLevel.ROOT)

    def peek(self) -> Any | None:
        """The next token, left in place; None at the end of input."""
        return self.lexer.peek()

    def parse_expr(self, rbp: PrecedenceLevel) -> Node:
        """Parse the longest expression whose operators bind tighter than ``rbp``."""
        logger.debug("parse_expr(rbp: %s)", rbp)
        if self.lexer.peek() is None:
            raise IncompleteError()
        token = self.lexer.advance()
        rule = self.rules.prefix_rule(self._kind(token))
        if rule is None:
            raise MissingRuleError(token, RuleRole.PREFIX)
        left = rule.handler(self, token, rule.bp)
        logger.debug("left: %s", left)

        while self.next_binds_tighter_than(rbp):
            token = self.lexer.advance()
            infix = self._infix_rule(token)
            if infix is None:
                raise MissingRuleError(token, RuleRole.INFIX)
            left = infix.handler(self, token, infix.right_bp, left)
            logger.debug("left: %s", left)

        logger.debug("returning %s", left)
        return left

    def next_binds_tighter_than(self, rbp: PrecedenceLevel) -> bool:
        token = self.lexer.peek()
        if token is None:
            return False
        rule = self._infix_rule(token)
        return rule is not None and rule.left_bp > rbp

    def consume(self, expected: Any) -> None:
        token = self.lexer.peek()
        if token is None:
            raise IncompleteError()
        if token != expected:
            raise ConsumeFailedError(expected, token)
        self.lexer.advance()

    def parse_sequence(
        self,
        level: PrecedenceLevel,
        separator: Any | None = None,
        end: Any | None = None,
    ) -> list[Node | ParseError]:
        """Parse expressions at ``level`` until the input or the sequence ends.

        Every attempted element is reported in order: parsed nodes, and the
        error that stopped the sequence if it did not stop cleanly. Running
        out of tokens is a clean stop only when no ``end`` token is expected.
        """
        results: list[Node | ParseError] = []
        while True:
            if separator is None and end is not None and self._at(end):
                self.lexer.advance()
                return results
            try:
                node = self.parse_expr(level)
            except IncompleteError as e:
                if end is not None:
                    results.append(e)
                return results
            except ParseError as e:
                results.append(e)
                return results
            results.append(node)

            if separator is None:
                continue
            try:
                self.consume(separator)
            except ConsumeFailedError as e:
                if end is not None and e.found == end:
                    self.lexer.advance()
                else:
                    results.append(e)
                return results
            except IncompleteError as e:
                if end is not None:
                    results.append(e)
                return results

    def _at(self, token: Any) -> bool:
        nxt = self.lexer.peek()
        return nxt is not None and nxt == token


class DepthLimitedParser(GeneralParser):
    """A ``GeneralParser`` that refuses to nest deeper than ``max_depth``.

    Recursion depth follows the nesting of the input; this variant turns
    pathologically deep input into a ``NestingTooDeepError`` instead of
    exhausting the interpreter stack.
    """

    def __init__(
        self,
        rules: ParserSpec | RuleTable,
        lexer: Lexer,
        classify: Classifier = token_kind,
        *,
        max_depth: int = 200,
    ) -> None:
        super().__init__(rules, lexer, classify)
        self.max_depth = max_depth
        self.depth = 0

    def parse_expr(self, rbp: PrecedenceLevel) -> Node:
        if self.depth >= self.max_depth:
            raise NestingTooDeepError(self.max_depth)
        self.depth += 1
        try:
            return super().parse_expr(rbp)
        finally:
            self.depth -= 1
