"""Grammar specification: which rule runs for which token kind.

A ``ParserSpec`` collects two write-once tables while a grammar is being
described:

* the prefix table, ``kind -> PrefixRule(bp, handler)``, consulted when a
  token starts an expression;
* the infix table, ``kind -> InfixRule(left_bp, right_bp, handler)``,
  consulted when a token continues one.

Handlers are plain callables::

    prefix(parser, token, bp) -> Node
    infix(parser, token, bp, left) -> Node

``left_bp`` decides whether an operator may take the expression built so far
as its left operand (it must be strictly greater than the caller's
threshold); ``right_bp`` is handed to the infix handler for the recursive
call that parses the right operand. Equal powers give a left-associative
operator, a right power below the left one gives a right-associative one.

Registering a second rule for the same kind in the same table raises
``DuplicateRuleError`` and keeps the first rule. ``build()`` seals the spec
and returns an immutable ``RuleTable`` for parsers to share.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Callable, Hashable, Iterable, Mapping

from prattle.errors import DuplicateRuleError, RuleRole, SpecificationError
from prattle.precedence import PrecedenceLevel

if TYPE_CHECKING:
    from prattle.node import Node
    from prattle.parser import Parser

PrefixHandler = Callable[["Parser", Any, PrecedenceLevel], "Node"]
InfixHandler = Callable[["Parser", Any, PrecedenceLevel, "Node"], "Node"]


@dataclass(frozen=True)
class PrefixRule:
    bp: PrecedenceLevel
    handler: PrefixHandler


@dataclass(frozen=True)
class InfixRule:
    left_bp: PrecedenceLevel
    right_bp: PrecedenceLevel
    handler: InfixHandler


@dataclass(frozen=True, eq=False)
class RuleTable:
    """Read-only dispatch tables produced by ``ParserSpec.build()``."""

    prefix: Mapping[Hashable, PrefixRule]
    infix: Mapping[Hashable, InfixRule]

    def prefix_rule(self, kind: Hashable) -> PrefixRule | None:
        return self.prefix.get(kind)

    def infix_rule(self, kind: Hashable) -> InfixRule | None:
        return self.infix.get(kind)


class ParserSpec:
    """Mutable builder for a ``RuleTable``."""

    def __init__(self) -> None:
        self._prefix: dict[Hashable, PrefixRule] = {}
        self._infix: dict[Hashable, InfixRule] = {}
        self._table: RuleTable | None = None

    # ── Registration ─────────────────────────────────────────────

    def _check_open(self) -> None:
        if self._table is not None:
            raise SpecificationError(
                "specification was already handed to a parser and can no longer change"
            )

    def add_prefix(self, kind: Hashable, bp: PrecedenceLevel,
                   handler: PrefixHandler) -> None:
        self._check_open()
        if kind in self._prefix:
            raise DuplicateRuleError(kind, RuleRole.PREFIX)
        self._prefix[kind] = PrefixRule(bp, handler)

    def add_infix(self, kind: Hashable, bp: PrecedenceLevel,
                  handler: InfixHandler) -> None:
        self.add_infix_asym(kind, bp, bp, handler)

    def add_infix_asym(self, kind: Hashable, left_bp: PrecedenceLevel,
                       right_bp: PrecedenceLevel, handler: InfixHandler) -> None:
        self._check_open()
        if kind in self._infix:
            raise DuplicateRuleError(kind, RuleRole.INFIX)
        self._infix[kind] = InfixRule(left_bp, right_bp, handler)

    def add_prefixes(self, kinds: Iterable[Hashable], bp: PrecedenceLevel,
                     handler: PrefixHandler) -> None:
        for kind in kinds:
            self.add_prefix(kind, bp, handler)

    def add_infixes(self, kinds: Iterable[Hashable], bp: PrecedenceLevel,
                    handler: InfixHandler) -> None:
        for kind in kinds:
            self.add_infix(kind, bp, handler)

    def add_infixes_asym(self, kinds: Iterable[Hashable], left_bp: PrecedenceLevel,
                         right_bp: PrecedenceLevel, handler: InfixHandler) -> None:
        for kind in kinds:
            self.add_infix_asym(kind, left_bp, right_bp, handler)

    # ── Decorator forms ──────────────────────────────────────────

    def prefix(self, *kinds: Hashable,
               bp: PrecedenceLevel = PrecedenceLevel.ROOT) -> Callable[[PrefixHandler], PrefixHandler]:
        """Register the decorated function as the prefix rule for ``kinds``."""
        def decorator(fn: PrefixHandler) -> PrefixHandler:
            self.add_prefixes(kinds, bp, fn)
            return fn
        return decorator

    def infix(self, *kinds: Hashable,
              bp: PrecedenceLevel) -> Callable[[InfixHandler], InfixHandler]:
        """Register the decorated function as a left-associative infix rule."""
        def decorator(fn: InfixHandler) -> InfixHandler:
            self.add_infixes(kinds, bp, fn)
            return fn
        return decorator

    def infix_asym(self, *kinds: Hashable, left_bp: PrecedenceLevel,
                   right_bp: PrecedenceLevel) -> Callable[[InfixHandler], InfixHandler]:
        def decorator(fn: InfixHandler) -> InfixHandler:
            self.add_infixes_asym(kinds, left_bp, right_bp, fn)
            return fn
        return decorator

    # ── Introspection ────────────────────────────────────────────

    def prefix_rule(self, kind: Hashable) -> PrefixRule | None:
        return self._prefix.get(kind)

    def infix_rule(self, kind: Hashable) -> InfixRule | None:
        return self._infix.get(kind)

    @property
    def prefix_kinds(self) -> frozenset[Hashable]:
        return frozenset(self._prefix)

    @property
    def infix_kinds(self) -> frozenset[Hashable]:
        return frozenset(self._infix)

    @property
    def sealed(self) -> bool:
        return self._table is not None

    def __contains__(self, kind: Hashable) -> bool:
        return kind in self._prefix or kind in self._infix

    # ── Hand-off ─────────────────────────────────────────────────

    def build(self) -> RuleTable:
        """Seal the spec and return its read-only tables.

        The tables are moved, not copied; calling ``build()`` again returns
        the same ``RuleTable``.
        """
        if self._table is None:
            self._table = RuleTable(
                MappingProxyType(self._prefix), MappingProxyType(self._infix),
            )
        return self._table
