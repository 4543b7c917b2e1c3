"""Ready-made grammars built on the engine, used by the command line."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterable

from prattle.grammars import arithmetic, cdecl, ebnf
from prattle.lexer import IteratorLexer
from prattle.node import Node
from prattle.parser import DepthLimitedParser, GeneralParser, Parser
from prattle.spec import RuleTable
from prattle.tokens import Classifier, classify_text, token_kind


@dataclass(frozen=True)
class Grammar:
    """A named grammar: how to tokenize text and what a program is."""

    name: str
    description: str
    tokenize: Callable[[str], Iterable[Any]]
    rules: Callable[[], RuleTable]
    parse_program: Callable[[Parser], list[Node]]
    classify: Classifier = token_kind

    def parser(self, text: str, max_depth: int | None = None) -> GeneralParser:
        lexer = IteratorLexer(self.tokenize(text))
        if max_depth is None:
            return GeneralParser(self.rules(), lexer, self.classify)
        return DepthLimitedParser(self.rules(), lexer, self.classify, max_depth=max_depth)

    def parse(self, text: str, max_depth: int | None = None) -> list[Node]:
        """Parse ``text`` into its top-level nodes, raising the first error."""
        return self.parse_program(self.parser(text, max_depth))


GRAMMARS: dict[str, Grammar] = {
    "arithmetic": Grammar(
        "arithmetic",
        "integer arithmetic with + - * / % ^ and parentheses",
        arithmetic.tokenize,
        arithmetic.rules,
        arithmetic.parse_program,
        classify_text,
    ),
    "ebnf": Grammar(
        "ebnf",
        "EBNF rule definitions terminated by ';'",
        ebnf.tokenize,
        ebnf.rules,
        ebnf.parse_program,
    ),
    "cdecl": Grammar(
        "cdecl",
        "C expressions, declarations and simple statements",
        cdecl.tokenize,
        cdecl.rules,
        cdecl.parse_program,
    ),
}


def get_grammar(name: str) -> Grammar:
    try:
        return GRAMMARS[name]
    except KeyError:
        raise KeyError(f"unknown grammar {name!r}; choose from {', '.join(GRAMMARS)}") from None
