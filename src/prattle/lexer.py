"""Token sources consumed by the parser.

The parser only needs to look at the next token and to move past it, so any
object with ``peek()`` and ``advance()`` will do. Two implementations are
provided: ``ListLexer`` over an in-memory list, and ``IteratorLexer`` which
adapts an arbitrary iterable (a generator-based scanner, for instance) with
a single token of lookahead.
"""

from __future__ import annotations

from typing import Any, Iterable, Iterator, Protocol, runtime_checkable

from prattle.errors import IncompleteError

_EMPTY = object()


@runtime_checkable
class Lexer(Protocol):
    def peek(self) -> Any | None:
        """Return the next token without consuming it, or None at the end."""
        ...

    def advance(self) -> Any:
        """Consume and return the next token."""
        ...


class ListLexer:
    """Lexer over a list of tokens with a cursor that only moves forward."""

    def __init__(self, tokens: Iterable[Any] = ()) -> None:
        self._tokens: list[Any] = list(tokens)
        self._index = 0

    def peek(self) -> Any | None:
        if self._index < len(self._tokens):
            return self._tokens[self._index]
        return None

    def advance(self) -> Any:
        if self._index >= len(self._tokens):
            raise IncompleteError()
        tok = self._tokens[self._index]
        self._index += 1
        return tok

    def extend(self, tokens: Iterable[Any]) -> None:
        self._tokens.extend(tokens)

    def remaining(self) -> list[Any]:
        return self._tokens[self._index:]

    def __len__(self) -> int:
        return len(self._tokens) - self._index

    def __repr__(self) -> str:
        return f"ListLexer(position={self._index}, remaining={len(self)})"


class IteratorLexer:
    """Lexer adapter for any iterable, buffering one token of lookahead."""

    def __init__(self, tokens: Iterable[Any]) -> None:
        self._it: Iterator[Any] = iter(tokens)
        self._buffered: Any = _EMPTY

    def _fill(self) -> None:
        if self._buffered is _EMPTY:
            self._buffered = next(self._it, _EMPTY)

    def peek(self) -> Any | None:
        self._fill()
        return None if self._buffered is _EMPTY else self._buffered

    def advance(self) -> Any:
        self._fill()
        if self._buffered is _EMPTY:
            raise IncompleteError()
        tok, self._buffered = self._buffered, _EMPTY
        return tok
