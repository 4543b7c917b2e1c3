"""A small regex scanner for the bundled example grammars."""

from __future__ import annotations

import re
from typing import Callable, Hashable, Iterator, Sequence, Union

from prattle.errors import Diagnostic, DiagnosticLabel, ParseError, Severity
from prattle.tokens import Token

KindSpec = Union[Hashable, Callable[[str], Hashable], None]


class UnexpectedCharacterError(ParseError):
    """The scanner met a character no token pattern accepts."""

    code = "P006"

    def __init__(self, char: str, offset: int) -> None:
        self.char = char
        self.offset = offset
        super().__init__(f"unexpected character {char!r} at offset {offset}")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, UnexpectedCharacterError):
            return NotImplemented
        return (self.char, self.offset) == (other.char, other.offset)

    def __hash__(self) -> int:
        return hash((UnexpectedCharacterError, self.char, self.offset))

    def diagnostic(self) -> Diagnostic:
        return Diagnostic(
            Severity.ERROR, self.code, str(self),
            labels=[DiagnosticLabel(self.offset, 1, "not part of any token")],
        )


class Scanner:
    """Turns text into ``Token``s using an ordered list of patterns.

    Each rule is ``(pattern, kind)``. ``kind`` is either the token kind, a
    callable mapping the matched text to a kind (keyword lookup), or None for
    text to skip. Earlier rules win.
    """

    def __init__(self, rules: Sequence[tuple[str, KindSpec]]) -> None:
        self._kinds: list[KindSpec] = []
        parts = []
        for i, (pattern, kind) in enumerate(rules):
            parts.append(f"(?P<r{i}>{pattern})")
            self._kinds.append(kind)
        self._regex = re.compile("|".join(parts))

    def scan(self, text: str) -> Iterator[Token]:
        pos = 0
        while pos < len(text):
            m = self._regex.match(text, pos)
            if m is None or m.end() == pos:
                raise UnexpectedCharacterError(text[pos], pos)
            kind = self._kinds[int(m.lastgroup[1:])]
            value = m.group()
            if kind is not None:
                if callable(kind) and not isinstance(kind, type):
                    kind = kind(value)
                yield Token(kind, value, pos)
            pos = m.end()
