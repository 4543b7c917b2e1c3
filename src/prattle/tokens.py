"""Token representation and the kind projections used for rule dispatch."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from functools import total_ordering
from typing import Any, Callable, Hashable

Classifier = Callable[[Any], Hashable]


def _kind_key(kind: Hashable) -> str:
    if isinstance(kind, Enum):
        return f"{type(kind).__name__}.{kind.name}"
    return str(kind)


@total_ordering
@dataclass(frozen=True)
class Token:
    """A lexical unit: a dispatch kind plus an optional text payload.

    Two tokens are equal when both kind and value match; the source offset
    is carried for diagnostics only.
    """

    kind: Hashable
    value: str = ""
    offset: int | None = field(default=None, compare=False)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Token):
            return NotImplemented
        return (_kind_key(self.kind), self.value) < (_kind_key(other.kind), other.value)

    def __str__(self) -> str:
        name = self.kind.name if isinstance(self.kind, Enum) else str(self.kind)
        if self.value and self.value != name:
            return f"({name}: {self.value})"
        return name


def token_kind(token: Any) -> Hashable:
    """Default projection: the token's ``kind`` attribute, else the token itself."""
    return getattr(token, "kind", token)


def classify_text(text: str) -> str:
    """Classify a raw string token into ``"number"``, ``"ident"`` or itself."""
    is_ident = False
    for ch in text:
        if ch.isascii() and ch.isdigit():
            continue
        if ch.isascii() and ch.isalpha():
            is_ident = True
            continue
        return text
    return "ident" if is_ident else "number"
