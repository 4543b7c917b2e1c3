"""Parse tree nodes.

A tree is either a ``Simple`` leaf wrapping one token, or a ``Composite``
with a root token (an operator, a keyword, a synthetic marker) and zero or
more children. Children are stored as a tuple, so a tree can only be
assembled bottom-up from nodes that already exist.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator, Union


@dataclass(frozen=True)
class Simple:
    token: Any

    def __str__(self) -> str:
        return f"Simple({self.token})"

    def pretty(self, depth: int = 0) -> str:
        return f"{'  ' * depth}{self.token}"

    def walk(self) -> Iterator[Node]:
        yield self


@dataclass(frozen=True)
class Composite:
    token: Any
    children: tuple[Node, ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.children, tuple):
            object.__setattr__(self, "children", tuple(self.children))

    def __str__(self) -> str:
        inner = ", ".join(str(c) for c in self.children)
        return f"Composite(token: {self.token}, children: [{inner}])"

    def with_child(self, child: Node) -> Composite:
        """Return a copy with ``child`` appended."""
        return Composite(self.token, self.children + (child,))

    def pretty(self, depth: int = 0) -> str:
        lines = [f"{'  ' * depth}{self.token}"]
        lines.extend(c.pretty(depth + 1) for c in self.children)
        return "\n".join(lines)

    def walk(self) -> Iterator[Node]:
        yield self
        for child in self.children:
            yield from child.walk()


Node = Union[Simple, Composite]
