"""Parse errors and colored diagnostic rendering."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Hashable

if TYPE_CHECKING:
    from prattle.node import Node


class Severity(Enum):
    ERROR = "error"
    WARNING = "warning"
    NOTE = "note"


class RuleRole(Enum):
    """Which dispatch table a rule lives in."""

    PREFIX = "prefix"
    INFIX = "infix"


# ANSI color codes
_COLORS = {
    Severity.ERROR: "\033[1;31m",    # bold red
    Severity.WARNING: "\033[1;33m",  # bold yellow
    Severity.NOTE: "\033[1;36m",     # bold cyan
}
_BOLD = "\033[1m"
_BLUE = "\033[1;34m"
_RESET = "\033[0m"


@dataclass(frozen=True)
class DiagnosticLabel:
    """Points at a column range of the parsed input."""

    offset: int
    width: int = 1
    message: str = ""


@dataclass
class Diagnostic:
    """A single diagnostic message with an optional label and notes."""

    severity: Severity
    code: str
    message: str
    labels: list[DiagnosticLabel] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)


class DiagnosticRenderer:
    """Renders diagnostics in Rust-style format with colors."""

    def __init__(self, *, color: bool = True) -> None:
        self.color = color

    def _c(self, code: str) -> str:
        return code if self.color else ""

    def render(self, diag: Diagnostic, source: str | None = None) -> str:
        lines: list[str] = []
        color = _COLORS[diag.severity]

        # Header: error[P002]: message
        lines.append(
            f"{self._c(color)}{diag.severity.value}[{diag.code}]{self._c(_RESET)}"
            f"{self._c(_BOLD)}: {diag.message}{self._c(_RESET)}"
        )

        for label in diag.labels:
            line_no, col, text = _locate(source, label.offset)
            lines.append(f"  {self._c(_BLUE)}-->{self._c(_RESET)} input:{line_no}:{col}")
            lines.append(f"  {self._c(_BLUE)}   |{self._c(_RESET)}")
            if text is None:
                continue
            gutter = f"{line_no:>4}"
            lines.append(f"  {self._c(_BLUE)}{gutter} |{self._c(_RESET)} {text}")
            padding = " " * (col - 1)
            carets = "^" * max(1, label.width)
            lines.append(
                f"  {self._c(_BLUE)}   |{self._c(_RESET)} "
                f"{padding}{self._c(color)}{carets}{self._c(_RESET)}"
            )
            if label.message:
                lines.append(
                    f"  {self._c(_BLUE)}   |{self._c(_RESET)}   "
                    f"{self._c(color)}{label.message}{self._c(_RESET)}"
                )

        for note in diag.notes:
            lines.append(f"  {self._c(_BLUE)}={self._c(_RESET)} note: {note}")

        return "\n".join(lines)


def _locate(source: str | None, offset: int) -> tuple[int, int, str | None]:
    """Map a character offset to (1-indexed line, 1-indexed column, line text)."""
    if source is None:
        return 1, offset + 1, None
    offset = max(0, min(offset, len(source)))
    line_no = source.count("\n", 0, offset) + 1
    line_start = source.rfind("\n", 0, offset) + 1
    line_end = source.find("\n", offset)
    if line_end == -1:
        line_end = len(source)
    return line_no, offset - line_start + 1, source[line_start:line_end]


def _label_for(token: Any, message: str = "") -> list[DiagnosticLabel]:
    offset = getattr(token, "offset", None)
    if offset is None:
        return []
    width = len(str(getattr(token, "value", "") or "")) or 1
    return [DiagnosticLabel(offset, width, message)]


# ── Parse errors ────────────────────────────────────────────────


class ParseError(Exception):
    """Base class for every failure raised by the engine or by rules."""

    code = "P000"

    def diagnostic(self) -> Diagnostic:
        return Diagnostic(Severity.ERROR, self.code, str(self))


class IncompleteError(ParseError):
    """The token stream ended while a parsing context still needed a token."""

    code = "P001"

    def __init__(self) -> None:
        super().__init__("token iteration ended before parsing context finished")

    def __eq__(self, other: object) -> bool:
        return isinstance(other, IncompleteError)

    def __hash__(self) -> int:
        return hash(IncompleteError)


class MissingRuleError(ParseError):
    """No rule is registered for the token's kind in the given table."""

    code = "P002"

    def __init__(self, token: Any, role: RuleRole) -> None:
        self.token = token
        self.role = role
        super().__init__(f"missing a {role.value} syntax rule for: {token}")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MissingRuleError):
            return NotImplemented
        return (self.token, self.role) == (other.token, other.role)

    def __hash__(self) -> int:
        return hash((MissingRuleError, self.token, self.role))

    def diagnostic(self) -> Diagnostic:
        return Diagnostic(
            Severity.ERROR, self.code, str(self),
            labels=_label_for(self.token, f"no {self.role.value} rule"),
            notes=[
                f"`{self.token}` cannot be used in {self.role.value} position",
            ],
        )


class ConsumeFailedError(ParseError):
    """An explicit consume() found a different token than required."""

    code = "P003"

    def __init__(self, expected: Any, found: Any) -> None:
        self.expected = expected
        self.found = found
        super().__init__(
            f"consume(expected: {expected}) didn't find expected token, "
            f"instead found: {found}"
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ConsumeFailedError):
            return NotImplemented
        return (self.expected, self.found) == (other.expected, other.found)

    def __hash__(self) -> int:
        return hash((ConsumeFailedError, self.expected, self.found))

    def diagnostic(self) -> Diagnostic:
        return Diagnostic(
            Severity.ERROR, self.code, str(self),
            labels=_label_for(self.found, f"expected `{self.expected}`"),
        )


class MalformedSyntaxError(ParseError):
    """Raised by rule handlers when a construct is semantically malformed."""

    code = "P004"

    def __init__(self, node: Node, token: Any) -> None:
        self.node = node
        self.token = token
        super().__init__(f"incorrect syntax at {token}, failed on node: {node}")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MalformedSyntaxError):
            return NotImplemented
        return (self.node, self.token) == (other.node, other.token)

    def __hash__(self) -> int:
        return hash((MalformedSyntaxError, self.node, self.token))

    def diagnostic(self) -> Diagnostic:
        return Diagnostic(
            Severity.ERROR, self.code, str(self),
            labels=_label_for(self.token),
            notes=[f"while building: {self.node}"],
        )


class NestingTooDeepError(ParseError):
    """A depth-limited parser exceeded its nesting budget."""

    code = "P005"

    def __init__(self, depth: int) -> None:
        self.depth = depth
        super().__init__(f"expression nesting exceeds the limit of {depth}")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NestingTooDeepError):
            return NotImplemented
        return self.depth == other.depth

    def __hash__(self) -> int:
        return hash((NestingTooDeepError, self.depth))


# ── Specification errors ────────────────────────────────────────


class SpecificationError(Exception):
    """A grammar specification could not be built."""

    code = "S002"

    def diagnostic(self) -> Diagnostic:
        return Diagnostic(Severity.ERROR, self.code, str(self))


class DuplicateRuleError(SpecificationError):
    """A second rule was registered for a kind already present in a table."""

    code = "S001"

    def __init__(self, kind: Hashable, role: RuleRole) -> None:
        self.kind = kind
        self.role = role
        super().__init__(f"a {role.value} rule is already registered for: {kind}")
