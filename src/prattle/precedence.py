"""Binding-power ranks.

Each rule carries a rank; an operator only continues the expression being
built when its rank is strictly higher than the caller's threshold. With
``*`` ranked above ``+``, ``a + b * c`` groups as ``a + (b * c)``.
"""

from __future__ import annotations

from enum import IntEnum


class PrecedenceLevel(IntEnum):
    ROOT = 0
    FIRST = 5
    SECOND = 10
    THIRD = 15
    FOURTH = 20
    FIFTH = 25
    SIXTH = 30
    SEVENTH = 35
    EIGHTH = 40
    NINTH = 45
    TENTH = 50
    ELEVENTH = 55
    TWELFTH = 60
    THIRTEENTH = 65
    HIGHEST = 100

    def __str__(self) -> str:
        return f"(Precedence: {self.value})"
