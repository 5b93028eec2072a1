"""
Sorts of the expression model.

Sorts are immutable and compared structurally, so the same sort can be
shared between the caller's expressions and the translator's registry.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Tuple


class SortKind(Enum):
    INT = auto()
    BOOL = auto()
    ARRAY = auto()
    FUNCTION = auto()


@dataclass(frozen=True)
class Sort:
    kind: SortKind

    def __str__(self) -> str:
        return self.kind.name.capitalize()


@dataclass(frozen=True)
class ArraySort(Sort):
    """Array from ``domain`` to ``range``."""
    kind: SortKind = field(default=SortKind.ARRAY, init=False)
    domain: Sort = None
    range: Sort = None

    def __str__(self) -> str:
        return f"Array({self.domain}, {self.range})"


@dataclass(frozen=True)
class FunctionSort(Sort):
    """
    Function from ``domain`` to ``codomain``.

    Relations are functions whose codomain is BOOL.
    """
    kind: SortKind = field(default=SortKind.FUNCTION, init=False)
    domain: Tuple[Sort, ...] = ()
    codomain: Sort = None

    def __post_init__(self):
        # Accept any iterable for the domain but keep the dataclass hashable
        object.__setattr__(self, "domain", tuple(self.domain))

    def __str__(self) -> str:
        args = ", ".join(str(s) for s in self.domain)
        return f"({args}) -> {self.codomain}"


INT = Sort(SortKind.INT)
BOOL = Sort(SortKind.BOOL)
