"""
Result types and the abstract interface of a CHC solving session.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Iterator, List

from ..smt.expression import Expression
from ..smt.sorts import Sort


class CheckResult(Enum):
    """Classification of a query."""
    SATISFIABLE = auto()    # Goal reachable
    UNSATISFIABLE = auto()  # Goal unreachable
    UNKNOWN = auto()        # Engine gave up (incompleteness, resource limit)
    ERROR = auto()          # Engine failed while evaluating the query

    def is_definitive(self) -> bool:
        return self in (CheckResult.SATISFIABLE, CheckResult.UNSATISFIABLE)


class SessionState(Enum):
    IDLE = auto()
    QUERYING = auto()


@dataclass(frozen=True)
class QueryResult:
    """
    Outcome of one query.

    Unpacks as the ``(result, counterexample)`` pair:

        result, cex = session.query(goal)

    ``counterexample`` is only ever non-empty for SATISFIABLE, and an empty
    one means "no witness available". ``message`` holds the engine's reason
    for UNKNOWN or the error text for ERROR.
    """
    result: CheckResult
    counterexample: List[str] = field(default_factory=list)
    message: str = ""

    def __iter__(self) -> Iterator:
        yield self.result
        yield self.counterexample


class CHCSolverInterface(ABC):
    """
    Operations a Horn-clause solving session offers to an analysis pass.

    A session accumulates declarations, relations and rules; every query is
    answered against everything asserted so far.
    """

    @abstractmethod
    def declare_variable(self, name: str, sort: Sort) -> None:
        ...

    @abstractmethod
    def register_relation(self, expr: Expression) -> None:
        ...

    @abstractmethod
    def add_rule(self, expr: Expression, name: str) -> None:
        ...

    @abstractmethod
    def query(self, expr: Expression) -> QueryResult:
        ...

    def new_variable(self, name: str, sort: Sort) -> Expression:
        """Declare ``name`` and return the expression referring to it."""
        self.declare_variable(name, sort)
        return Expression(name, (), sort)
