"""
Expressions of the solver-independent expression model.

An expression is a name, an argument list and a sort. Operators are encoded
by name ("and", "=>", "<=", "select", ...) and leaves are either declared
symbols or literals ("true", "false", decimal integers). Python operators are
overloaded the way z3 overloads them, so verification conditions read
naturally:

    x = Expression("x", sort=INT)
    inv = Expression("inv", sort=FunctionSort((INT,), BOOL))
    rule = Expression.implies((x >= 0) & inv(x), inv(x + 1))

``==`` and ``!=`` build expressions and do not compare structurally; use
``structurally_equal`` for that.
"""

from __future__ import annotations

from typing import Iterable, Optional, Tuple, Union

from .sorts import BOOL, INT, ArraySort, FunctionSort, Sort


Operand = Union["Expression", bool, int]


# Operator name -> number of arguments it takes
OPERATOR_ARITY = {
    "ite": 3,
    "not": 1,
    "and": 2,
    "or": 2,
    "=>": 2,
    "=": 2,
    "<": 2,
    "<=": 2,
    ">": 2,
    ">=": 2,
    "+": 2,
    "-": 2,
    "*": 2,
    "/": 2,
    "select": 2,
    "store": 3,
}


class Expression:
    """A term of the expression model."""

    __slots__ = ("name", "arguments", "sort")

    def __init__(self, name: str,
                 arguments: Iterable[Expression] = (),
                 sort: Optional[Sort] = None):
        self.name = name
        self.arguments: Tuple[Expression, ...] = tuple(arguments)
        self.sort = sort

    # -------------------------------------------------------------------------
    # Construction helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def literal(value: Union[bool, int]) -> Expression:
        if isinstance(value, bool):
            return Expression("true" if value else "false", sort=BOOL)
        if isinstance(value, int):
            return Expression(str(value), sort=INT)
        raise TypeError(f"cannot build a literal from {value!r}")

    @staticmethod
    def ite(condition: Operand, true_value: Operand,
            false_value: Operand) -> Expression:
        t = _coerce(true_value)
        return Expression("ite", (_coerce(condition), t, _coerce(false_value)), t.sort)

    @staticmethod
    def implies(antecedent: Operand, consequent: Operand) -> Expression:
        return Expression("=>", (_coerce(antecedent), _coerce(consequent)), BOOL)

    @staticmethod
    def select(array: Expression, index: Operand) -> Expression:
        range_sort = array.sort.range if isinstance(array.sort, ArraySort) else None
        return Expression("select", (array, _coerce(index)), range_sort)

    @staticmethod
    def store(array: Expression, index: Operand, element: Operand) -> Expression:
        return Expression("store", (array, _coerce(index), _coerce(element)), array.sort)

    def __call__(self, *arguments: Operand) -> Expression:
        """Apply a function-sorted expression to arguments."""
        if not isinstance(self.sort, FunctionSort):
            raise TypeError(f"'{self.name}' is not a function (sort {self.sort})")
        return Expression(
            self.name,
            tuple(_coerce(a) for a in arguments),
            self.sort.codomain,
        )

    # -------------------------------------------------------------------------
    # Boolean connectives
    # -------------------------------------------------------------------------

    def __and__(self, other: Operand) -> Expression:
        return Expression("and", (self, _coerce(other)), BOOL)

    def __rand__(self, other: Operand) -> Expression:
        return Expression("and", (_coerce(other), self), BOOL)

    def __or__(self, other: Operand) -> Expression:
        return Expression("or", (self, _coerce(other)), BOOL)

    def __ror__(self, other: Operand) -> Expression:
        return Expression("or", (_coerce(other), self), BOOL)

    def __invert__(self) -> Expression:
        return Expression("not", (self,), BOOL)

    # -------------------------------------------------------------------------
    # Comparisons
    # -------------------------------------------------------------------------

    def __eq__(self, other: Operand) -> Expression:  # type: ignore[override]
        return Expression("=", (self, _coerce(other)), BOOL)

    def __ne__(self, other: Operand) -> Expression:  # type: ignore[override]
        return ~(self == other)

    def __lt__(self, other: Operand) -> Expression:
        return Expression("<", (self, _coerce(other)), BOOL)

    def __le__(self, other: Operand) -> Expression:
        return Expression("<=", (self, _coerce(other)), BOOL)

    def __gt__(self, other: Operand) -> Expression:
        return Expression(">", (self, _coerce(other)), BOOL)

    def __ge__(self, other: Operand) -> Expression:
        return Expression(">=", (self, _coerce(other)), BOOL)

    __hash__ = None

    # -------------------------------------------------------------------------
    # Arithmetic
    # -------------------------------------------------------------------------

    def __add__(self, other: Operand) -> Expression:
        return Expression("+", (self, _coerce(other)), self.sort)

    def __radd__(self, other: Operand) -> Expression:
        return Expression("+", (_coerce(other), self), self.sort)

    def __sub__(self, other: Operand) -> Expression:
        return Expression("-", (self, _coerce(other)), self.sort)

    def __rsub__(self, other: Operand) -> Expression:
        return Expression("-", (_coerce(other), self), self.sort)

    def __neg__(self) -> Expression:
        return Expression("-", (Expression.literal(0), self), self.sort)

    def __mul__(self, other: Operand) -> Expression:
        return Expression("*", (self, _coerce(other)), self.sort)

    def __rmul__(self, other: Operand) -> Expression:
        return Expression("*", (_coerce(other), self), self.sort)

    def __truediv__(self, other: Operand) -> Expression:
        return Expression("/", (self, _coerce(other)), self.sort)

    def __rtruediv__(self, other: Operand) -> Expression:
        return Expression("/", (_coerce(other), self), self.sort)

    # -------------------------------------------------------------------------
    # Inspection
    # -------------------------------------------------------------------------

    def has_correct_arity(self) -> bool:
        """Operators must have their fixed arity; other names are not checked."""
        expected = OPERATOR_ARITY.get(self.name)
        return expected is None or expected == len(self.arguments)

    def structurally_equal(self, other: Expression) -> bool:
        if not isinstance(other, Expression):
            return False
        return (
            self.name == other.name
            and self.sort == other.sort
            and len(self.arguments) == len(other.arguments)
            and all(a.structurally_equal(b)
                    for a, b in zip(self.arguments, other.arguments))
        )

    def __bool__(self) -> bool:
        raise TypeError(
            "Expression has no truth value; use & | ~ instead of and/or/not"
        )

    def __str__(self) -> str:
        if not self.arguments:
            return self.name
        return f"({self.name} {' '.join(str(a) for a in self.arguments)})"

    def __repr__(self) -> str:
        return f"Expression({str(self)!r}, sort={self.sort})"


def _coerce(value: Operand) -> Expression:
    if isinstance(value, Expression):
        return value
    return Expression.literal(value)
