"""
Translation of the expression model into z3.

The translator keeps the registry of declared symbols: constants (the free
variables a rule is closed over) and functions (the relation symbols a
fixedpoint engine can be told about). It never owns a z3 context; the
session hands it the one it owns.
"""

from __future__ import annotations

import logging
from typing import Dict, List

import z3

from ..errors import DuplicateDeclaration, InvalidSort, TranslationError, UnknownRelation
from .expression import OPERATOR_ARITY, Expression
from .sorts import ArraySort, FunctionSort, Sort, SortKind

logger = logging.getLogger(__name__)


class Z3Translator:
    """
    Maps expressions of the expression model to z3 terms.

    Declarations are keyed by name. A name may be redeclared with the same
    sort (no-op) but not with a different one.
    """

    def __init__(self, context: z3.Context):
        self.context = context
        self._sorts: Dict[str, Sort] = {}
        self._constants: Dict[str, z3.ExprRef] = {}
        self._functions: Dict[str, z3.FuncDeclRef] = {}

    @property
    def constants(self) -> Dict[str, z3.ExprRef]:
        return dict(self._constants)

    @property
    def functions(self) -> Dict[str, z3.FuncDeclRef]:
        return dict(self._functions)

    # =========================================================================
    # DECLARATIONS
    # =========================================================================

    def declare_variable(self, name: str, sort: Sort) -> None:
        if sort is None:
            raise InvalidSort(f"cannot declare '{name}' without a sort")
        if not isinstance(sort, Sort):
            raise InvalidSort(f"cannot declare '{name}' with {sort!r}: not a sort")

        existing = self._sorts.get(name)
        if existing is not None:
            if existing == sort:
                return
            raise DuplicateDeclaration(name, existing, sort)

        if isinstance(sort, FunctionSort):
            domain = [self.to_z3_sort(s) for s in sort.domain]
            self._functions[name] = z3.Function(name, *domain, self.to_z3_sort(sort.codomain))
        else:
            self._constants[name] = z3.Const(name, self.to_z3_sort(sort))
        # Only recorded once the z3 symbol exists
        self._sorts[name] = sort
        logger.debug(f"Declared {name} : {sort}")

    def lookup_relation_symbol(self, name: str) -> z3.FuncDeclRef:
        try:
            return self._functions[name]
        except KeyError:
            raise UnknownRelation(name) from None

    def current_free_variables(self) -> List[z3.ExprRef]:
        """Declared constants, in declaration order."""
        return list(self._constants.values())

    def to_z3_sort(self, sort: Sort) -> z3.SortRef:
        if sort is None:
            raise InvalidSort("sort is absent")
        if not isinstance(sort, Sort):
            raise InvalidSort(f"{sort!r} is not a sort")
        if sort.kind == SortKind.INT:
            return z3.IntSort(self.context)
        if sort.kind == SortKind.BOOL:
            return z3.BoolSort(self.context)
        if isinstance(sort, ArraySort):
            return z3.ArraySort(self.to_z3_sort(sort.domain), self.to_z3_sort(sort.range))
        raise InvalidSort(f"sort {sort} has no z3 counterpart as a value sort")

    # =========================================================================
    # EXPRESSIONS
    # =========================================================================

    def translate(self, expr: Expression) -> z3.ExprRef:
        """
        Translate ``expr`` to a z3 term in this translator's context.

        Raises TranslationError for anything the model cannot express; it
        never approximates.
        """
        name = expr.name

        if not expr.arguments and name in self._constants:
            return self._constants[name]

        arguments = [self.translate(a) for a in expr.arguments]

        if name in self._functions:
            func = self._functions[name]
            if func.arity() != len(arguments):
                raise TranslationError(
                    f"'{name}' takes {func.arity()} arguments, got {len(arguments)}"
                )
            return self._build(lambda: func(*arguments), expr)

        if name in self._constants:
            raise TranslationError(f"constant '{name}' applied to arguments")

        if not arguments:
            return self._literal(name)

        if name not in OPERATOR_ARITY:
            raise TranslationError(f"unknown operator or undeclared symbol '{name}'")
        if not expr.has_correct_arity():
            raise TranslationError(
                f"operator '{name}' expects {OPERATOR_ARITY[name]} arguments, "
                f"got {len(arguments)}"
            )
        return self._build(lambda: _apply_operator(name, arguments), expr)

    def translate_formula(self, expr: Expression) -> z3.BoolRef:
        """Translate a rule or goal, which must be Bool-valued."""
        term = self.translate(expr)
        if not z3.is_bool(term):
            raise TranslationError(f"{expr} is not a formula (sort {term.sort()})")
        return term

    def _literal(self, name: str) -> z3.ExprRef:
        if name == "true":
            return z3.BoolVal(True, self.context)
        if name == "false":
            return z3.BoolVal(False, self.context)
        try:
            value = int(name)
        except ValueError:
            raise TranslationError(f"undeclared symbol '{name}'") from None
        return z3.IntVal(value, self.context)

    def _build(self, make, expr: Expression) -> z3.ExprRef:
        try:
            return make()
        except (z3.Z3Exception, TypeError) as e:
            raise TranslationError(f"cannot translate {expr}: {e}") from e


def _apply_operator(name: str, args: List[z3.ExprRef]) -> z3.ExprRef:
    if name == "ite":
        return z3.If(args[0], args[1], args[2])
    if name == "not":
        return z3.Not(args[0])
    if name == "and":
        return z3.And(args[0], args[1])
    if name == "or":
        return z3.Or(args[0], args[1])
    if name == "=>":
        return z3.Implies(args[0], args[1])
    if name == "=":
        return args[0] == args[1]
    if name == "<":
        return args[0] < args[1]
    if name == "<=":
        return args[0] <= args[1]
    if name == ">":
        return args[0] > args[1]
    if name == ">=":
        return args[0] >= args[1]
    if name == "+":
        return args[0] + args[1]
    if name == "-":
        return args[0] - args[1]
    if name == "*":
        return args[0] * args[1]
    if name == "/":
        return args[0] / args[1]
    if name == "select":
        return z3.Select(args[0], args[1])
    # store
    return z3.Store(args[0], args[1], args[2])
