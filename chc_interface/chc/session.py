"""
CHC solving session over z3's Spacer engine.

A session owns one z3 context and one fixedpoint object. The analysis pass
declares variables and relation symbols, asserts Horn rules and then asks
reachability queries against everything asserted so far:

    session = Z3CHCSession()
    x = session.new_variable("x", INT)
    inv = session.new_variable("inv", FunctionSort((INT,), BOOL))
    session.register_relation(inv)
    session.add_rule(Expression.implies(x == 0, inv(x)), "init")
    result, counterexample = session.query(inv(x) & (x < 0))

A rule is ``body => head`` or a fact ``head``, where the head applies a
registered relation. A ``false`` head asserts that the body is unreachable;
it is rewritten to the session's error relation (``error_relation()``),
which is what a safety query then asks about.

QUERY STATE MACHINE
===================

    IDLE --query--> QUERYING --> {SATISFIABLE, UNSATISFIABLE, UNKNOWN, ERROR} --> IDLE

Exactly one classified result is returned per query. Engine failures never
escape ``query``: resource exhaustion becomes UNKNOWN, anything else ERROR,
both with an empty counterexample. Translation errors in the goal are the
caller's and propagate unchanged.

Sessions are not thread-safe. A query runs until it is answered or the
configured resource limit is exhausted; there is no other cancellation.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Tuple

import z3

from ..errors import EngineError, InvalidSort, TranslationError, UnknownRelation
from ..smt.expression import Expression
from ..smt.sorts import BOOL, FunctionSort, Sort
from ..smt.z3_translator import Z3Translator
from .config import SessionConfig
from .counterexample import decode_counterexample, decode_trace, format_trace
from .engine import FixedpointEngine, set_global_params
from .interface import CHCSolverInterface, CheckResult, QueryResult, SessionState

logger = logging.getLogger(__name__)

# Session-owned head for rules whose head is `false`
ERROR_RELATION = "chc!error"


class Z3CHCSession(CHCSolverInterface):
    """
    One long-lived Horn-clause solving session.

    Relations are registered at most once; registering a relation again is
    a no-op. Rules are closed over every variable declared so far, not just
    the ones occurring in the rule.
    """

    def __init__(self, config: Optional[SessionConfig] = None):
        self.config = config or SessionConfig()

        # Global parameters first: the context reads them when it is created.
        set_global_params(self.config.global_params())
        self.context = z3.Context()

        self.translator = Z3Translator(self.context)
        self._engine = FixedpointEngine(self.context)
        for key, value in self.config.engine_params():
            self._engine.set_param(key, value)

        self._relations: Dict[str, z3.FuncDeclRef] = {}
        self._rules: List[Tuple[str, z3.BoolRef]] = []
        self._state = SessionState.IDLE
        self._reason_unknown = ""

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def reason_unknown(self) -> str:
        """Engine's reason for the last UNKNOWN result, empty otherwise."""
        return self._reason_unknown

    @property
    def relations(self) -> List[str]:
        return list(self._relations)

    @property
    def rules(self) -> List[Tuple[str, z3.BoolRef]]:
        """(label, asserted clause) pairs in assertion order."""
        return list(self._rules)

    # =========================================================================
    # DECLARATION & REGISTRATION
    # =========================================================================

    def declare_variable(self, name: str, sort: Sort) -> None:
        self.translator.declare_variable(name, sort)

    def register_relation(self, expr: Expression) -> None:
        name = expr.name
        if name in self._relations:
            logger.debug(f"Relation {name} already registered")
            return

        func = self.translator.lookup_relation_symbol(name)
        if func.range().kind() != z3.Z3_BOOL_SORT:
            raise InvalidSort(f"relation '{name}' must have codomain Bool, got {func.range()}")

        self._engine.register_relation(func)
        self._relations[name] = func
        logger.debug(f"Registered relation {func}")

    # =========================================================================
    # RULES
    # =========================================================================

    def error_relation(self) -> Expression:
        """
        The nullary relation standing in for ``false`` in rule heads.

        Declared and registered on first use. Querying it asks whether any
        ``false``-headed rule can fire.
        """
        relation = Expression(ERROR_RELATION, sort=FunctionSort((), BOOL))
        if ERROR_RELATION not in self._relations:
            self.declare_variable(ERROR_RELATION, relation.sort)
            self.register_relation(relation)
        return relation()

    def add_rule(self, expr: Expression, name: str) -> None:
        self._check_relations(expr)
        expr = self._with_relation_head(expr)
        rule = self.translator.translate_formula(expr)

        variables = self.translator.current_free_variables()
        if variables:
            rule = z3.ForAll(variables, rule)

        self._engine.add_rule(rule, name)
        self._rules.append((name, rule))
        logger.debug(f"Rule {name}: {rule}")

    def _with_relation_head(self, expr: Expression) -> Expression:
        """
        Check that the rule is ``body => head`` or a fact ``head`` where the
        head applies a registered relation. A ``false`` head is replaced by
        the error relation.
        """
        if expr.name == "=>" and len(expr.arguments) == 2:
            body, head = expr.arguments
        else:
            body, head = None, expr

        if head.name == "false" and not head.arguments:
            head = self.error_relation()
        elif head.name not in self._relations:
            raise TranslationError(
                f"rule head {head} is not an application of a registered relation"
            )

        if body is None:
            return head
        return Expression.implies(body, head)

    # =========================================================================
    # QUERIES
    # =========================================================================

    def query(self, expr: Expression) -> QueryResult:
        self._check_relations(expr)
        goal = self.translator.translate_formula(expr)

        # Declared variables in a goal are existential, as in z3's own
        # Fixedpoint.query over declared vars.
        variables = self.translator.current_free_variables()
        if variables:
            goal = z3.Exists(variables, goal)

        self._state = SessionState.QUERYING
        self._reason_unknown = ""
        try:
            outcome = self._run_query(goal)
        finally:
            self._state = SessionState.IDLE

        logger.info(f"Query {goal}: {outcome.result.name}")
        return outcome

    def _run_query(self, goal: z3.BoolRef) -> QueryResult:
        try:
            answer = self._engine.query(goal)
        except EngineError as e:
            if e.resource_exhausted:
                return self._unknown(e.message)
            logger.error(f"CHC engine error: {e.message}")
            return QueryResult(CheckResult.ERROR, [], e.message)

        if answer == z3.sat:
            return QueryResult(CheckResult.SATISFIABLE, self._extract_counterexample())
        if answer == z3.unsat:
            # TODO: extract the inductive invariants from the answer.
            self._log_answer("UNSAT")
            return QueryResult(CheckResult.UNSATISFIABLE, [])
        return self._unknown(self._engine.reason_unknown() or "unknown")

    def _unknown(self, reason: str) -> QueryResult:
        self._reason_unknown = reason
        logger.warning(f"CHC query unknown: {reason}")
        return QueryResult(CheckResult.UNKNOWN, [], reason)

    def _extract_counterexample(self) -> List[str]:
        marker = self.config.counterexample_marker
        try:
            trace = self._engine.rules_along_trace()
            logger.debug(f"Rules along trace:\n{format_trace(trace)}")
            values = decode_trace(trace, marker)
            if values:
                self._log_answer("SAT")
                return values
            answer = self._engine.get_answer()
            logger.debug(f"SAT\n{answer}")
            return decode_counterexample(answer, marker)
        except (EngineError, z3.Z3Exception) as e:
            logger.warning(f"Could not extract counterexample: {e}")
            return []

    def _log_answer(self, verdict: str) -> None:
        try:
            logger.debug(f"{verdict}\n{self._engine.get_answer()}")
        except EngineError as e:
            logger.debug(f"{verdict} (no answer: {e.message})")

    def _check_relations(self, expr: Expression) -> None:
        """Every applied Bool-valued function symbol must be a registered relation."""
        functions = self.translator.functions
        pending = [expr]
        while pending:
            e = pending.pop()
            func = functions.get(e.name)
            if func is not None and func.range().kind() == z3.Z3_BOOL_SORT \
                    and e.name not in self._relations:
                raise UnknownRelation(e.name)
            pending.extend(e.arguments)
