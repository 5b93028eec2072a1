"""
The z3 fixedpoint engine behind a CHC session.

Thin adapter over ``z3.Fixedpoint`` that exposes exactly the capabilities a
session relies on and reports engine failures as ``EngineError``.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, List, Tuple

import z3

from ..errors import EngineError

logger = logging.getLogger(__name__)


# Substrings of z3 messages that mean the engine ran out of budget
_RESOURCE_MESSAGES = ("canceled", "resource", "timeout", "rlimit")


def set_global_params(params: Iterable[Tuple[str, Any]]) -> None:
    """Set process-wide z3 parameters. Affects every context created later."""
    for key, value in params:
        z3.set_param(key, value)
        logger.debug(f"Global z3 param {key}={value}")


def is_resource_message(message: str) -> bool:
    lowered = message.lower()
    return any(m in lowered for m in _RESOURCE_MESSAGES)


class FixedpointEngine:
    """One ``z3.Fixedpoint`` instance living in a caller-owned context."""

    def __init__(self, context: z3.Context):
        self.context = context
        self.fp = z3.Fixedpoint(ctx=context)

    def set_param(self, key: str, value: Any) -> None:
        self.fp.set(key, value)
        logger.debug(f"Fixedpoint param {key}={value}")

    def register_relation(self, func: z3.FuncDeclRef) -> None:
        try:
            self.fp.register_relation(func)
        except z3.Z3Exception as e:
            raise EngineError(_message(e)) from e

    def add_rule(self, rule: z3.BoolRef, label: str) -> None:
        try:
            self.fp.add_rule(rule, name=label)
        except z3.Z3Exception as e:
            raise EngineError(_message(e)) from e

    def query(self, goal: z3.BoolRef) -> z3.CheckSatResult:
        try:
            return self.fp.query(goal)
        except z3.Z3Exception as e:
            message = _message(e)
            raise EngineError(message, resource_exhausted=is_resource_message(message)) from e

    def get_answer(self) -> z3.ExprRef:
        try:
            return self.fp.get_answer()
        except z3.Z3Exception as e:
            raise EngineError(_message(e)) from e

    def reason_unknown(self) -> str:
        return self.fp.reason_unknown()

    def rules_along_trace(self) -> List[z3.ExprRef]:
        """Rules applied along the derivation of the last SAT answer."""
        try:
            return list(self.fp.get_rules_along_trace())
        except z3.Z3Exception as e:
            raise EngineError(_message(e)) from e

    def __str__(self) -> str:
        return str(self.fp)


def _message(e: z3.Z3Exception) -> str:
    value = e.value
    if isinstance(value, bytes):
        value = value.decode(errors="replace")
    return str(value)
