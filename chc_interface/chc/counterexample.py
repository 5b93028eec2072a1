"""
Best-effort counterexample decoding for SATISFIABLE queries.

A reachable goal comes with two artifacts: the rules applied along the
derivation (the trace) and the engine's answer, a proof term whose shape
depends on the engine version and options. Decoding looks for ground
applications of relations whose name starts with a marker (``summary`` by
default) and flattens their arguments, in order, into strings. The trace is
read first, in derivation order; the answer is only a fallback. Anything that
does not fit that shape yields an empty list, which callers read as "no
witness available".
"""

from __future__ import annotations

from typing import Iterable, List

import z3


def decode_trace(rules: Iterable[z3.ExprRef], marker: str) -> List[str]:
    """
    Flatten marker-named ground facts among ``rules``, in trace order.

    Quantified rules and implications are skipped; only the instantiated
    facts of the derivation carry witness values.
    """
    values: List[str] = []
    for rule in rules:
        values.extend(decode_counterexample(rule, marker))
    return values


def decode_counterexample(answer: z3.ExprRef, marker: str) -> List[str]:
    """
    Flatten the arguments of marker-named ground conjuncts of ``answer``.

    Returns an empty list when the answer is not an application or no
    conjunct carries the marker.
    """
    if answer is None or not z3.is_app(answer):
        return []

    conjuncts = answer.children() if z3.is_and(answer) else [answer]
    values: List[str] = []
    for predicate in conjuncts:
        if not z3.is_app(predicate):
            continue
        if not predicate.decl().name().startswith(marker):
            continue
        if not _is_ground(predicate):
            continue
        values.extend(str(arg) for arg in predicate.children())
    return values


def _is_ground(term: z3.ExprRef) -> bool:
    if z3.is_var(term) or z3.is_quantifier(term):
        return False
    return all(_is_ground(c) for c in term.children())


def format_trace(rules: List[z3.ExprRef]) -> str:
    return "\n".join(str(r) for r in rules)
