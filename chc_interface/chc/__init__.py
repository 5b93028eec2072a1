"""
Constrained Horn Clause solving session.

1. **Configuration** (config.py): global and Spacer parameter policy
2. **Engine** (engine.py): z3 Fixedpoint adapter
3. **Session** (session.py): declarations, rules, queries
4. **Counterexamples** (counterexample.py): best-effort witness decoding
"""

from .config import SPACER_PARAMS, SessionConfig
from .interface import CHCSolverInterface, CheckResult, QueryResult, SessionState
from .session import Z3CHCSession

__all__ = [
    "SPACER_PARAMS",
    "SessionConfig",
    "CHCSolverInterface",
    "CheckResult",
    "QueryResult",
    "SessionState",
    "Z3CHCSession",
]
