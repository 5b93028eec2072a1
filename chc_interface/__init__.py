"""
chc_interface: Constrained Horn Clause solving for static analysis.

Lets a verification pass state program safety as Horn-clause satisfiability,
solve it with z3's Spacer engine and read back a classified answer.
"""

from chc_interface.chc import (
    CHCSolverInterface,
    CheckResult,
    QueryResult,
    SessionConfig,
    SessionState,
    Z3CHCSession,
)
from chc_interface.errors import (
    CHCError,
    DuplicateDeclaration,
    EngineError,
    InvalidSort,
    TranslationError,
    UnknownRelation,
)
from chc_interface.smt import (
    BOOL,
    INT,
    ArraySort,
    Expression,
    FunctionSort,
    Sort,
    Z3Translator,
)

__version__ = "0.1.0"

__all__ = [
    "CHCSolverInterface",
    "CheckResult",
    "QueryResult",
    "SessionConfig",
    "SessionState",
    "Z3CHCSession",
    "CHCError",
    "DuplicateDeclaration",
    "EngineError",
    "InvalidSort",
    "TranslationError",
    "UnknownRelation",
    "BOOL",
    "INT",
    "ArraySort",
    "Expression",
    "FunctionSort",
    "Sort",
    "Z3Translator",
]
