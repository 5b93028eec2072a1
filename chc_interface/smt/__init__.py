"""
Solver-independent expression model and its translation to z3.
"""

from .sorts import BOOL, INT, ArraySort, FunctionSort, Sort, SortKind
from .expression import Expression
from .z3_translator import Z3Translator

__all__ = [
    "BOOL",
    "INT",
    "ArraySort",
    "FunctionSort",
    "Sort",
    "SortKind",
    "Expression",
    "Z3Translator",
]
