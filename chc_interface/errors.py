"""
Error taxonomy for the CHC solving interface.

Declaration and registration errors are raised synchronously to the caller.
Engine errors are contained at the query boundary and turned into
``CheckResult.ERROR`` (or ``UNKNOWN`` for resource exhaustion).
"""

from __future__ import annotations


class CHCError(Exception):
    """Base class for all errors raised by this package."""


class InvalidSort(CHCError):
    """A declaration was attempted without a sort."""


class DuplicateDeclaration(CHCError):
    """A name was redeclared with a different sort."""

    def __init__(self, name: str, existing, requested):
        super().__init__(
            f"'{name}' already declared with sort {existing}, "
            f"cannot redeclare with sort {requested}"
        )
        self.name = name
        self.existing = existing
        self.requested = requested


class UnknownRelation(CHCError):
    """No function symbol exists for the relation being registered."""

    def __init__(self, name: str):
        super().__init__(f"no function symbol declared for relation '{name}'")
        self.name = name


class TranslationError(CHCError):
    """The expression model could not translate an expression to z3."""


class EngineError(CHCError):
    """
    The solving engine failed while evaluating a query.

    ``resource_exhausted`` is set when the failure was the engine giving up
    on its resource limit or timeout rather than a structural error.
    """

    def __init__(self, message: str, resource_exhausted: bool = False):
        super().__init__(message)
        self.message = message
        self.resource_exhausted = resource_exhausted
