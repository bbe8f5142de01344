"""Unified exception hierarchy for shmock.

All library exceptions inherit from ShmockException, enabling unified
error handling across modules.

Categories:
- ClassBuilderException: configuration errors detected while synthesizing
  a class (inspection, structural constraints, reserved names)
- PolicyViolationError: a registered policy rejected a live call

Failures raised by decorators or by user implementations are never
wrapped; see :data:`DecoratorFailure`.
"""

from __future__ import annotations

from typing import TypeAlias

# =============================================================================
# Base Exception
# =============================================================================


class ShmockException(Exception):
    """Base exception for all shmock errors.

    Carries an optional error code and context dict for structured error data.
    Catch ShmockException to handle every library error, or catch specific
    subclasses for targeted handling.

    Args:
        message: Human-readable error description.
        code: Machine-readable error code (e.g. "STRUCTURE_001").
        context: Arbitrary key-value pairs for error context and debugging.
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        context: dict | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.context: dict = context if context is not None else {}


# =============================================================================
# Class Builder Exceptions
# =============================================================================


class ClassBuilderException(ShmockException):
    """A class specification cannot be synthesized."""


class UninspectableCallableError(ClassBuilderException):
    """The parameters of a callable cannot be derived automatically.

    Supply an explicit signature to ``add_method`` / ``add_static_method``.
    """


class StructuralConstraintError(ClassBuilderException):
    """A superclass or interface cannot be synthesized against.

    Raised for unresolvable names, final or non-subclassable bases,
    inconsistent method resolution orders, unimplemented abstract methods
    and method signatures incompatible with a base declaration.
    """


class ReservedNameError(ClassBuilderException):
    """A method name collides with a name reserved for synthesis bookkeeping."""


# =============================================================================
# Policy Exceptions
# =============================================================================


class PolicyViolationError(ShmockException):
    """A registered policy rejected the parameters, result or failure of a call."""


# =============================================================================
# Per-call failures
# =============================================================================

# Anything a decorator or an implementation raises. The chain never wraps
# or translates these; the caller sees the original exception object.
DecoratorFailure: TypeAlias = Exception
