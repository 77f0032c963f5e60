"""
Error kinds raised by the simulation engine.

Every error is raised synchronously to the immediate caller. Input
validation errors also derive from the matching builtin (``ValueError`` or
``LookupError``) so callers that only know the builtins still catch them.
"""

from __future__ import annotations

from typing import Iterable


class EngineError(Exception):
    """Base class for all tiny-qstep errors."""


class UnknownGateError(EngineError, LookupError):
    """Gate name is not part of the closed gate set."""

    def __init__(self, name: str, available: Iterable[str] = ()) -> None:
        available = sorted(available)
        message = f"Unknown gate: '{name}'"
        if available:
            message += f". Available: {available}"
        super().__init__(message)
        self.name = name
        self.available = available


class ArityMismatchError(EngineError, ValueError):
    """Number of targets does not match the gate's arity."""

    def __init__(self, name: str, expected: int, got: int) -> None:
        super().__init__(f"Gate '{name}' expects {expected} target(s), got {got}")
        self.name = name
        self.expected = expected
        self.got = got


class OutOfRangeError(EngineError, ValueError):
    """Qubit index, qubit count, bit value or column outside its valid bounds."""


class DuplicateTargetError(EngineError, ValueError):
    """The same qubit appears more than once in a gate's targets."""

    def __init__(self, targets: Iterable[int]) -> None:
        targets = tuple(targets)
        super().__init__(f"Duplicate qubits in targets {targets}")
        self.targets = targets


class EmptySelectionError(EngineError, ValueError):
    """Measurement requested with no qubits selected."""


class InvalidGateError(EngineError):
    """A gate matrix failed validation while building the gate library.

    This indicates a corrupted gate table and is not meant to be recovered
    from at runtime.
    """


class InvalidCircuitError(EngineError, ValueError):
    """A circuit handed to the engine failed validation.

    The specific error kind that triggered the failure is available as
    ``__cause__``.
    """


class NormalizationError(EngineError, ArithmeticError):
    """A state with zero norm cannot be renormalized."""
