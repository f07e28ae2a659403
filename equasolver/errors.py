"""Exception types raised by EquaSolver.

Every error derives from ``ValueError`` so callers that already guard
user input with ``except ValueError`` keep working.
"""


class EquaSolverError(ValueError):
    """Base class for all EquaSolver errors."""


class ParseError(EquaSolverError):
    """Malformed input: bad syntax, unknown function, wrong arity.

    ``position`` is the character offset of the offending token, or
    ``None`` when the failure is not tied to one spot.
    """

    def __init__(self, message: str, position: int | None = None):
        if position is not None:
            message = f"{message} (at position {position})"
        super().__init__(message)
        self.position = position


class EvaluationError(EquaSolverError):
    """A variable had no binding during evaluation."""

    def __init__(self, message: str, name: str | None = None):
        super().__init__(message)
        self.name = name


class CalculusError(EquaSolverError):
    """Symbolic operation that the calculus front end cannot handle."""
