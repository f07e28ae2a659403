"""Newton-Raphson solver for square systems of nonlinear equations.

Works over the complex numbers: unknowns, residuals and the Jacobian are
complex, and the linear step is solved by Gaussian elimination with
partial pivoting on NumPy ``complex128`` arrays.
"""

import logging
from dataclasses import dataclass, field

import numpy as np

from equasolver.complex_number import Complex
from equasolver.config import load_settings
from equasolver.errors import EvaluationError
from equasolver.evaluator import RESERVED_NAMES, evaluate_complex
from equasolver.grammar import parse, variables_in
from equasolver.latex import normalize_latex
from equasolver.nodes import ParseResult

logger = logging.getLogger(__name__)

JACOBIAN_STEP = 1e-8
PIVOT_EPSILON = 1e-12
DEFAULT_GUESS = Complex(1.0, 0.0)


@dataclass
class SystemSolveResult:
    values: dict = field(default_factory=dict)
    success: bool = False
    iterations: int = 0
    error: str | None = None

    def to_dict(self) -> dict:
        return {
            "values": dict(self.values),
            "success": self.success,
            "iterations": self.iterations,
            "error": self.error,
        }


def _residual(parsed: ParseResult, bindings: dict) -> complex:
    if parsed.is_equation:
        value = evaluate_complex(parsed.left, bindings) - evaluate_complex(parsed.right, bindings)
    else:
        value = evaluate_complex(parsed.expression, bindings)
    return complex(value)


def _residuals(system: list, names: list, point: np.ndarray) -> np.ndarray:
    bindings = {name: Complex(float(v.real), float(v.imag)) for name, v in zip(names, point)}
    return np.array([_residual(parsed, bindings) for parsed in system], dtype=np.complex128)


def _jacobian(system: list, names: list, point: np.ndarray, base: np.ndarray) -> np.ndarray:
    """Forward-difference Jacobian; column j is ``(F(x + h·e_j) - F(x)) / h``."""
    size = len(names)
    matrix = np.empty((size, size), dtype=np.complex128)
    for j in range(size):
        shifted = point.copy()
        shifted[j] += JACOBIAN_STEP
        matrix[:, j] = (_residuals(system, names, shifted) - base) / JACOBIAN_STEP
    return matrix


def gaussian_solve(matrix: np.ndarray, rhs: np.ndarray) -> np.ndarray | None:
    """Solve ``matrix · x = rhs`` with partial pivoting.

    Returns ``None`` when a pivot's magnitude falls below ``PIVOT_EPSILON``.
    """
    a = np.array(matrix, dtype=np.complex128)
    b = np.array(rhs, dtype=np.complex128)
    size = len(b)
    for col in range(size):
        pivot = col + int(np.argmax(np.abs(a[col:, col])))
        if abs(a[pivot, col]) < PIVOT_EPSILON:
            return None
        if pivot != col:
            a[[col, pivot]] = a[[pivot, col]]
            b[[col, pivot]] = b[[pivot, col]]
        factors = a[col + 1:, col] / a[col, col]
        a[col + 1:, col:] -= np.outer(factors, a[col, col:])
        b[col + 1:] -= factors * b[col]

    solution = np.zeros(size, dtype=np.complex128)
    for row in range(size - 1, -1, -1):
        solution[row] = (b[row] - a[row, row + 1:] @ solution[row + 1:]) / a[row, row]
    return solution


def _assignment(names: list, point: np.ndarray) -> dict:
    return {name: Complex(float(v.real), float(v.imag)) for name, v in zip(names, point)}


def solve_system(equations: list, initial_guess: dict | None = None,
                 max_iterations: int | None = None,
                 tolerance: float | None = None) -> SystemSolveResult:
    """Solve a square system with Newton-Raphson.

    *initial_guess* maps variable names to real or complex starting values;
    unknowns without one start at ``1 + 0i``. Iteration limits default to
    the configured settings. Malformed equations raise ParseError; every
    other failure is reported through the result.
    """
    if max_iterations is None or tolerance is None:
        settings = load_settings()
        max_iterations = settings.system_max_iterations if max_iterations is None else max_iterations
        tolerance = settings.system_tolerance if tolerance is None else tolerance

    if not equations:
        return SystemSolveResult(error="No equations given.")

    system = [parse(normalize_latex(text)) for text in equations]
    found = set()
    for parsed in system:
        found.update(variables_in(parsed))
    names = sorted(found - RESERVED_NAMES)

    if len(names) != len(system):
        return SystemSolveResult(error=(
            f"Number of variables ({len(names)}) does not match number of "
            f"equations ({len(system)}). Variables: {', '.join(names) or 'none'}"
        ))

    guess = initial_guess or {}
    point = np.array([
        complex(Complex.from_value(guess[name]) if guess.get(name) is not None else DEFAULT_GUESS)
        for name in names
    ], dtype=np.complex128)

    iteration = 0
    try:
        for iteration in range(max_iterations + 1):
            residuals = _residuals(system, names, point)
            if not np.all(np.isfinite(residuals)):
                logger.warning("Residual became non-finite at iteration %d", iteration)
                return SystemSolveResult(
                    _assignment(names, point), False, iteration,
                    f"Residual is not finite at iteration {iteration}.",
                )
            worst = float(np.max(np.abs(residuals)))
            logger.debug("Iteration %d: max residual %g", iteration, worst)
            if worst < tolerance:
                return SystemSolveResult(_assignment(names, point), True, iteration)
            if iteration == max_iterations:
                break

            jacobian = _jacobian(system, names, point, residuals)
            delta = gaussian_solve(jacobian, -residuals)
            if delta is None:
                logger.warning("Singular Jacobian at iteration %d", iteration)
                return SystemSolveResult(
                    _assignment(names, point), False, iteration,
                    f"Singular Jacobian matrix at iteration {iteration}.",
                )
            point = point + delta
    except EvaluationError as exc:
        return SystemSolveResult(_assignment(names, point), False, iteration, str(exc))

    logger.warning("Newton-Raphson did not converge in %d iterations", max_iterations)
    return SystemSolveResult(
        _assignment(names, point), False, max_iterations,
        f"Did not converge within {max_iterations} iterations.",
    )
