"""
Bridge between the HTTP layer and the equasolver package.

Turns request payloads into engine arguments and engine results into
JSON-safe dicts: complex numbers become ``{"real": .., "imag": ..}`` and
NaN / infinite floats become ``None``.
"""

import math

from equasolver import calculus, constants
from equasolver.complex_number import Complex
from equasolver.engine import evaluate, extract_variables, solve
from equasolver.system import solve_system


def to_json(value):
    """Recursively convert engine values into JSON-compatible data."""
    if isinstance(value, Complex):
        return {"real": to_json(value.real), "imag": to_json(value.imag)}
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    if isinstance(value, dict):
        return {key: to_json(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_json(item) for item in value]
    return value


def from_json(value):
    """Inverse of :func:`to_json` for bound values (``None`` stays unknown)."""
    if isinstance(value, dict):
        real, imag = value.get("real"), value.get("imag")
        return Complex(
            math.nan if real is None else float(real),
            0.0 if imag is None else float(imag),
        )
    return value


def _bindings(raw: dict | None) -> dict:
    return {name: from_json(value) for name, value in (raw or {}).items()}


def evaluate_expression(expression: str, bindings: dict | None = None) -> dict:
    return {"value": to_json(evaluate(expression, _bindings(bindings)))}


def list_variables(expression: str, exclude_constants: bool = False) -> dict:
    return {"variables": extract_variables(expression, exclude_constants)}


def solve_equation(equation: str, bindings: dict | None = None,
                   solve_for: str | None = None) -> dict:
    result = solve(equation, _bindings(bindings), solve_for)
    return to_json(result.to_dict())


def solve_equation_system(equations: list, initial_guess: dict | None = None,
                          max_iterations: int | None = None,
                          tolerance: float | None = None) -> dict:
    result = solve_system(equations, _bindings(initial_guess), max_iterations, tolerance)
    return to_json(result.to_dict())


def run_calculus(command: str) -> dict:
    return {"result": calculus.evaluate_command(command)}


def constant_catalog() -> list[dict]:
    return [
        {
            "key": c.key,
            "value": to_json(c.value),
            "name": c.name,
            "unit": c.unit,
            "symbol": c.symbol,
            "category": c.category,
        }
        for c in constants.CATALOG.values()
    ]
