"""EquaSolver: parse, evaluate and solve mathematical equations."""

from equasolver.complex_number import Complex
from equasolver.engine import (
    SolutionStep, SolveResult, evaluate, extract_variables, get_prefilled_values, solve,
)
from equasolver.errors import CalculusError, EquaSolverError, EvaluationError, ParseError
from equasolver.grammar import parse
from equasolver.latex import normalize_latex
from equasolver.nodes import to_source
from equasolver.system import SystemSolveResult, solve_system

__version__ = "0.3.0"

__all__ = [
    "CalculusError",
    "Complex",
    "EquaSolverError",
    "EvaluationError",
    "ParseError",
    "SolutionStep",
    "SolveResult",
    "SystemSolveResult",
    "evaluate",
    "extract_variables",
    "get_prefilled_values",
    "normalize_latex",
    "parse",
    "solve",
    "solve_system",
    "to_source",
]
