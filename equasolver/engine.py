"""Evaluate expressions and solve single-variable equations step by step.

Input text goes through the LaTeX normaliser and the parser, known values
are substituted, and the remaining unknown is found by trying a fixed list
of strategies in order: direct isolation, algebraic pattern matching on a
sampled quadratic, then numerical search. Every step taken is recorded so
callers can show the work.
"""

import logging
import math
import re
from dataclasses import dataclass, field

from equasolver import numerical
from equasolver.complex_number import Complex
from equasolver.constants import lookup, prefill
from equasolver.errors import EvaluationError
from equasolver.evaluator import (
    RESERVED_NAMES, demote, evaluate_complex, evaluate_mixed, is_unknown,
)
from equasolver.grammar import parse, variables_in
from equasolver.latex import normalize_latex
from equasolver.nodes import Node, Variable, collect_variables, to_source

logger = logging.getLogger(__name__)

# A residual this small relative to the sides counts as zero.
_VANISH_RELATIVE = 1e-12
_PROBE_RELATIVE = 1e-6
_LINEAR_RELATIVE = 1e-10
_MIN_SLOPE = 1e-300
_ACCEPT_RELATIVE = 1e-5
_VERIFY_TOLERANCE = 1e-4
_VERIFY_ABSOLUTE_BELOW = 1e-3


# ── Result types ────────────────────────────────────────────────────────

@dataclass(frozen=True)
class SolutionStep:
    """One recorded step; *kind* names it and *payload* holds its data."""

    kind: str
    payload: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {"kind": self.kind, **self.payload}


@dataclass
class SolveResult:
    solved_value: float | Complex | None = None
    all_values: list = field(default_factory=list)
    steps: list = field(default_factory=list)
    error: str | None = None
    variable: str | None = None
    infinite_solutions: bool = False

    @property
    def success(self) -> bool:
        return self.error is None

    def step_kinds(self) -> list[str]:
        return [step.kind for step in self.steps]

    def to_dict(self) -> dict:
        return {
            "solved_value": self.solved_value,
            "all_values": list(self.all_values),
            "steps": [step.to_dict() for step in self.steps],
            "error": self.error,
            "variable": self.variable,
            "infinite_solutions": self.infinite_solutions,
        }


# ── Front door: evaluation and variable discovery ──────────────────────

def _is_constant_name(name: str) -> bool:
    return name in RESERVED_NAMES or lookup(name) is not None


def _known_values(bindings: dict | None) -> dict:
    if not bindings:
        return {}
    return {name: value for name, value in bindings.items() if not is_unknown(value)}


def extract_variables(expr: str, exclude_constants: bool = False) -> list[str]:
    """Sorted names of every variable in *expr* (expression or equation).

    With *exclude_constants*, reserved names such as ``PI`` / ``IN`` and
    catalog keys are left out.
    """
    names = variables_in(parse(normalize_latex(expr)))
    if exclude_constants:
        names = [name for name in names if not _is_constant_name(name)]
    return names


def get_prefilled_values(expr: str) -> dict[str, float]:
    """Catalog values for the free variables of *expr* that name constants."""
    names = variables_in(parse(normalize_latex(expr)))
    return prefill(name for name in names if name not in RESERVED_NAMES)


def evaluate(expr: str, bindings: dict | None = None) -> float | Complex:
    """Evaluate *expr*, returning a float when the result is real.

    Catalog constants fill in free variables unless *bindings* supplies
    them. A variable with no value gives NaN; malformed text raises
    ParseError. For an equation the right-hand side is evaluated.
    """
    parsed = parse(normalize_latex(expr))
    node = parsed.right if parsed.is_equation else parsed.expression
    free = [name for name in collect_variables(node) if name not in RESERVED_NAMES]
    values = prefill(free)
    values.update(_known_values(bindings))
    try:
        return evaluate_mixed(node, values)
    except EvaluationError as exc:
        logger.debug("Evaluation of %r failed: %s", expr, exc)
        return math.nan


# ── Substitution ────────────────────────────────────────────────────────

def _format_literal(value) -> str:
    """Parenthesised literal text for a bound value."""
    def _real(v: float) -> str:
        if math.isinf(v):
            return "INF" if v > 0 else "-INF"
        return repr(float(v))

    if isinstance(value, (Complex, complex)):
        value = Complex.from_value(value)
        if value.imag == 0:
            return f"({_real(value.real)})"
        sign = "-" if value.imag < 0 else "+"
        return f"({_real(value.real)}{sign}{_real(abs(value.imag))}*IN)"
    return f"({_real(value)})"


def substitute(text: str, values: dict) -> str:
    """Replace each whole identifier named in *values* by its literal, in one pass."""
    if not values:
        return text
    names = sorted(values, key=len, reverse=True)
    pattern = re.compile(
        r"(?<![A-Za-z0-9_])(" + "|".join(re.escape(n) for n in names) + r")(?![A-Za-z0-9_])"
    )
    return pattern.sub(lambda m: _format_literal(values[m.group(1)]), text)


# ── Solving ─────────────────────────────────────────────────────────────

def _magnitude(value) -> float:
    if isinstance(value, Complex):
        return value.abs()
    return abs(value)


def _vanishes(residual: float, scale: float, relative: float = _VANISH_RELATIVE) -> bool:
    return residual == 0 or abs(residual) <= relative * scale


@dataclass
class _Problem:
    """One equation reduced to a single unknown."""

    target: str
    left: Node
    right: Node

    def sides(self, x) -> tuple[Complex, Complex]:
        binding = {self.target: x}
        try:
            return evaluate_complex(self.left, binding), evaluate_complex(self.right, binding)
        except EvaluationError:
            nan = Complex(math.nan, math.nan)
            return nan, nan

    def residual(self, x) -> tuple[Complex, float]:
        """``left - right`` at *x* and the larger side magnitude."""
        left, right = self.sides(x)
        return left - right, max(left.abs(), right.abs())

    def real_residual(self, x: float) -> float:
        res, _ = self.residual(x)
        if not res.is_finite:
            return math.nan
        return res.real

    def accepts(self, x) -> bool:
        res, scale = self.residual(x)
        return res.is_finite and res.abs() < _ACCEPT_RELATIVE * max(1.0, scale)


@dataclass
class _Outcome:
    values: list
    method: str
    infinite: bool = False


def _direct_isolation(problem: _Problem) -> _Outcome | None:
    """``x = expr`` or ``expr = x`` where *expr* does not mention x."""
    for own, other in ((problem.left, problem.right), (problem.right, problem.left)):
        if own != Variable(problem.target):
            continue
        if problem.target in collect_variables(other):
            continue
        try:
            value = evaluate_mixed(other)
        except EvaluationError:
            continue
        if math.isfinite(_magnitude(value)):
            return _Outcome([value], "direct")
    return None


def _quadratic_sampling(problem: _Problem) -> _Outcome | None:
    """Fit ``a·x² + b·x + c`` through samples at 0, 1, -1 and check it at 2."""
    samples = {}
    for x in (0.0, 1.0, -1.0, 2.0):
        res, scale = problem.residual(x)
        if not res.is_finite or not _vanishes(res.imag, max(scale, abs(res.real)), 1e-9):
            return None
        samples[x] = (res.real, scale)

    if all(_vanishes(*samples[x]) for x in (0.0, 1.0, -1.0)):
        logger.debug("All samples vanish for %s; deferring to numerical search", problem.target)
        return None

    c = samples[0.0][0]
    f1, fm1 = samples[1.0][0], samples[-1.0][0]
    a = (f1 + fm1) / 2 - c
    b = (f1 - fm1) / 2

    actual, scale2 = samples[2.0]
    predicted = 4 * a + 2 * b + c
    probe_scale = max(abs(4 * a), abs(2 * b), abs(c), abs(actual), scale2)
    if abs(predicted - actual) > _PROBE_RELATIVE * probe_scale:
        logger.debug("Probe at x=2 disagrees with quadratic model for %s", problem.target)
        return None

    if abs(a) <= _LINEAR_RELATIVE * max(abs(b), abs(c)):
        if abs(b) > _MIN_SLOPE:
            return _Outcome([_polish(problem, -c / b)], "linear")
        slope = _wide_slope(problem, c)
        if slope is None:
            return None
        root = _polish(problem, -c / slope)
        if not problem.accepts(root):
            return None
        return _Outcome([root], "linear")

    roots = []
    for root in numerical.quadratic_roots(a, b, c):
        roots.append(Complex(*root) if isinstance(root, tuple) else _polish(problem, root))
    return _Outcome(roots, "quadratic")


def _wide_slope(problem: _Problem, c: float) -> float | None:
    """Slope of a linear residual too flat to register between -1 and 1.

    Samples at ``x = ±2^k`` for growing k until the two residuals differ
    by more than rounding noise.
    """
    if c == 0:
        return None
    for k in range(4, 1024, 4):
        s = 2.0 ** k
        high, low = problem.real_residual(s), problem.real_residual(-s)
        if not (math.isfinite(high) and math.isfinite(low)):
            return None
        if abs(high - low) > _PROBE_RELATIVE * max(abs(high), abs(low), abs(c)):
            logger.debug("Slope of %s resolved at x=±2^%d", problem.target, k)
            return (high - low) / (2 * s)
    return None


def _polish(problem: _Problem, x: float, rounds: int = 5) -> float:
    """Refine a sampled root with Newton steps scaled to the root itself.

    Samples one unit apart lose precision when the slope is tiny next to
    the constant term; a step is kept only if it shrinks the residual.
    """
    fx = problem.real_residual(x)
    for _ in range(rounds):
        if not math.isfinite(fx) or fx == 0:
            break
        h = 1e-6 * abs(x) if x != 0 else 1e-6
        derivative = (problem.real_residual(x + h) - problem.real_residual(x - h)) / (2 * h)
        if not math.isfinite(derivative) or derivative == 0:
            break
        candidate = x - fx / derivative
        f_candidate = problem.real_residual(candidate)
        if not abs(f_candidate) < abs(fx):
            break
        x, fx = candidate, f_candidate
    return x


def _numerical_fallback(problem: _Problem) -> _Outcome | None:
    """Bracket-and-bisect, then identity probing, then Newton-Raphson."""
    for root in numerical.bracket_roots(problem.real_residual):
        if problem.accepts(root):
            return _Outcome([root], "bisection")
        logger.debug("Rejected bracketed candidate %g for %s", root, problem.target)

    probes = [problem.residual(x) for x in numerical.IDENTITY_PROBES]
    if all(res.is_finite and _vanishes(res.abs(), scale, 1e-9) for res, scale in probes):
        return _Outcome([], "identity", infinite=True)

    for seed in numerical.NEWTON_SEEDS:
        _, scale = problem.residual(seed)
        tolerance = _ACCEPT_RELATIVE * max(1.0, scale if math.isfinite(scale) else 1.0)
        root = numerical.newton(problem.real_residual, seed, tolerance)
        if root is not None and problem.accepts(root):
            logger.debug("Newton converged from seed %g for %s", seed, problem.target)
            return _Outcome([root], "newton")
    return None


STRATEGIES = (_direct_isolation, _quadratic_sampling, _numerical_fallback)


def _verified(problem: _Problem, value) -> tuple[Complex, Complex] | None:
    left, right = problem.sides(value)
    if not (left.is_finite and right.is_finite):
        return None
    diff = (left - right).abs()
    magnitude = max(left.abs(), right.abs())
    if magnitude > _VERIFY_ABSOLUTE_BELOW:
        ok = diff <= _VERIFY_TOLERANCE * magnitude
    else:
        ok = diff <= _VERIFY_TOLERANCE
    return (left, right) if ok else None


def _try_value(node: Node):
    try:
        return evaluate_mixed(node)
    except EvaluationError:
        return None


def _balance_check(result: SolveResult, left: Node, right: Node) -> SolveResult:
    left_value, right_value = _try_value(left), _try_value(right)
    if left_value is None or right_value is None:
        difference = math.nan
    else:
        difference = _magnitude(Complex.from_value(left_value) - Complex.from_value(right_value))
    scale = max(1.0, _magnitude(left_value or 0.0), _magnitude(right_value or 0.0))
    balanced = math.isfinite(difference) and difference <= 1e-9 * scale
    result.steps.append(SolutionStep("balance_check", {
        "left": left_value,
        "right": right_value,
        "balanced": balanced,
        "difference": difference,
    }))
    if not balanced:
        result.steps.append(SolutionStep("no_solution", {
            "reason": "The equation has no unknowns and its sides differ.",
        }))
        result.error = "No solution: the equation is never true."
    return result


def _pick_target(remaining: list, solve_for: str | None,
                 all_names: list) -> tuple[str | None, str | None]:
    """Return ``(target, error)`` for the unknowns left after substitution."""
    if solve_for is not None:
        if solve_for not in all_names:
            return None, f"Variable '{solve_for}' does not appear in the equation."
        others = [name for name in remaining if name != solve_for]
        if others:
            return None, ("Cannot solve for " + solve_for
                          + ": no value for " + ", ".join(others) + ".")
        return solve_for, None
    if len(remaining) > 1:
        return None, ("Several unknowns without values: " + ", ".join(remaining)
                      + ". Provide values or choose one to solve for.")
    return (remaining[0] if remaining else None), None


def solve(equation: str, bindings: dict | None = None,
          solve_for: str | None = None) -> SolveResult:
    """Solve *equation* for its one remaining unknown.

    *bindings* maps variable names to known values; ``None`` or NaN marks a
    value as unknown. Catalog constants fill in names the caller does not
    bind. Without ``=`` the expression is just evaluated. Malformed input
    raises ParseError; every other failure comes back as a result with
    ``error`` set.
    """
    result = SolveResult(variable=solve_for)
    text = normalize_latex(equation)
    parsed = parse(text)
    all_names = variables_in(parsed)
    bindings = bindings or {}

    values = prefill(
        name for name in all_names
        if name not in RESERVED_NAMES and name not in bindings and name != solve_for
    )
    values.update({
        name: value for name, value in _known_values(bindings).items()
        if name != solve_for
    })
    substituted = substitute(text, values)
    parsed = parse(substituted)
    remaining = [name for name in variables_in(parsed) if name not in RESERVED_NAMES]

    # ── Expression only ───────────────────────────────────────────────
    if not parsed.is_equation:
        result.steps.append(SolutionStep("substitution", {
            "expression": substituted, "values": dict(values),
        }))
        if remaining:
            result.error = "No value for: " + ", ".join(remaining) + "."
            return result
        value = _try_value(parsed.expression)
        result.solved_value = value
        result.all_values = [value]
        result.steps.append(SolutionStep("expression_result", {"value": value}))
        return result

    # ── Equation ─────────────────────────────────────────────────────
    left, right = parsed.left, parsed.right
    left_text, right_text = (side.strip() for side in substituted.split("=", 1))
    result.steps.append(SolutionStep("substitution", {
        "left": left_text,
        "right": right_text,
        "left_value": _try_value(left),
        "right_value": _try_value(right),
        "values": dict(values),
    }))

    target, error = _pick_target(remaining, solve_for, all_names)
    if error is not None:
        logger.info("Cannot solve %r: %s", equation, error)
        result.error = error
        return result
    if target is None:
        return _balance_check(result, left, right)

    result.variable = target
    result.steps.append(SolutionStep("isolating_variable", {
        "variable": target,
        "equation": f"{to_source(left)} = {to_source(right)}",
    }))
    problem = _Problem(target, left, right)

    outcome = None
    for strategy in STRATEGIES:
        logger.debug("Trying %s for %s", strategy.__name__.lstrip("_"), target)
        outcome = strategy(problem)
        if outcome is not None:
            break

    if outcome is None:
        result.steps.append(SolutionStep("no_solution", {
            "reason": f"No strategy found a value for {target}.",
        }))
        result.error = f"Could not find a solution for {target}."
        logger.info("No solution found for %r", equation)
        return result

    if outcome.infinite:
        result.infinite_solutions = True
        result.steps.append(SolutionStep("result", {
            "variable": target, "value": None, "all_values": [],
            "method": outcome.method, "infinite_solutions": True,
        }))
        return result

    solved = [demote(v) if isinstance(v, Complex) else v for v in outcome.values]
    result.solved_value = solved[0]
    result.all_values = solved
    result.steps.append(SolutionStep("result", {
        "variable": target, "value": solved[0], "all_values": list(solved),
        "method": outcome.method,
    }))

    checked = _verified(problem, solved[0])
    if checked is not None:
        result.steps.append(SolutionStep("verification", {
            "left": demote(checked[0]), "right": demote(checked[1]),
        }))
    else:
        logger.info("Solution %s = %s did not verify", target, solved[0])
    return result
