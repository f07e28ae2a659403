"""Tree-walking evaluators over the reals and the complex plane.

Both modes share one walk and differ only in how leaves, operators and
functions are computed. Arithmetic never raises on domain problems:
``sqrt(-1)`` is NaN in real mode, ``1/0`` is infinite. The only error
raised is :class:`EvaluationError` for a variable with no value.
"""

import math

import numpy as np

from equasolver.complex_number import Complex, I, ONE
from equasolver.errors import EvaluationError
from equasolver.nodes import BinaryOp, Call, Constant, Node, UnaryOp, Variable

# Imaginary parts smaller than this are treated as rounding noise.
DEMOTE_THRESHOLD = 1e-15

REAL_CONSTANTS = {
    "PI": math.pi,
    "pi": math.pi,
    "EN": math.e,
    "e": math.e,
    "INF": math.inf,
    "INFINITY": math.inf,
    "infinity": math.inf,
}

COMPLEX_CONSTANTS = {name: Complex(value, 0.0) for name, value in REAL_CONSTANTS.items()}
COMPLEX_CONSTANTS.update({"IN": I, "i": I})

RESERVED_NAMES = frozenset(COMPLEX_CONSTANTS)


def is_unknown(value) -> bool:
    """True for the sentinels that mean "no value": ``None`` and NaN."""
    if value is None:
        return True
    if isinstance(value, Complex):
        return value.is_nan
    if isinstance(value, complex):
        return math.isnan(value.real) or math.isnan(value.imag)
    return isinstance(value, (int, float, np.floating)) and math.isnan(value)


def _known(bindings: dict | None) -> dict:
    if not bindings:
        return {}
    return {name: value for name, value in bindings.items() if not is_unknown(value)}


class _TreeEvaluator:
    """Shared walk; subclasses supply the number system."""

    constants: dict = {}

    def __init__(self, bindings: dict | None = None):
        self.bindings = _known(bindings)

    def evaluate(self, node: Node):
        if isinstance(node, Constant):
            return self.number(node.value)
        if isinstance(node, Variable):
            return self.lookup(node.name)
        if isinstance(node, UnaryOp):
            if node.op != "-":
                raise EvaluationError(f"Unsupported unary operator: {node.op}")
            return self.negate(self.evaluate(node.operand))
        if isinstance(node, BinaryOp):
            return self.binary(node.op, self.evaluate(node.left), self.evaluate(node.right))
        if isinstance(node, Call):
            args = [self.evaluate(arg) for arg in node.args]
            return self.call(node.name, args)
        raise TypeError(f"Unknown node type: {type(node).__name__}")

    def lookup(self, name: str):
        # Caller bindings win over the built-in constants.
        if name in self.bindings:
            return self.coerce(name, self.bindings[name])
        if name in self.constants:
            return self.constants[name]
        raise EvaluationError(f"No value for variable '{name}'", name)

    def number(self, value: float):
        raise NotImplementedError

    def coerce(self, name: str, value):
        raise NotImplementedError

    def negate(self, value):
        raise NotImplementedError

    def binary(self, op: str, left, right):
        raise NotImplementedError

    def call(self, name: str, args: list):
        raise NotImplementedError


class RealEvaluator(_TreeEvaluator):
    """Evaluates to a float using NumPy float64 semantics."""

    constants = REAL_CONSTANTS

    _UNARY = {
        "sin": np.sin,
        "cos": np.cos,
        "tan": np.tan,
        "asin": np.arcsin,
        "acos": np.arccos,
        "atan": np.arctan,
        "sqrt": np.sqrt,
        "abs": np.abs,
        "exp": np.exp,
        "ln": np.log,
        "log": np.log,
    }

    def number(self, value: float) -> float:
        return float(value)

    def coerce(self, name: str, value) -> float:
        if isinstance(value, (Complex, complex)):
            if value.imag != 0:
                raise EvaluationError(
                    f"Variable '{name}' has a complex value; use complex evaluation", name
                )
            return float(value.real)
        return float(value)

    def negate(self, value: float) -> float:
        return -value

    def binary(self, op: str, left: float, right: float) -> float:
        a, b = np.float64(left), np.float64(right)
        with np.errstate(all="ignore"):
            if op == "+":
                result = a + b
            elif op == "-":
                result = a - b
            elif op == "*":
                result = a * b
            elif op == "/":
                result = np.divide(a, b)
            elif op == "^":
                result = np.power(a, b)
            else:
                raise EvaluationError(f"Unsupported operator: {op}")
        return float(result)

    def call(self, name: str, args: list) -> float:
        values = [np.float64(arg) for arg in args]
        with np.errstate(all="ignore"):
            if name in ("log", "ln") and len(values) == 2:
                base, value = values
                result = np.log(value) / np.log(base)
            elif name == "pow":
                result = np.power(values[0], values[1])
            elif name in self._UNARY:
                result = self._UNARY[name](values[0])
            else:
                raise EvaluationError(f"Unknown function: {name}")
        return float(result)


def _asin(z: Complex) -> Complex:
    # -i * log(iz + sqrt(1 - z^2))
    return -I * (I * z + (ONE - z * z).sqrt()).log()


def _acos(z: Complex) -> Complex:
    # -i * log(z + i*sqrt(1 - z^2))
    return -I * (z + I * (ONE - z * z).sqrt()).log()


def _atan(z: Complex) -> Complex:
    # (i/2) * log((1 - iz) / (1 + iz))
    return (I / 2) * ((ONE - I * z) / (ONE + I * z)).log()


class ComplexEvaluator(_TreeEvaluator):
    """Evaluates to a :class:`Complex`, with ``IN`` / ``i`` as the imaginary unit."""

    constants = COMPLEX_CONSTANTS

    _UNARY = {
        "sin": Complex.sin,
        "cos": Complex.cos,
        "tan": Complex.tan,
        "asin": _asin,
        "acos": _acos,
        "atan": _atan,
        "sqrt": Complex.sqrt,
        "exp": Complex.exp,
        "ln": Complex.log,
        "log": Complex.log,
    }

    def number(self, value: float) -> Complex:
        return Complex(float(value), 0.0)

    def coerce(self, name: str, value) -> Complex:
        return Complex.from_value(value)

    def negate(self, value: Complex) -> Complex:
        return -value

    def binary(self, op: str, left: Complex, right: Complex) -> Complex:
        if op == "+":
            return left + right
        if op == "-":
            return left - right
        if op == "*":
            return left * right
        if op == "/":
            return left / right
        if op == "^":
            return left.pow(right)
        raise EvaluationError(f"Unsupported operator: {op}")

    def call(self, name: str, args: list) -> Complex:
        if name in ("log", "ln") and len(args) == 2:
            base, value = args
            return value.log() / base.log()
        if name == "pow":
            return args[0].pow(args[1])
        if name == "abs":
            return Complex(args[0].abs(), 0.0)
        if name in self._UNARY:
            return self._UNARY[name](args[0])
        raise EvaluationError(f"Unknown function: {name}")


# ── Public entry points ─────────────────────────────────────────────────

def evaluate_real(node: Node, bindings: dict | None = None) -> float:
    return RealEvaluator(bindings).evaluate(node)


def evaluate_complex(node: Node, bindings: dict | None = None) -> Complex:
    return ComplexEvaluator(bindings).evaluate(node)


def demote(value: Complex) -> float | Complex:
    """Return a float when the imaginary part is negligible."""
    if abs(value.imag) < DEMOTE_THRESHOLD:
        return value.real
    return value


def evaluate_mixed(node: Node, bindings: dict | None = None) -> float | Complex:
    """Evaluate in complex mode, then demote to a float when effectively real."""
    return demote(evaluate_complex(node, bindings))
