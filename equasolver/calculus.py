"""Symbolic differentiation, simplification and table integration via SymPy.

Input is parsed with the EquaSolver grammar, converted to a SymPy
expression, transformed, and printed back in the same explicit-operator
notation (``^`` for powers, ``PI`` / ``EN`` / ``IN`` for the constants).
"""

import re

import sympy

from equasolver.errors import CalculusError
from equasolver.grammar import parse_expression
from equasolver.latex import normalize_latex
from equasolver.nodes import BinaryOp, Call, Constant, Node, UnaryOp, Variable, collect_variables

_SYMPY_CONSTANTS = {
    "PI": sympy.pi,
    "pi": sympy.pi,
    "EN": sympy.E,
    "e": sympy.E,
    "IN": sympy.I,
    "i": sympy.I,
    "INF": sympy.oo,
    "INFINITY": sympy.oo,
    "infinity": sympy.oo,
}

_SYMPY_FUNCTIONS = {
    "sin": sympy.sin,
    "cos": sympy.cos,
    "tan": sympy.tan,
    "asin": sympy.asin,
    "acos": sympy.acos,
    "atan": sympy.atan,
    "sqrt": sympy.sqrt,
    "abs": sympy.Abs,
    "exp": sympy.exp,
    "ln": sympy.log,
}

# SymPy spellings mapped back to the grammar's names.
_OUTPUT_NAMES = [
    (r"\bAbs\(", "abs("),
    (r"\bpi\b", "PI"),
    (r"\bE\b", "EN"),
    (r"\bI\b", "IN"),
    (r"\boo\b", "INF"),
]

_DERIVATIVE_RE = re.compile(r"d/d([A-Za-z][A-Za-z0-9_]*)\s*\((.*)\)", re.DOTALL)
_INTEGRAL_RE = re.compile(r"int\s*\((.*)\)\s*(?:d([A-Za-z][A-Za-z0-9_]*))?", re.DOTALL)


def to_sympy(node: Node):
    """Convert an EquaSolver tree into the equivalent SymPy expression."""
    if isinstance(node, Constant):
        if node.value != node.value or node.value in (float("inf"), float("-inf")):
            return sympy.Float(node.value)
        return sympy.Rational(repr(node.value))
    if isinstance(node, Variable):
        if node.name in _SYMPY_CONSTANTS:
            return _SYMPY_CONSTANTS[node.name]
        return sympy.Symbol(node.name)
    if isinstance(node, UnaryOp):
        return -to_sympy(node.operand)
    if isinstance(node, BinaryOp):
        left, right = to_sympy(node.left), to_sympy(node.right)
        if node.op == "+":
            return left + right
        if node.op == "-":
            return left - right
        if node.op == "*":
            return left * right
        if node.op == "/":
            return left / right
        return sympy.Pow(left, right)
    if isinstance(node, Call):
        args = [to_sympy(arg) for arg in node.args]
        if node.name in ("log", "ln"):
            return sympy.log(args[0]) if len(args) == 1 else sympy.log(args[1], args[0])
        if node.name == "pow":
            return sympy.Pow(args[0], args[1])
        return _SYMPY_FUNCTIONS[node.name](*args)
    raise TypeError(f"Unknown node type: {type(node).__name__}")


def format_sympy(expr) -> str:
    """Print a SymPy expression in EquaSolver notation."""
    text = str(expr).replace("**", "^")
    for pattern, replacement in _OUTPUT_NAMES:
        text = re.sub(pattern, replacement, text)
    return text


def _parse(expr: str) -> Node:
    return parse_expression(normalize_latex(expr))


def differentiate(expr: str, variable: str) -> str:
    """Derivative of *expr* with respect to *variable*, simplified."""
    result = sympy.diff(to_sympy(_parse(expr)), sympy.Symbol(variable))
    return format_sympy(sympy.simplify(result))


def simplify(expr: str) -> str:
    return format_sympy(sympy.simplify(to_sympy(_parse(expr))))


# ── Table integration ───────────────────────────────────────────────────

def _antiderivative(node: Node, variable: str):
    """Look *node* up in the integration table, splitting sums and constant factors."""
    x = sympy.Symbol(variable)
    if variable not in collect_variables(node):
        return to_sympy(node) * x
    if isinstance(node, Variable):
        return x ** 2 / 2
    if isinstance(node, UnaryOp):
        return -_antiderivative(node.operand, variable)
    if isinstance(node, BinaryOp):
        if node.op in ("+", "-"):
            left = _antiderivative(node.left, variable)
            right = _antiderivative(node.right, variable)
            return left + right if node.op == "+" else left - right
        if node.op == "*":
            if variable not in collect_variables(node.left):
                return to_sympy(node.left) * _antiderivative(node.right, variable)
            if variable not in collect_variables(node.right):
                return to_sympy(node.right) * _antiderivative(node.left, variable)
        if node.op == "/" and variable not in collect_variables(node.right):
            return _antiderivative(node.left, variable) / to_sympy(node.right)
        if (node.op == "^" and node.left == Variable(variable)
                and variable not in collect_variables(node.right)):
            exponent = to_sympy(node.right)
            if exponent == -1:
                return sympy.log(x)
            return x ** (exponent + 1) / (exponent + 1)
    if isinstance(node, Call) and len(node.args) == 1 and node.args[0] == Variable(variable):
        if node.name == "sin":
            return -sympy.cos(x)
        if node.name == "cos":
            return sympy.sin(x)
        if node.name == "exp":
            return sympy.exp(x)
    raise CalculusError(f"Cannot integrate '{_describe(node)}' with respect to {variable}")


def _describe(node: Node) -> str:
    return format_sympy(to_sympy(node))


def integrate(expr: str, variable: str) -> str:
    """Antiderivative of *expr* (no constant of integration) from a fixed table.

    Handles powers of the variable (``x^-1`` gives ``log(x)``), ``sin``,
    ``cos``, ``exp``, constants, sums, and constant multiples; anything
    else raises CalculusError.
    """
    return format_sympy(sympy.simplify(_antiderivative(_parse(expr), variable)))


def evaluate_command(text: str) -> str:
    """Run a calculus command.

    ``d/dx(expr)`` differentiates, ``int(expr)dx`` integrates (``int(expr)``
    uses the expression's only variable, or ``x``), an equation is handled
    side by side, and anything else is simplified.
    """
    command = text.strip()
    if "=" in command:
        left, right = command.split("=", 1)
        return f"{evaluate_command(left)} = {evaluate_command(right)}"

    match = _DERIVATIVE_RE.fullmatch(command)
    if match:
        return differentiate(match.group(2), match.group(1))

    match = _INTEGRAL_RE.fullmatch(command)
    if match:
        body = match.group(1)
        variable = match.group(2)
        if variable is None:
            names = collect_variables(_parse(body))
            variable = names[0] if len(names) == 1 else "x"
        return integrate(body, variable)

    return simplify(command)
