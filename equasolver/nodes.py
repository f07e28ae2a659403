"""Expression tree node types.

The tree is a closed set of frozen dataclasses. Code that walks it
dispatches on the concrete type and must handle every variant.
"""

from dataclasses import dataclass
from typing import Union

BINARY_OPERATORS = ("+", "-", "*", "/", "^")


@dataclass(frozen=True)
class Constant:
    value: float


@dataclass(frozen=True)
class Variable:
    name: str


@dataclass(frozen=True)
class UnaryOp:
    op: str
    operand: "Node"


@dataclass(frozen=True)
class BinaryOp:
    op: str
    left: "Node"
    right: "Node"

    def __post_init__(self):
        if self.op not in BINARY_OPERATORS:
            raise ValueError(f"Unsupported binary operator: {self.op!r}")


@dataclass(frozen=True)
class Call:
    name: str
    args: tuple


Node = Union[Constant, Variable, UnaryOp, BinaryOp, Call]


@dataclass(frozen=True)
class ParseResult:
    """Either a bare expression or the two sides of an equation."""

    expression: Node | None = None
    left: Node | None = None
    right: Node | None = None

    @property
    def is_equation(self) -> bool:
        return self.left is not None and self.right is not None


def walk(node: Node):
    """Yield *node* and all of its descendants, parents first."""
    yield node
    if isinstance(node, (Constant, Variable)):
        return
    if isinstance(node, UnaryOp):
        yield from walk(node.operand)
    elif isinstance(node, BinaryOp):
        yield from walk(node.left)
        yield from walk(node.right)
    elif isinstance(node, Call):
        for arg in node.args:
            yield from walk(arg)
    else:
        raise TypeError(f"Unknown node type: {type(node).__name__}")


def collect_variables(node: Node) -> list[str]:
    """Return the sorted names of every Variable leaf under *node*."""
    return sorted({n.name for n in walk(node) if isinstance(n, Variable)})


# ── Serialisation ───────────────────────────────────────────────────────

_PRECEDENCE = {"+": 1, "-": 1, "*": 2, "/": 2, "^": 3}


def _fmt_constant(value: float) -> str:
    if value != value:
        return "(0/0)"
    if value in (float("inf"), float("-inf")):
        return "INF" if value > 0 else "(-INF)"
    text = repr(float(value))
    if text.endswith(".0"):
        text = text[:-2]
    return f"({text})" if value < 0 else text


def to_source(node: Node) -> str:
    """Render *node* as explicit-operator text that parses back to the same tree."""
    if isinstance(node, Constant):
        return _fmt_constant(node.value)
    if isinstance(node, Variable):
        return node.name
    if isinstance(node, UnaryOp):
        return f"-({to_source(node.operand)})"
    if isinstance(node, BinaryOp):
        prec = _PRECEDENCE[node.op]
        left = to_source(node.left)
        right = to_source(node.right)
        if isinstance(node.left, BinaryOp):
            left_prec = _PRECEDENCE[node.left.op]
            # ``^`` is right-associative, so an equal-precedence left child needs parens.
            if left_prec < prec or (left_prec == prec and node.op == "^"):
                left = f"({left})"
        if isinstance(node.right, BinaryOp):
            right_prec = _PRECEDENCE[node.right.op]
            if right_prec < prec or (right_prec == prec and node.op != "^"):
                right = f"({right})"
        return f"{left} {node.op} {right}"
    if isinstance(node, Call):
        return f"{node.name}({', '.join(to_source(a) for a in node.args)})"
    raise TypeError(f"Unknown node type: {type(node).__name__}")
