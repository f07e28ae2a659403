"""Tokenizer and recursive-descent parser for explicit-operator math text.

Grammar, lowest precedence first::

    equation   := expression ('=' expression)?
    expression := term (('+' | '-') term)*
    term       := power (('*' | '/') power)*
    power      := unary ('^' power)?
    unary      := ('-' | '+') unary | primary
    primary    := call | NUMBER | IDENT | '(' expression ')'
    call       := IDENT '(' expression (',' expression)* ')'

Unary minus binds tighter than ``^``, so ``-2^2`` is ``(-2)^2``.
"""

import re
from dataclasses import dataclass

from equasolver.errors import ParseError
from equasolver.nodes import (
    BinaryOp, Call, Constant, Node, ParseResult, UnaryOp, Variable,
    collect_variables,
)

# Accepted argument counts, (min, max), for every callable name.
FUNCTIONS = {
    "sin": (1, 1),
    "cos": (1, 1),
    "tan": (1, 1),
    "asin": (1, 1),
    "acos": (1, 1),
    "atan": (1, 1),
    "sqrt": (1, 1),
    "abs": (1, 1),
    "exp": (1, 1),
    "ln": (1, 2),
    "log": (1, 2),
    "pow": (2, 2),
}

IMAGINARY_UNIT = "IN"

_TOKEN_RE = re.compile(
    r"(?P<number>\d+(?:\.\d+)?(?:[eE][+-]?\d+)?)"
    r"|(?P<ident>[A-Za-z][A-Za-z0-9_]*)"
    r"|(?P<op>[-+*/^(),=])"
)


@dataclass(frozen=True)
class Token:
    kind: str
    value: str
    position: int


def tokenize(text: str) -> list[Token]:
    """Split *text* into tokens, raising ParseError on any stray character."""
    tokens = []
    pos = 0
    while pos < len(text):
        if text[pos].isspace():
            pos += 1
            continue
        match = _TOKEN_RE.match(text, pos)
        if match is None:
            raise ParseError(f"Unexpected character '{text[pos]}'", pos)
        tokens.append(Token(match.lastgroup, match.group(), pos))
        pos = match.end()
    tokens.append(Token("eof", "", len(text)))
    return tokens


class Parser:
    """Recursive descent parser producing :mod:`equasolver.nodes` trees."""

    def __init__(self, text: str):
        self.text = text
        self.tokens = tokenize(text)
        self.pos = 0

    def peek(self) -> Token:
        return self.tokens[self.pos]

    def consume(self) -> Token:
        tok = self.tokens[self.pos]
        if tok.kind != "eof":
            self.pos += 1
        return tok

    def expect(self, value: str) -> Token:
        tok = self.consume()
        if tok.value != value:
            found = f"'{tok.value}'" if tok.kind != "eof" else "end of input"
            raise ParseError(f"Expected '{value}' but found {found}", tok.position)
        return tok

    # ── Grammar rules ────────────────────────────────────────────────

    def parse(self) -> ParseResult:
        left = self.expression()
        if self.peek().value == "=":
            self.consume()
            right = self.expression()
            self._expect_end()
            return ParseResult(left=left, right=right)
        self._expect_end()
        return ParseResult(expression=left)

    def expression(self) -> Node:
        node = self.term()
        while self.peek().kind == "op" and self.peek().value in ("+", "-"):
            op = self.consume().value
            node = BinaryOp(op, node, self.term())
        return node

    def term(self) -> Node:
        node = self.power()
        while self.peek().kind == "op" and self.peek().value in ("*", "/"):
            op = self.consume().value
            node = BinaryOp(op, node, self.power())
        return node

    def power(self) -> Node:
        node = self.unary()
        if self.peek().value == "^":
            self.consume()
            node = BinaryOp("^", node, self.power())
        return node

    def unary(self) -> Node:
        tok = self.peek()
        if tok.kind == "op" and tok.value == "-":
            self.consume()
            if self.peek().kind == "number":
                return Constant(-float(self.consume().value))
            return UnaryOp("-", self.unary())
        if tok.kind == "op" and tok.value == "+":
            self.consume()
            return self.unary()
        return self.primary()

    def primary(self) -> Node:
        tok = self.consume()
        if tok.kind == "number":
            return Constant(float(tok.value))
        if tok.kind == "ident":
            if self.peek().value == "(":
                return self._call(tok)
            if tok.value in FUNCTIONS:
                raise ParseError(f"Function '{tok.value}' needs parenthesised arguments",
                                 tok.position)
            if tok.value == "i":
                return Variable(IMAGINARY_UNIT)
            return Variable(tok.value)
        if tok.value == "(":
            node = self.expression()
            self.expect(")")
            return node
        if tok.kind == "eof":
            raise ParseError("Unexpected end of input", tok.position)
        raise ParseError(f"Unexpected token '{tok.value}'", tok.position)

    def _call(self, name_tok: Token) -> Call:
        name = name_tok.value
        if name not in FUNCTIONS:
            raise ParseError(f"Unknown function: {name}", name_tok.position)
        self.expect("(")
        args = [self.expression()]
        while self.peek().value == ",":
            self.consume()
            args.append(self.expression())
        self.expect(")")
        low, high = FUNCTIONS[name]
        if not low <= len(args) <= high:
            wanted = str(low) if low == high else f"{low} or {high}"
            raise ParseError(
                f"Function '{name}' takes {wanted} argument(s), got {len(args)}",
                name_tok.position,
            )
        return Call(name, tuple(args))

    def _expect_end(self) -> None:
        tok = self.peek()
        if tok.kind != "eof":
            raise ParseError(f"Unexpected token '{tok.value}'", tok.position)


def parse(text: str) -> ParseResult:
    """Parse an expression or a single equation."""
    if not text or not text.strip():
        raise ParseError("Expression cannot be empty.", 0)
    return Parser(text).parse()


def parse_expression(text: str) -> Node:
    """Parse *text* and reject equations."""
    result = parse(text)
    if result.is_equation:
        raise ParseError("Expected an expression, found an equation", text.index("="))
    return result.expression


def variables_in(result: ParseResult) -> list[str]:
    """Sorted variable names across every tree in *result*."""
    if result.is_equation:
        return sorted(set(collect_variables(result.left)) | set(collect_variables(result.right)))
    return collect_variables(result.expression)
