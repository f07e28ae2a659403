"""LaTeX normalisation pipeline.

Rewrites LaTeX-flavoured input into the explicit-operator notation that
:mod:`equasolver.grammar` understands. Each pass is a separate function and
assumes every earlier pass has already run, so the order in
:func:`normalize_latex` matters. No semantic validation happens here; bad
input comes out the other end and is rejected by the parser.
"""

import re

# Phase 2: commands removed outright or unwrapped to their argument
_LABEL_COMMANDS = re.compile(r"\\(?:text|textrm|textit|mbox)\{[^{}]*\}")
_STYLE_COMMANDS = ("mathrm", "mathbf", "mathit", "mathsf", "mathtt", "mathcal",
                   "boldsymbol", "operatorname")
_SPACING_COMMANDS = [
    r"\\left(?![A-Za-z])", r"\\right(?![A-Za-z])",
    r"\\displaystyle", r"\\textstyle",
    r"\\[Bb]igg?[lr]?(?![A-Za-z])",
    r"\\qquad", r"\\quad", r"\\[,;:! ]",
]

# Phase 3: decorations discarded in favour of the decorated symbol
_DECORATION_RE = re.compile(
    r"\\(?:vec|hat|bar|dot|ddot|tilde)(?![A-Za-z])\s*(?:\{([^{}]*)\}|([A-Za-z0-9]))"
)

# Phase 4: operator commands and their Unicode look-alikes
_OPERATORS = [
    (r"\\cdot(?![A-Za-z])", "*"),
    (r"\\times(?![A-Za-z])", "*"),
    (r"\\div(?![A-Za-z])", "/"),
    (r"\\pm(?![A-Za-z])", "+"),
    (r"\\mp(?![A-Za-z])", "-"),
    (r"\\approx(?![A-Za-z])", "="),
    (r"\\rightarrow(?![A-Za-z])", " "),
    (r"\\to(?![A-Za-z])", " "),
    ("\u00b7", "*"),
    ("\u00d7", "*"),
    ("\u00f7", "/"),
    ("\u2212", "-"),
    ("\u221a", "sqrt"),
]

_LIMIT_RE = re.compile(r"\\lim_\{[^{}]*\}")

FUNCTION_NAMES = ("asin", "acos", "atan", "arcsin", "arccos", "arctan",
                  "sin", "cos", "tan", "sqrt", "abs", "exp", "log", "ln")
_FUNCTION_RE = re.compile(r"\\(" + "|".join(FUNCTION_NAMES) + r")(?![A-Za-z])")
_ARC_NAMES = {"arcsin": "asin", "arccos": "acos", "arctan": "atan"}

# Phase 10: Greek letters spelled out; pi and infinity become reserved names
GREEK = {
    "alpha": "alpha", "beta": "beta", "gamma": "gamma", "delta": "delta",
    "epsilon": "epsilon", "varepsilon": "epsilon", "zeta": "zeta",
    "eta": "eta", "theta": "theta", "vartheta": "theta", "iota": "iota",
    "kappa": "kappa", "lambda": "lambda", "mu": "mu", "nu": "nu",
    "xi": "xi", "rho": "rho", "sigma": "sigma", "tau": "tau",
    "phi": "phi", "varphi": "phi", "chi": "chi", "psi": "psi",
    "omega": "omega",
    "Gamma": "Gamma", "Delta": "Delta", "Theta": "Theta",
    "Lambda": "Lambda", "Xi": "Xi", "Sigma": "Sigma", "Phi": "Phi",
    "Psi": "Psi", "Omega": "Omega",
    "pi": "PI", "Pi": "PI", "infty": "INF",
}
_GREEK_RE = re.compile(
    r"\\(" + "|".join(sorted(GREEK, key=len, reverse=True)) + r")(?![A-Za-z])"
    r"(?:\s*([A-Za-z])(?![A-Za-z0-9_]))?"
)
_UNGLUED = ("PI", "INF")

# "\sin\theta" reads as sin(theta)
_FUNCTION_GREEK_RE = re.compile(
    r"\\(" + "|".join(FUNCTION_NAMES) + r")\s*(\\(?:"
    + "|".join(sorted(GREEK, key=len, reverse=True)) + r"))(?![A-Za-z])"
)
_UNICODE_GREEK = {"\u03c0": "PI", "\u221e": "INF", "\u0394": "Delta",
                  "\u03b8": "theta", "\u03bb": "lambda", "\u03bc": "mu",
                  "\u03c9": "omega"}

_IMAGINARY_RE = re.compile(r"(?<![A-Za-z0-9_])i(?![A-Za-z0-9_])")

# Implicit products: "2x", "3(", ")x", ")(" but never "1e5" or "x2"
_NUMBER_PRODUCT_RE = re.compile(
    r"(?<![A-Za-z_\d.])(\d+(?:\.\d+)?)(?![eE][+-]?\d)\s*(?=[A-Za-z(])"
)
_PAREN_PRODUCT_RE = re.compile(r"\)\s*(?=[A-Za-z(])")
# Reserved constants next to a name: "PI r", "IN PI", "x PI"
_CONSTANT_AFTER_RE = re.compile(r"(?<![A-Za-z0-9_])(PI|INF|IN)\s+(?=[A-Za-z(])")
_CONSTANT_BEFORE_RE = re.compile(r"(?<=[A-Za-z0-9_])\s+(?=(?:PI|INF|IN)(?![A-Za-z0-9_]))")


# ── Brace helpers ───────────────────────────────────────────────────────

def _braced(text: str, start: int) -> tuple[str, int] | None:
    """Return the contents of the balanced ``{...}`` group opening at *start*.

    The second element is the index just past the closing brace. ``None``
    when *start* is not an opening brace or the group never closes.
    """
    if start >= len(text) or text[start] != "{":
        return None
    depth = 0
    for pos in range(start, len(text)):
        if text[pos] == "{":
            depth += 1
        elif text[pos] == "}":
            depth -= 1
            if depth == 0:
                return text[start + 1:pos], pos + 1
    return None


def _rewrite_groups(text: str, marker: str, render) -> str:
    """Replace every *marker* followed by a braced group with ``render(inner)``."""
    out = []
    pos = 0
    while True:
        found = text.find(marker, pos)
        if found < 0:
            out.append(text[pos:])
            return "".join(out)
        group = _braced(text, found + len(marker))
        if group is None:
            out.append(text[pos:found + len(marker)])
            pos = found + len(marker)
            continue
        inner, end = group
        out.append(text[pos:found])
        out.append(render(_rewrite_groups(inner, marker, render)))
        pos = end


# ── Passes ──────────────────────────────────────────────────────────────

def strip_math_delimiters(text: str) -> str:
    """Pass 1: drop ``$$...$$`` / ``$...$`` wrappers."""
    result = text.strip()
    for delim in ("$$", "$"):
        if len(result) >= 2 * len(delim) and result.startswith(delim) and result.endswith(delim):
            return result[len(delim):-len(delim)].strip()
    return result


def remove_style_commands(text: str) -> str:
    """Pass 2: delete labels, unwrap font commands, remove spacing commands."""
    result = _LABEL_COMMANDS.sub("", text)
    for command in _STYLE_COMMANDS:
        result = _rewrite_groups(result, "\\" + command, lambda inner: inner)
    for pattern in _SPACING_COMMANDS:
        result = re.sub(pattern, "", result)
    return result


def unwrap_decorations(text: str) -> str:
    """Pass 3: ``\\vec{v}`` and ``\\hat x`` become ``v`` and ``x``."""
    return _DECORATION_RE.sub(lambda m: m.group(1) if m.group(1) is not None else m.group(2), text)


def map_operators(text: str) -> str:
    """Pass 4: operator commands to plain operators."""
    result = text
    for pattern, replacement in _OPERATORS:
        result = re.sub(pattern, replacement, result)
    return result


def collapse_limits(text: str) -> str:
    """Pass 5: ``\\lim_{x \\to 0}`` collapses to the token ``lim``."""
    return _LIMIT_RE.sub("lim ", text)


def convert_scripts(text: str) -> str:
    """Pass 6: ``^{E}`` to ``^(E)`` and ``_{S}`` to ``_S``."""
    result = _rewrite_groups(text, "^", lambda inner: f"^({inner})")
    return _rewrite_groups(result, "_", lambda inner: "_" + re.sub(r"\s+", "", inner))


def expand_fractions(text: str) -> str:
    """Pass 7: ``\\frac{A}{B}`` to ``(A)/(B)``, innermost first."""
    result = re.sub(r"\\[dt]frac(?![A-Za-z])", r"\\frac", text)
    while True:
        start = result.rfind("\\frac{")
        if start < 0:
            return result
        numerator = _braced(result, start + len("\\frac"))
        if numerator is None:
            return result
        denominator = _braced(result, numerator[1])
        if denominator is None:
            return result
        result = (f"{result[:start]}({numerator[0]})/({denominator[0]})"
                  f"{result[denominator[1]:]}")


def expand_roots(text: str) -> str:
    """Pass 8: ``\\sqrt[N]{X}`` to ``(X)^(1/N)`` and ``\\sqrt{X}`` to ``sqrt(X)``."""
    result = text
    while True:
        match = re.search(r"\\sqrt\[([^\]]*)\]", result)
        if match is None:
            break
        radicand = _braced(result, match.end())
        if radicand is None:
            break
        result = (f"{result[:match.start()]}({radicand[0]})^(1/{match.group(1).strip()})"
                  f"{result[radicand[1]:]}")
    return _rewrite_groups(result, "\\sqrt", lambda inner: f"sqrt({inner})")


def strip_function_backslashes(text: str) -> str:
    """Pass 9: ``\\sin(x)`` to ``sin(x)``; ``\\arcsin`` maps to ``asin``."""
    def _name(match):
        return _ARC_NAMES.get(match.group(1), match.group(1))

    result = _FUNCTION_GREEK_RE.sub(lambda m: f"{_name(m)}({m.group(2)})", text)
    return _FUNCTION_RE.sub(_name, result)


def map_greek_letters(text: str) -> str:
    """Pass 10: Greek commands to names, gluing a trailing single letter.

    ``\\Delta E`` becomes ``DeltaE`` so that it reads as one identifier.
    """
    def _repl(match):
        name, letter = GREEK[match.group(1)], match.group(2)
        if name in _UNGLUED:
            start = match.start()
            if start > 0 and match.string[start - 1].isalnum():
                name = " " + name
            return name if letter is None else f"{name} {letter}"
        if letter is None:
            return name
        return name + letter

    result = _GREEK_RE.sub(_repl, text)
    for char, name in _UNICODE_GREEK.items():
        result = result.replace(char, name)
    return result


def normalize_imaginary_unit(text: str) -> str:
    """Pass 11: a standalone ``i`` becomes the reserved name ``IN``."""
    return _IMAGINARY_RE.sub("IN", text)


def insert_implicit_products(text: str) -> str:
    """Make juxtaposed products explicit: ``2x`` to ``2*x``, ``)(`` to ``)*(``.

    A reserved constant separated from a neighbouring name by spaces is a
    product too, so ``PI r`` becomes ``PI*r``.
    """
    result = _NUMBER_PRODUCT_RE.sub(r"\1*", text)
    result = _CONSTANT_AFTER_RE.sub(r"\1*", result)
    result = _CONSTANT_BEFORE_RE.sub("*", result)
    return _PAREN_PRODUCT_RE.sub(")*", result)


_PASSES = (
    strip_math_delimiters,
    remove_style_commands,
    unwrap_decorations,
    map_operators,
    collapse_limits,
    convert_scripts,
    expand_fractions,
    expand_roots,
    strip_function_backslashes,
    map_greek_letters,
    normalize_imaginary_unit,
    insert_implicit_products,
)


def normalize_latex(text: str) -> str:
    """Run the full normalisation pipeline over *text*."""
    result = text
    for step in _PASSES:
        result = step(result)
    return result.strip()
