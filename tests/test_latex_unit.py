import pytest

from equasolver import latex
from equasolver.grammar import parse
from equasolver.latex import normalize_latex


@pytest.mark.parametrize(
    "raw,expected",
    [
        (r"$\frac{1}{2}$", "(1)/(2)"),
        (r"$$x + 1$$", "x + 1"),
        (r"\frac{\frac{a}{b}}{c}", "((a)/(b))/(c)"),
        (r"\dfrac{a}{b}", "(a)/(b)"),
        (r"\sqrt{x}", "sqrt(x)"),
        (r"\sqrt[3]{8}", "(8)^(1/3)"),
        (r"x^{2}", "x^(2)"),
        (r"v_{0}", "v_0"),
        (r"a \cdot b", "a * b"),
        (r"a \times b", "a * b"),
        (r"6 \div 3", "6 / 3"),
        (r"a \approx b", "a = b"),
        (r"\sin(x)", "sin(x)"),
        (r"\arctan(x)", "atan(x)"),
        (r"\mathrm{m}", "m"),
        (r"\text{speed } v", "v"),
        (r"\vec{F} = m \cdot \vec{a}", "F = m * a"),
        (r"\hat x", "x"),
        (r"\left( x \right)", "( x )"),
        (r"\Delta E", "DeltaE"),
        (r"\pi", "PI"),
        (r"\infty", "INF"),
        (r"\theta_0", "theta_0"),
    ],
)
def test_normalize_latex(raw: str, expected: str) -> None:
    assert normalize_latex(raw) == expected


def test_pi_is_not_glued_to_next_letter() -> None:
    assert latex.map_greek_letters(r"\pi r") == "PI r"


def test_standalone_i_becomes_reserved_name() -> None:
    assert normalize_latex("i + 1") == "IN + 1"
    assert normalize_latex("sin(x)") == "sin(x)"
    assert normalize_latex("v_i") == "v_i"


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("2x", "2*x"),
        ("3(x + 1)", "3*(x + 1)"),
        ("(a)(b)", "(a)*(b)"),
        ("4i", "4*i"),
        ("x2", "x2"),
        ("1e5", "1e5"),
        ("2.5e-3", "2.5e-3"),
    ],
)
def test_implicit_products(raw: str, expected: str) -> None:
    assert normalize_latex(raw) == expected


def test_limit_collapses_to_token() -> None:
    assert latex.collapse_limits(r"\lim_{x  0} f") == "lim  f"


def test_fraction_passes_run_before_roots() -> None:
    assert normalize_latex(r"\sqrt{\frac{a}{b}}") == "sqrt((a)/(b))"


def test_unbalanced_fraction_is_left_for_the_parser() -> None:
    assert normalize_latex(r"\frac{1}{2") == r"\frac{1}{2"


@pytest.mark.parametrize(
    "raw,expected",
    [
        (r"A = \pi r^2", "A = PI*r^2"),
        (r"C = 2\pi r", "C = 2*PI*r"),
        (r"e^{i\pi}", "e^(IN*PI)"),
        (r"e^{i \pi}", "e^(IN*PI)"),
        (r"x \pi", "x*PI"),
    ],
)
def test_reserved_constants_next_to_names_multiply(raw: str, expected: str) -> None:
    assert normalize_latex(raw) == expected
    parse(normalize_latex(raw))


@pytest.mark.parametrize(
    "raw,expected",
    [
        (r"\sin\theta", "sin(theta)"),
        (r"\cos \alpha", "cos(alpha)"),
        (r"\arctan\phi", "atan(phi)"),
        (r"\sin\pi", "sin(PI)"),
    ],
)
def test_function_applied_to_greek_letter(raw: str, expected: str) -> None:
    assert normalize_latex(raw) == expected
