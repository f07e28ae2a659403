import pytest

from equasolver import calculus
from equasolver.errors import CalculusError


class TestDifferentiate:
    def test_power(self):
        assert calculus.differentiate("x^2", "x") == "2*x"

    def test_other_symbols_are_constants(self):
        assert calculus.differentiate("a*x + b", "x") == "a"

    def test_trig(self):
        assert calculus.differentiate("sin(x)", "x") == "cos(x)"


class TestIntegrate:
    @pytest.mark.parametrize("expr,expected", [
        ("x", "x^2/2"),
        ("x^-1", "log(x)"),
        ("sin(x)", "-cos(x)"),
        ("cos(x)", "sin(x)"),
        ("exp(x)", "exp(x)"),
        ("3*x^2 + 2", "x^3 + 2*x"),
        ("PI", "PI*x"),
    ])
    def test_table(self, expr, expected):
        assert calculus.integrate(expr, "x") == expected

    def test_unsupported_integrand(self):
        with pytest.raises(CalculusError, match="Cannot integrate"):
            calculus.integrate("x*sin(x)", "x")

    def test_calculus_error_is_value_error(self):
        with pytest.raises(ValueError):
            calculus.integrate("tan(x)", "x")


class TestCommands:
    def test_derivative_command(self):
        assert calculus.evaluate_command("d/dx(x^3)") == "3*x^2"

    def test_integral_with_differential(self):
        assert calculus.evaluate_command("int(cos(x))dx") == "sin(x)"

    def test_integral_defaults_to_only_variable(self):
        assert calculus.evaluate_command("int(t^2)") == "t^3/3"

    def test_equation_handled_side_by_side(self):
        assert calculus.evaluate_command("y = d/dx(x^2)") == "y = 2*x"

    def test_simplify_fallback(self):
        assert calculus.evaluate_command("(x + 1)^2 - x^2") == "2*x + 1"
        assert calculus.evaluate_command("sin(x)^2 + cos(x)^2") == "1"
