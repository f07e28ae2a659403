import numpy as np
import pytest

from equasolver.complex_number import Complex
from equasolver.errors import ParseError
from equasolver.system import gaussian_solve, solve_system


class TestSolveSystem:
    def test_linear_two_by_two(self):
        result = solve_system(["x + y = 3", "x - y = 1"])
        assert result.success
        assert result.values["x"].real == pytest.approx(2.0, abs=1e-6)
        assert result.values["y"].real == pytest.approx(1.0, abs=1e-6)

    def test_circle_and_line_positive_root(self):
        result = solve_system(["x^2 + y^2 = 1", "y = x"], {"x": 0.5, "y": 0.5})
        assert result.success
        assert result.values["x"].real == pytest.approx(0.70710678, abs=1e-6)
        assert result.values["y"].real == pytest.approx(0.70710678, abs=1e-6)

    def test_circle_and_line_negative_root(self):
        result = solve_system(["x^2 + y^2 = 1", "y = x"], {"x": -0.5, "y": -0.5})
        assert result.success
        assert result.values["x"].real == pytest.approx(-0.70710678, abs=1e-6)

    def test_three_variables(self):
        result = solve_system([
            "x + y + z = 6",
            "2*x - y + z = 3",
            "x + 2*y - z = 2",
        ])
        assert result.success
        assert result.values["x"].real == pytest.approx(1.0, abs=1e-6)
        assert result.values["y"].real == pytest.approx(2.0, abs=1e-6)
        assert result.values["z"].real == pytest.approx(3.0, abs=1e-6)

    def test_complex_root_from_complex_guess(self):
        result = solve_system(["x^2 + 1 = 0"], {"x": Complex(0, 0.5)})
        assert result.success
        assert result.values["x"].real == pytest.approx(0.0, abs=1e-6)
        assert result.values["x"].imag == pytest.approx(1.0, abs=1e-6)

    def test_bare_expression_is_residual(self):
        result = solve_system(["x - 4"])
        assert result.values["x"].real == pytest.approx(4.0, abs=1e-6)

    def test_variable_count_mismatch(self):
        result = solve_system(["x + y = 1"])
        assert not result.success
        assert "Number of variables" in result.error
        assert "x, y" in result.error

    def test_reserved_constants_are_not_unknowns(self):
        result = solve_system(["x = PI"])
        assert result.success
        assert result.values["x"].real == pytest.approx(3.14159265, abs=1e-6)

    def test_singular_jacobian(self):
        result = solve_system(["x + y = 1", "2*x + 2*y = 2"])
        assert not result.success
        assert "Singular" in result.error

    def test_iteration_cap(self):
        result = solve_system(["x^2 + 1 = 0"], {"x": 0.5}, max_iterations=3)
        assert not result.success
        assert result.iterations == 3
        assert "x" in result.values

    def test_empty_system(self):
        assert not solve_system([]).success

    def test_parse_error_propagates(self):
        with pytest.raises(ParseError):
            solve_system(["x + = 1"])

    def test_defaults_come_from_settings(self, monkeypatch):
        monkeypatch.setenv("EQUASOLVER_SYSTEM_MAX_ITERATIONS", "1")
        result = solve_system(["x^3 = 27"], {"x": 10})
        assert not result.success
        assert result.iterations == 1


def test_gaussian_solve_pivots() -> None:
    matrix = np.array([[0.0, 1.0], [1.0, 0.0]], dtype=np.complex128)
    solution = gaussian_solve(matrix, np.array([2.0, 3.0]))
    assert solution == pytest.approx(np.array([3.0, 2.0]))


def test_gaussian_solve_singular() -> None:
    matrix = np.array([[1.0, 2.0], [2.0, 4.0]])
    assert gaussian_solve(matrix, np.array([1.0, 2.0])) is None
