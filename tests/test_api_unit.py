import math

import pytest
from fastapi.testclient import TestClient

from backend.app import solver as bridge
from backend.app.main import app
from equasolver.complex_number import Complex


@pytest.fixture
def client():
    return TestClient(app)


# ── Bridge helpers ──────────────────────────────────────────────────────

def test_to_json_converts_complex_and_non_finite() -> None:
    data = bridge.to_json({"a": Complex(1.0, -2.0), "b": [math.nan, math.inf, 3.0], "c": "x"})
    assert data == {"a": {"real": 1.0, "imag": -2.0}, "b": [None, None, 3.0], "c": "x"}


def test_from_json() -> None:
    assert bridge.from_json({"real": 1.0, "imag": 2.0}) == Complex(1.0, 2.0)
    assert math.isnan(bridge.from_json({"real": None}).real)
    assert bridge.from_json(4.0) == 4.0
    assert bridge.from_json(None) is None


# ── Endpoints ───────────────────────────────────────────────────────────

class TestEvaluateEndpoint:
    def test_real_value(self, client):
        resp = client.post("/api/evaluate", json={"expression": "2 + 3"})
        assert resp.status_code == 200
        assert resp.json() == {"value": 5.0}

    def test_complex_value(self, client):
        resp = client.post("/api/evaluate", json={"expression": "sqrt(-4)"})
        value = resp.json()["value"]
        assert value["real"] == pytest.approx(0.0)
        assert value["imag"] == pytest.approx(2.0)

    def test_complex_binding(self, client):
        resp = client.post("/api/evaluate", json={
            "expression": "z * z",
            "bindings": {"z": {"real": 0, "imag": 2}},
        })
        assert resp.json()["value"] == pytest.approx(-4.0)

    def test_unbound_variable_is_null(self, client):
        resp = client.post("/api/evaluate", json={"expression": "x + 1"})
        assert resp.json() == {"value": None}

    def test_empty_expression(self, client):
        resp = client.post("/api/evaluate", json={"expression": "   "})
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Expression cannot be empty."

    def test_parse_error_is_bad_request(self, client):
        resp = client.post("/api/evaluate", json={"expression": "2 +* 3"})
        assert resp.status_code == 400
        assert "Unexpected token" in resp.json()["detail"]


def test_variables_endpoint(client) -> None:
    resp = client.post("/api/variables", json={
        "expression": "E = ME * SOL^2 + PI*r",
        "exclude_constants": True,
    })
    assert resp.json() == {"variables": ["E", "r"]}


class TestSolveEndpoint:
    def test_linear(self, client):
        resp = client.post("/api/solve", json={"equation": "2x + 3 = 7"})
        data = resp.json()
        assert resp.status_code == 200
        assert data["variable"] == "x"
        assert data["solved_value"] == pytest.approx(2.0)
        assert data["error"] is None
        assert data["steps"][0]["kind"] == "substitution"

    def test_bindings_and_target(self, client):
        resp = client.post("/api/solve", json={
            "equation": "v = d / t",
            "bindings": {"v": 5, "d": None, "t": 2},
            "solve_for": "d",
        })
        assert resp.json()["solved_value"] == pytest.approx(10.0)

    def test_complex_roots(self, client):
        data = client.post("/api/solve", json={"equation": "x^2 + 1 = 0"}).json()
        assert data["solved_value"]["imag"] == pytest.approx(1.0)
        assert len(data["all_values"]) == 2

    def test_failure_is_reported_in_body(self, client):
        data = client.post("/api/solve", json={"equation": "0 = 1"}).json()
        assert data["solved_value"] is None
        assert data["error"]

    def test_parse_error(self, client):
        resp = client.post("/api/solve", json={"equation": "x + = 3"})
        assert resp.status_code == 400


class TestSystemEndpoint:
    def test_linear_system(self, client):
        data = client.post("/api/solve-system", json={
            "equations": ["x + y = 3", "x - y = 1"],
        }).json()
        assert data["success"]
        assert data["values"]["x"]["real"] == pytest.approx(2.0, abs=1e-6)
        assert data["values"]["y"]["real"] == pytest.approx(1.0, abs=1e-6)

    def test_complex_guess(self, client):
        data = client.post("/api/solve-system", json={
            "equations": ["x^2 + 1 = 0"],
            "initial_guess": {"x": {"real": 0, "imag": 0.5}},
        }).json()
        assert data["values"]["x"]["imag"] == pytest.approx(1.0, abs=1e-6)

    def test_mismatch(self, client):
        data = client.post("/api/solve-system", json={"equations": ["x + y = 1"]}).json()
        assert not data["success"]
        assert "Number of variables" in data["error"]

    def test_blank_equation(self, client):
        resp = client.post("/api/solve-system", json={"equations": ["x = 1", ""]})
        assert resp.status_code == 400


class TestCalculusEndpoint:
    def test_derivative(self, client):
        resp = client.post("/api/calculus", json={"command": "d/dx(x^2)"})
        assert resp.json() == {"result": "2*x"}

    def test_unsupported_integral(self, client):
        resp = client.post("/api/calculus", json={"command": "int(tan(x))dx"})
        assert resp.status_code == 400
        assert "Cannot integrate" in resp.json()["detail"]


def test_constants_endpoint(client) -> None:
    rows = {row["key"]: row for row in client.get("/api/constants").json()}
    assert rows["SOL"]["value"] == 299792458.0
    assert rows["SOL"]["category"]
    assert rows["IN"]["value"] is None
