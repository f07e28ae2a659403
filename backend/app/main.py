import logging

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from backend.app.solver import (
    constant_catalog, evaluate_expression, list_variables, run_calculus,
    solve_equation, solve_equation_system,
)
from equasolver.config import configure_logging, load_settings

settings = load_settings()
configure_logging(settings)
logger = logging.getLogger("equasolver.api")

app = FastAPI(title="EquaSolver API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class ComplexValue(BaseModel):
    real: float | None
    imag: float | None = 0.0


Value = float | ComplexValue | None


class EvaluateRequest(BaseModel):
    expression: str
    bindings: dict[str, Value] | None = None


class EvaluateResponse(BaseModel):
    value: Value


class VariablesRequest(BaseModel):
    expression: str
    exclude_constants: bool = False


class VariablesResponse(BaseModel):
    variables: list[str]


class SolveRequest(BaseModel):
    equation: str
    bindings: dict[str, Value] | None = None
    solve_for: str | None = None


class SolveResponse(BaseModel):
    solved_value: Value
    all_values: list[Value]
    steps: list[dict]
    error: str | None
    variable: str | None
    infinite_solutions: bool


class SystemRequest(BaseModel):
    equations: list[str]
    initial_guess: dict[str, Value] | None = None
    max_iterations: int | None = None
    tolerance: float | None = None


class SystemResponse(BaseModel):
    values: dict[str, ComplexValue]
    success: bool
    iterations: int
    error: str | None


class CalculusRequest(BaseModel):
    command: str


class CalculusResponse(BaseModel):
    result: str


class ConstantInfo(BaseModel):
    key: str
    value: float | None
    name: str
    unit: str
    symbol: str
    category: str


def _plain(payload: dict | None) -> dict | None:
    """Pydantic models back to the dicts the bridge expects."""
    if payload is None:
        return None
    return {
        name: value.model_dump() if isinstance(value, ComplexValue) else value
        for name, value in payload.items()
    }


def _run(action, *args):
    try:
        return action(*args)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception("Unhandled error in %s", action.__name__)
        raise HTTPException(status_code=500, detail=f"Solver error: {str(e)}")


def _require(text: str, what: str) -> str:
    text = text.strip()
    if not text:
        raise HTTPException(status_code=400, detail=f"{what} cannot be empty.")
    return text


@app.post("/api/evaluate", response_model=EvaluateResponse)
def evaluate(req: EvaluateRequest):
    expression = _require(req.expression, "Expression")
    return _run(evaluate_expression, expression, _plain(req.bindings))


@app.post("/api/variables", response_model=VariablesResponse)
def variables(req: VariablesRequest):
    expression = _require(req.expression, "Expression")
    return _run(list_variables, expression, req.exclude_constants)


@app.post("/api/solve", response_model=SolveResponse)
def solve(req: SolveRequest):
    equation = _require(req.equation, "Equation")
    return _run(solve_equation, equation, _plain(req.bindings), req.solve_for)


@app.post("/api/solve-system", response_model=SystemResponse)
def solve_system(req: SystemRequest):
    equations = [_require(text, "Equation") for text in req.equations]
    return _run(solve_equation_system, equations, _plain(req.initial_guess),
                req.max_iterations, req.tolerance)


@app.post("/api/calculus", response_model=CalculusResponse)
def calculus(req: CalculusRequest):
    command = _require(req.command, "Command")
    return _run(run_calculus, command)


@app.get("/api/constants", response_model=list[ConstantInfo])
def constants():
    return constant_catalog()
