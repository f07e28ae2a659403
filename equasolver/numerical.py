"""Numerical root-finding primitives for single-variable equations.

Everything here works on a plain real function ``f(x) -> float`` that
returns NaN where it is undefined. The engine decides which candidate
roots to accept; these helpers only search.
"""

import logging
import math

logger = logging.getLogger(__name__)

# Brackets scanned for a sign change, in order.
BRACKETS = (
    (0.0, 10.0),
    (-10.0, 0.0),
    (0.0, 100.0),
    (-100.0, 0.0),
    (-100.0, 100.0),
    (-1000.0, 1000.0),
    (-1e6, 1e6),
    (0.0, 1e12),
    (-1e12, 0.0),
)

NEWTON_SEEDS = (0.0, 1.0, -1.0, 10.0, -10.0, 100.0, -100.0, 4.0)

# Points unlikely to be special for any hand-written equation.
IDENTITY_PROBES = (0.5772156649015329, -1.4142135623730951)

BISECTION_TOLERANCE = 1e-10
NEWTON_STEP = 1e-7
MIN_DERIVATIVE = 1e-15
MAX_ITERATIONS = 100


def _sign(value: float) -> int:
    return (value > 0) - (value < 0)


def bisect(f, low: float, high: float, tolerance: float = BISECTION_TOLERANCE,
           max_iterations: int = MAX_ITERATIONS) -> float | None:
    """Bisection on ``[low, high]``; the endpoints must straddle a sign change.

    Stops when the residual or the half-width drops below *tolerance*.
    Returns ``None`` if the function turns out to be undefined inside.
    """
    f_low = f(low)
    for _ in range(max_iterations):
        mid = (low + high) / 2
        f_mid = f(mid)
        if math.isnan(f_mid):
            return None
        if abs(f_mid) < tolerance or (high - low) / 2 < tolerance:
            return mid
        if _sign(f_mid) == _sign(f_low):
            low, f_low = mid, f_mid
        else:
            high = mid
    return (low + high) / 2


def bracket_roots(f, brackets=BRACKETS):
    """Yield a bisection root for every bracket whose endpoints change sign.

    NaN endpoints are skipped, and a zero at an endpoint is not a sign
    change.
    """
    for low, high in brackets:
        f_low, f_high = f(low), f(high)
        if math.isnan(f_low) or math.isnan(f_high):
            continue
        if _sign(f_low) * _sign(f_high) >= 0:
            continue
        logger.debug("Sign change on [%g, %g]", low, high)
        root = bisect(f, low, high)
        if root is not None:
            yield root


def newton(f, seed: float, tolerance: float, step: float = NEWTON_STEP,
           max_iterations: int = MAX_ITERATIONS) -> float | None:
    """Newton-Raphson from *seed* with a central-difference derivative.

    Returns ``None`` when the derivative vanishes, the iterate leaves the
    function's domain, or no iterate gets within *tolerance*.
    """
    x = seed
    for _ in range(max_iterations):
        fx = f(x)
        if not math.isfinite(fx):
            return None
        if abs(fx) < tolerance:
            return x
        derivative = (f(x + step) - f(x - step)) / (2 * step)
        if not math.isfinite(derivative) or abs(derivative) < MIN_DERIVATIVE:
            return None
        x = x - fx / derivative
    fx = f(x)
    if math.isfinite(fx) and abs(fx) < tolerance:
        return x
    return None


def quadratic_roots(a: float, b: float, c: float) -> list:
    """Roots of ``a·x² + b·x + c`` with ``a != 0``.

    Real roots come back sorted descending, collapsed to one when they
    coincide; a negative discriminant gives a ``(re, im)`` conjugate pair,
    positive imaginary part first.
    """
    disc = b * b - 4 * a * c
    if disc >= 0:
        root = math.sqrt(disc)
        q = -0.5 * (b + math.copysign(root, b))
        if q == 0:
            roots = [0.0, 0.0]
        else:
            roots = [q / a, c / q]
        roots.sort(reverse=True)
        if abs(roots[0] - roots[1]) <= 1e-10 * max(1.0, abs(roots[0])):
            return [roots[0]]
        return roots
    real = -b / (2 * a)
    imag = math.sqrt(-disc) / (2 * abs(a))
    return [(real, imag), (real, -imag)]
