"""Immutable complex number used by the complex evaluator and the solvers.

All arithmetic follows IEEE double semantics: dividing by zero or leaving
a function's domain produces NaN / infinite components instead of raising.
NumPy's scalar math is used under ``np.errstate(all="ignore")`` so that
overflow and division by zero never turn into exceptions or warnings.
"""

import math
from dataclasses import dataclass

import numpy as np


def _fmt_part(value: float) -> str:
    """Format one component for display.

    Integral values print without a decimal point, everything else is
    rounded to four decimals with trailing zeros removed.
    """
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value == int(value) and abs(value) < 1e15:
        return str(int(value))
    return f"{value:.4f}".rstrip("0").rstrip(".")


@dataclass(frozen=True)
class Complex:
    """A complex number ``real + imag·i``.

    Equality is exact component equality; tolerance comparisons are up to
    the caller.
    """

    real: float = 0.0
    imag: float = 0.0

    # ── Construction ─────────────────────────────────────────────────

    @classmethod
    def from_value(cls, value) -> "Complex":
        """Coerce a Complex, builtin complex, or real scalar into a Complex."""
        coerced = _coerce(value)
        if coerced is None:
            raise TypeError(f"Cannot convert {type(value).__name__} to Complex")
        return coerced

    # ── Inspection ───────────────────────────────────────────────────

    @property
    def is_real(self) -> bool:
        return self.imag == 0.0

    @property
    def is_nan(self) -> bool:
        return math.isnan(self.real) or math.isnan(self.imag)

    @property
    def is_infinite(self) -> bool:
        return math.isinf(self.real) or math.isinf(self.imag)

    @property
    def is_finite(self) -> bool:
        return math.isfinite(self.real) and math.isfinite(self.imag)

    def abs(self) -> float:
        """Magnitude ``|z|``."""
        return math.hypot(self.real, self.imag)

    def conjugate(self) -> "Complex":
        return Complex(self.real, -self.imag)

    # ── Arithmetic ───────────────────────────────────────────────────

    def __add__(self, other):
        other = _coerce(other)
        if other is None:
            return NotImplemented
        return Complex(self.real + other.real, self.imag + other.imag)

    __radd__ = __add__

    def __sub__(self, other):
        other = _coerce(other)
        if other is None:
            return NotImplemented
        return Complex(self.real - other.real, self.imag - other.imag)

    def __rsub__(self, other):
        other = _coerce(other)
        if other is None:
            return NotImplemented
        return other - self

    def __mul__(self, other):
        other = _coerce(other)
        if other is None:
            return NotImplemented
        if self.imag == 0.0 and other.imag == 0.0:
            return Complex(self.real * other.real, 0.0)
        return Complex(
            self.real * other.real - self.imag * other.imag,
            self.real * other.imag + self.imag * other.real,
        )

    __rmul__ = __mul__

    def __truediv__(self, other):
        other = _coerce(other)
        if other is None:
            return NotImplemented
        a, b = np.float64(self.real), np.float64(self.imag)
        c, d = np.float64(other.real), np.float64(other.imag)
        with np.errstate(all="ignore"):
            if d == 0.0:
                return Complex(float(a / c), float(b / c) if b != 0.0 else 0.0)
            denom = c * c + d * d
            return Complex(float((a * c + b * d) / denom),
                           float((b * c - a * d) / denom))

    def __rtruediv__(self, other):
        other = _coerce(other)
        if other is None:
            return NotImplemented
        return other / self

    def __pow__(self, exponent):
        exponent = _coerce(exponent)
        if exponent is None:
            return NotImplemented
        return self.pow(exponent)

    def __rpow__(self, base):
        base = _coerce(base)
        if base is None:
            return NotImplemented
        return base.pow(self)

    def __neg__(self):
        return Complex(-self.real, -self.imag)

    def __pos__(self):
        return self

    def __abs__(self):
        return self.abs()

    def __complex__(self):
        return complex(self.real, self.imag)

    # ── Elementary functions ─────────────────────────────────────────

    def sqrt(self) -> "Complex":
        """Principal square root.

        The real part is never negative; the imaginary part takes the sign
        of this number's imaginary part, with zero counting as positive.
        """
        if self.is_nan:
            return Complex(math.nan, math.nan)
        if self.is_infinite:
            return _from_numpy(np.sqrt(np.complex128(complex(self.real, self.imag))))
        r = self.abs()
        re_part = math.sqrt(max(0.0, (r + self.real) / 2))
        im_part = math.sqrt(max(0.0, (r - self.real) / 2))
        sign = 1.0 if self.imag >= 0 else -1.0
        return Complex(re_part, sign * im_part)

    def exp(self) -> "Complex":
        with np.errstate(all="ignore"):
            scale = np.exp(np.float64(self.real))
            if self.imag == 0.0:
                return Complex(float(scale), 0.0)
            return Complex(float(scale * np.cos(self.imag)),
                           float(scale * np.sin(self.imag)))

    def log(self) -> "Complex":
        """Natural logarithm on the principal branch: ``(ln|z|, atan2(im, re))``."""
        with np.errstate(all="ignore"):
            magnitude = np.log(np.float64(self.abs()))
        return Complex(float(magnitude), math.atan2(self.imag, self.real))

    def pow(self, exponent) -> "Complex":
        """Raise to *exponent*; an exact zero base always yields zero."""
        exponent = Complex.from_value(exponent)
        if self.real == 0.0 and self.imag == 0.0:
            return ZERO
        if self.is_real and exponent.is_real:
            # Real powers that stay real are computed directly for precision.
            if self.real > 0 or float(exponent.real).is_integer():
                with np.errstate(all="ignore"):
                    value = np.power(np.float64(self.real), np.float64(exponent.real))
                return Complex(float(value), 0.0)
        return (exponent * self.log()).exp()

    def sin(self) -> "Complex":
        a, b = self.real, self.imag
        with np.errstate(all="ignore"):
            if b == 0.0:
                return Complex(float(np.sin(a)), 0.0)
            return Complex(float(np.sin(a) * np.cosh(b)),
                           float(np.cos(a) * np.sinh(b)))

    def cos(self) -> "Complex":
        a, b = self.real, self.imag
        with np.errstate(all="ignore"):
            if b == 0.0:
                return Complex(float(np.cos(a)), 0.0)
            return Complex(float(np.cos(a) * np.cosh(b)),
                           float(-np.sin(a) * np.sinh(b)))

    def tan(self) -> "Complex":
        return self.sin() / self.cos()

    # ── Display ──────────────────────────────────────────────────────

    def __str__(self) -> str:
        if self.is_nan:
            return "NaN"
        if self.imag == 0.0:
            return _fmt_part(self.real)
        if self.imag == 1.0:
            imag_text = "i"
        elif self.imag == -1.0:
            imag_text = "-i"
        else:
            imag_text = f"{_fmt_part(self.imag)}i"
        if self.real == 0.0:
            return imag_text
        sign = "-" if self.imag < 0 else "+"
        return f"{_fmt_part(self.real)} {sign} {imag_text.lstrip('-')}"


def _coerce(value) -> Complex | None:
    if isinstance(value, Complex):
        return value
    if isinstance(value, complex):
        return Complex(float(value.real), float(value.imag))
    if isinstance(value, (int, float, np.integer, np.floating)):
        return Complex(float(value), 0.0)
    return None


def _from_numpy(value) -> Complex:
    return Complex(float(value.real), float(value.imag))


ZERO = Complex(0.0, 0.0)
ONE = Complex(1.0, 0.0)
I = Complex(0.0, 1.0)
