# rk_dense/src/rk_dense/fields.py
"""Scalar arithmetic capabilities used by the dense-output formulas.

A field bundles everything the interpolation layer needs to know about a
scalar representation: how to build scalars from exact values, how to
project them back onto IEEE doubles, the numpy dtype that holds vectors of
them, and the few transcendental functions used by the tableaux and tests.

Scalars themselves only need the ordinary Python operators (+, -, *, /,
unary -, abs, comparisons), so every formula in rk_dense is written once
against plain operators and runs unchanged on either field:

    - FloatField:  Python floats stored in float64 arrays.
    - MpmathField: mpmath.mpf values from a private mpmath context, stored in
                   object arrays. Precision is set per field instance and never
                   touches mpmath's global ``mp`` context.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from fractions import Fraction
from typing import TYPE_CHECKING, Any, Protocol, TypeAlias, runtime_checkable

import numpy as np
from mpmath.ctx_mp import MPContext
from numpy.typing import NDArray

if TYPE_CHECKING:
    from collections.abc import Iterable

# Field scalars are duck-typed: float for FloatField, mpf for MpmathField.
Scalar: TypeAlias = Any
FieldArray: TypeAlias = NDArray[Any]

ExactValue: TypeAlias = int | float | str | Fraction

_PRECISION_ERROR_MSG = "mpmath precision must be at least 1 decimal digit, got {dps}"


@runtime_checkable
class RealField(Protocol):
    """Capability set of a scalar representation."""

    @property
    def name(self) -> str:
        """Return the short name of the field."""
        ...

    @property
    def dtype(self) -> np.dtype[Any]:
        """Return the numpy dtype holding vectors of field scalars."""
        ...

    @property
    def zero(self) -> Scalar:
        """mpf zero of this context."""
        """Return the additive identity."""
        ...

    @property
    def one(self) -> Scalar:
        """mpf one of this context."""
        """Return the multiplicative identity."""
        ...

    def convert(self, value: object) -> Scalar:
        """Convert an exact or foreign value into a field scalar."""
        ...

    def to_real(self, value: Scalar) -> float:
        """Project a field scalar onto the nearest double."""
        ...

    def array(self, values: Iterable[object]) -> FieldArray:
        """Build an object vector of mpf values converted with convert()."""
        """Convert a 1D sequence into a fresh vector of field scalars."""
        ...

    def to_real_array(self, values: Iterable[Scalar]) -> NDArray[np.float64]:
        """Project a vector of field scalars onto a float64 array."""
        ...

    def sqrt(self, value: Scalar) -> Scalar:
        """Return the square root of a field scalar."""
        ...

    def sin(self, value: Scalar) -> Scalar:
        """Return the sine of a field scalar."""
        ...

    def cos(self, value: Scalar) -> Scalar:
        """Return the cosine of a field scalar."""
        ...


@dataclass(frozen=True, slots=True)
class FloatField:
    """IEEE double precision arithmetic."""

    @property
    def name(self) -> str:
        """Short label used in logs and reports."""
        return "float"

    @property
    def dtype(self) -> np.dtype[Any]:
        """Numpy dtype of float vectors."""
        return np.dtype(np.float64)

    @property
    def zero(self) -> float:
        """Additive identity."""
        return 0.0

    @property
    def one(self) -> float:
        """Multiplicative identity."""
        return 1.0

    def convert(self, value: object) -> float:
        """Convert a number (Fraction, int, numpy scalar) to float."""
        return float(value)  # type: ignore[arg-type]

    def to_real(self, value: Scalar) -> float:
        """Return value unchanged as a float."""
        return float(value)

    def array(self, values: Iterable[object]) -> NDArray[np.float64]:
        """Build a float64 vector from any iterable of numbers."""
        return np.fromiter((float(v) for v in values), dtype=np.float64)  # type: ignore[arg-type]

    def to_real_array(self, values: Iterable[Scalar]) -> NDArray[np.float64]:
        """Same as array(); floats are already real."""
        return self.array(values)

    def sqrt(self, value: Scalar) -> float:
        """Square root via math.sqrt."""
        return math.sqrt(value)

    def sin(self, value: Scalar) -> float:
        """Sine via math.sin."""
        return math.sin(value)

    def cos(self, value: Scalar) -> float:
        """Cosine via math.cos."""
        return math.cos(value)


@dataclass(frozen=True, slots=True)
class MpmathField:
    """Arbitrary precision arithmetic backed by a private mpmath context.

    Attributes:
        dps: Working precision in decimal digits (float64 is about 15-17).
    """

    dps: int = 50
    _ctx: MPContext = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        """Create the private mpmath context at the requested precision.

        Raises:
            ValueError: If dps is not a positive integer.
        """
        if int(self.dps) < 1:
            raise ValueError(_PRECISION_ERROR_MSG.format(dps=self.dps))
        ctx = MPContext()
        ctx.dps = int(self.dps)
        object.__setattr__(self, "_ctx", ctx)

    @property
    def name(self) -> str:
        """Label carrying the working precision, e.g. mpmath[50]."""
        return f"mpmath[{self.dps}]"

    @property
    def dtype(self) -> np.dtype[Any]:
        """mpf vectors are stored in object arrays."""
        return np.dtype(object)

    @property
    def zero(self) -> Scalar:
        """mpf zero of this context."""
        return self._ctx.mpf(0)

    @property
    def one(self) -> Scalar:
        """mpf one of this context."""
        return self._ctx.mpf(1)

    def convert(self, value: object) -> Scalar:
        """Convert a value into an mpf of this context.

        Fractions are divided in the field so that non-dyadic rationals such
        as 1/3 are rounded at the field's precision, not at double precision.

        Returns:
            The mpf representation of value.
        """
        if isinstance(value, Fraction):
            return self._ctx.mpf(value.numerator) / self._ctx.mpf(value.denominator)
        if isinstance(value, np.integer):
            return self._ctx.mpf(int(value))
        if isinstance(value, np.floating):
            return self._ctx.mpf(float(value))
        return self._ctx.mpf(value)

    def to_real(self, value: Scalar) -> float:
        """Round an mpf to the nearest float."""
        return float(value)

    def array(self, values: Iterable[object]) -> FieldArray:
        """Build an object vector of mpf values converted with convert()."""
        converted = [self.convert(v) for v in values]
        out = np.empty(len(converted), dtype=object)
        out[:] = converted
        return out

    def to_real_array(self, values: Iterable[Scalar]) -> NDArray[np.float64]:
        """Round each mpf to float64."""
        return np.fromiter((float(v) for v in values), dtype=np.float64)

    def sqrt(self, value: Scalar) -> Scalar:
        """Square root at the context precision."""
        return self._ctx.sqrt(self.convert(value))

    def sin(self, value: Scalar) -> Scalar:
        """Sine at the context precision."""
        return self._ctx.sin(self.convert(value))

    def cos(self, value: Scalar) -> Scalar:
        """Cosine at the context precision."""
        return self._ctx.cos(self.convert(value))
