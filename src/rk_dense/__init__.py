"""rk_dense dense-output interpolation for explicit Runge-Kutta integrators."""

from __future__ import annotations

from .config import InterpolatorConfig
from .consistency import (
    ConsistencyReport,
    assert_consistent,
    check_consistency,
    to_real_interpolator,
)
from .errors import (
    ConsistencyError,
    DimensionMismatchError,
    ErrorCode,
    InvalidSequenceError,
    InvalidTableauError,
    OutOfStepRangeError,
    RkDenseError,
    UninitializedInterpolatorError,
)
from .fields import FloatField, MpmathField, RealField
from .interpolator import DenseOutputInterpolator
from .polynomials import (
    FAMILIES,
    ClassicalRungeKutta,
    DenseOutputPolynomial,
    DormandPrince54,
    Euler,
    Gill,
    HighamHall54,
    Luther,
    Midpoint,
    RationalDenseOutput,
    ThreeEighths,
    get_family,
)
from .states import StageSlopes, StepState
from .stepping import explicit_step
from .tableau import ButcherTableau

__all__ = [
    "FAMILIES",
    "ButcherTableau",
    "ClassicalRungeKutta",
    "ConsistencyError",
    "ConsistencyReport",
    "DenseOutputInterpolator",
    "DenseOutputPolynomial",
    "DimensionMismatchError",
    "DormandPrince54",
    "ErrorCode",
    "Euler",
    "FloatField",
    "Gill",
    "HighamHall54",
    "InterpolatorConfig",
    "InvalidSequenceError",
    "InvalidTableauError",
    "Luther",
    "Midpoint",
    "MpmathField",
    "OutOfStepRangeError",
    "RationalDenseOutput",
    "RealField",
    "RkDenseError",
    "StageSlopes",
    "StepState",
    "ThreeEighths",
    "UninitializedInterpolatorError",
    "assert_consistent",
    "check_consistency",
    "explicit_step",
    "get_family",
    "to_real_interpolator",
]

__version__ = "0.1.0"
