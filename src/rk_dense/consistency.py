# rk_dense/src/rk_dense/consistency.py
"""Cross-check of a field interpolator against its floating-point twin.

The twin is built from the double projection of every stored scalar and runs
the same family formula in FloatField arithmetic. Both are then evaluated at
evenly spaced times across the step. Since the formula is shared, the two
may only differ by rounding; any larger gap means a formula that is not
expressed purely through the field's operators, or an interpolator that
leaks precision somewhere.

Errors are measured as |field - real| / max(1, |field|), i.e. relative for
large components and absolute near zero.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, cast

from .errors import ConsistencyError, ErrorCode, raise_uninitialized
from .fields import FloatField
from .interpolator import DenseOutputInterpolator
from .states import StageSlopes, StepState

if TYPE_CHECKING:
    from .fields import FieldArray, RealField

logger = logging.getLogger(__name__)

_SAMPLES_ERROR_MSG = "samples must be a positive integer, got {samples}"


@dataclass(frozen=True, slots=True)
class ConsistencyReport:
    """Outcome of a field/float comparison.

    Attributes:
        samples: Number of sub-intervals; samples + 1 times were compared.
        max_state_error: Largest scaled state discrepancy.
        max_derivative_error: Largest scaled derivative discrepancy.
        rtol: Tolerance applied to the state.
        derivative_rtol: Tolerance applied to the derivative.
    """

    samples: int
    max_state_error: float
    max_derivative_error: float
    rtol: float
    derivative_rtol: float

    @property
    def ok(self) -> bool:
        """Return True if both channels are within tolerance."""
        return (
            self.max_state_error <= self.rtol
            and self.max_derivative_error <= self.derivative_rtol
        )

    def raise_for_errors(self) -> None:
        """Raise ConsistencyError if either channel is out of tolerance.

        Raises:
            ConsistencyError: If the report is not ok.
        """
        if self.ok:
            return
        msg = (
            "Field and floating-point interpolators disagree over "
            f"{self.samples + 1} samples: state error {self.max_state_error:.3e} "
            f"(rtol {self.rtol:.1e}), derivative error "
            f"{self.max_derivative_error:.3e} (rtol {self.derivative_rtol:.1e})."
        )
        raise ConsistencyError(msg, code=ErrorCode.INCONSISTENT_INTERPOLATION)


def _project(field: RealField, state: StepState) -> StepState:
    return StepState(
        time=field.to_real(state.time),
        state=field.to_real_array(state.state),
        derivative=field.to_real_array(state.derivative),
    )


def to_real_interpolator(
    interpolator: DenseOutputInterpolator,
) -> DenseOutputInterpolator:
    """
    Build the FloatField twin of a ready interpolator.

    The twin shares the family object and orientation and is driven through
    the public protocol with the double projection of the stored data.

    Args:
        interpolator: Interpolator holding a complete step.

    Returns:
        Ready interpolator in FloatField arithmetic.

    Raises:
        UninitializedInterpolatorError: If interpolator holds no complete step.
    """
    if not interpolator.is_ready or interpolator.slopes is None:
        raise_uninitialized(detail="cannot build a floating-point twin")

    field = interpolator.field
    twin = DenseOutputInterpolator(
        interpolator.family, field=FloatField(), forward=interpolator.forward
    )
    twin.store_state(_project(field, interpolator.previous_state))
    twin.shift()
    slopes = cast("StageSlopes", interpolator.slopes)
    twin.set_slopes(StageSlopes([field.to_real_array(k) for k in slopes]))
    twin.store_state(_project(field, interpolator.current_state))
    return twin


def _max_scaled_error(field: RealField, exact: FieldArray, real: FieldArray) -> float:
    worst = 0.0
    for x, r in zip(exact, real, strict=True):
        diff = abs(field.to_real(x - field.convert(r)))
        worst = max(worst, diff / max(1.0, abs(field.to_real(x))))
    return worst


def check_consistency(
    interpolator: DenseOutputInterpolator,
    *,
    samples: int = 100,
    rtol: float = 1e-15,
    derivative_rtol: float | None = None,
) -> ConsistencyReport:
    """
    Compare a field interpolator with its floating-point twin.

    Args:
        interpolator: Interpolator holding a complete step.
        samples: Number of sub-intervals of the step; samples + 1 evenly
            spaced times from previous to current time are compared.
        rtol: Tolerance on the scaled state error.
        derivative_rtol: Tolerance on the scaled derivative error (defaults
            to rtol).

    Returns:
        ConsistencyReport with the largest discrepancies observed.

    Raises:
        ValueError: If samples is not positive.
    """
    if int(samples) < 1:
        raise ValueError(_SAMPLES_ERROR_MSG.format(samples=samples))
    n = int(samples)
    twin = to_real_interpolator(interpolator)
    field = interpolator.field

    t_prev = interpolator.previous_state.time
    t_curr = interpolator.current_state.time

    max_state = 0.0
    max_derivative = 0.0
    for i in range(n + 1):
        t = (t_prev * (n - i) + t_curr * i) / n
        exact = interpolator.interpolate(t)
        real = twin.interpolate(field.to_real(t))
        max_state = max(max_state, _max_scaled_error(field, exact.state, real.state))
        max_derivative = max(
            max_derivative,
            _max_scaled_error(field, exact.derivative, real.derivative),
        )

    report = ConsistencyReport(
        samples=n,
        max_state_error=max_state,
        max_derivative_error=max_derivative,
        rtol=float(rtol),
        derivative_rtol=float(rtol if derivative_rtol is None else derivative_rtol),
    )
    logger.info(
        "Consistency of %s in %s: state %.3e, derivative %.3e over %d samples",
        interpolator.family.name,
        field.name,
        report.max_state_error,
        report.max_derivative_error,
        n + 1,
    )
    return report


def assert_consistent(
    interpolator: DenseOutputInterpolator,
    *,
    samples: int = 100,
    rtol: float = 1e-15,
    derivative_rtol: float | None = None,
) -> ConsistencyReport:
    """
    Run check_consistency and raise if it fails.

    Returns:
        The passing ConsistencyReport.

    Raises:
        ConsistencyError: If the interpolators disagree beyond tolerance.
    """
    report = check_consistency(
        interpolator, samples=samples, rtol=rtol, derivative_rtol=derivative_rtol
    )
    report.raise_for_errors()
    return report
