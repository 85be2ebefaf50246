"""Accuracy tests for the dense output of every family.

Design principle:
- One step of size |h| = 1/8 is taken on the harmonic oscillator
      y0' = y1, y1' = -y0,  y(t) = (sin t, cos t)
  forward and backward from t0 = 1/4, and the interpolant is compared with
  the exact solution at 101 evenly spaced times across the step.
- State errors are held to per-family tolerances a little above the
  leading error term of each extension, so a wrong coefficient table fails
  even when it keeps the right order at the step ends.
- The derivative error is bounded by 2*h**p for an extension of order p.
"""

from __future__ import annotations

from collections.abc import Callable
from fractions import Fraction

import numpy as np
import pytest

from rk_dense import (
    FAMILIES,
    DenseOutputInterpolator,
    DormandPrince54,
    FloatField,
    StepState,
    get_family,
)
from rk_dense.fields import RealField
from rk_dense.polynomials import _hermite_quartic_rows

StepFactory = Callable[..., DenseOutputInterpolator]

H = 0.125
T0 = 0.25
N_SAMPLES = 100

# Largest state error over the step, for |h| = 1/8 from t0 = 1/4.
STATE_TOL = {
    "euler": 8e-3,
    "midpoint": 3.5e-4,
    "classical": 4.5e-6,
    "gill": 4.5e-6,
    "three-eighths": 4.5e-6,
    "higham-hall-54": 6e-8,
    "dormand-prince-54": 2e-8,
    "luther": 1.5e-7,
}


class _DormandPrinceWithoutCorrection(DormandPrince54):
    """dopri5 with its quartic correction dropped: Hermite cubic only."""

    WEIGHTS = _hermite_quartic_rows(DormandPrince54.B, (Fraction(0),) * 7)


def _sample_times(h: float) -> list[float]:
    return [T0 + h * i / N_SAMPLES for i in range(N_SAMPLES + 1)]


def _max_errors(
    interp: DenseOutputInterpolator,
    field: RealField,
    exact_state: Callable[[RealField, object], StepState],
    h: float,
) -> tuple[float, float]:
    state_err = 0.0
    deriv_err = 0.0
    for t in _sample_times(h):
        out = interp.interpolate(t)
        exact = exact_state(field, t)
        state_err = max(
            state_err,
            float(np.max(np.abs(field.to_real_array(out.state - exact.state)))),
        )
        deriv_err = max(
            deriv_err,
            float(
                np.max(np.abs(field.to_real_array(out.derivative - exact.derivative)))
            ),
        )
    return state_err, deriv_err


def test_tolerances_cover_every_family() -> None:
    """Every registered family has a state tolerance."""
    assert set(STATE_TOL) == set(FAMILIES)


@pytest.mark.parametrize("h", [H, -H], ids=["forward", "backward"])
def test_interpolation_error_is_within_family_tolerance(
    step_interpolator: StepFactory,
    exact_state: Callable[[RealField, object], StepState],
    family_name: str,
    field: RealField,
    h: float,
) -> None:
    """State error stays below the family tolerance, derivative below 2*h**p."""
    interp = step_interpolator(family_name, field, t0=T0, h=h)
    p = interp.family.interpolation_order

    state_err, deriv_err = _max_errors(interp, field, exact_state, h)

    assert state_err <= STATE_TOL[family_name]
    assert deriv_err <= 2.0 * H**p


def test_dormand_prince_correction_is_required(
    step_interpolator: StepFactory,
    exact_state: Callable[[RealField, object], StepState],
) -> None:
    """Without the quartic correction dopri5 misses its tolerance."""
    field = FloatField()
    family = _DormandPrinceWithoutCorrection()
    interp = step_interpolator(family, field, t0=T0, h=H)

    # The end points are still exact; only the interior degrades.
    state_err, _ = _max_errors(interp, field, exact_state, H)
    assert state_err > 10 * STATE_TOL["dormand-prince-54"]


@pytest.mark.parametrize(
    "name", ["midpoint", "classical", "three-eighths", "dormand-prince-54"]
)
def test_interpolation_error_decreases_with_step(
    step_interpolator: StepFactory,
    exact_state: Callable[[RealField, object], StepState],
    name: str,
) -> None:
    """Halving h shrinks the interior error by at least 2**p."""
    field = FloatField()
    p = get_family(name).interpolation_order

    errs = []
    for h in (H, H / 2):
        interp = step_interpolator(name, field, t0=T0, h=h)
        t_mid = T0 + 0.375 * h
        out = interp.interpolate(t_mid)
        exact = exact_state(field, t_mid)
        errs.append(float(np.max(np.abs(out.state - exact.state))))

    assert errs[1] <= errs[0] / 2**p
