"""Tests for rk_dense.consistency (field vs floating-point cross-check)."""

from __future__ import annotations

import logging
from collections.abc import Callable

import pytest

from rk_dense import (
    ConsistencyError,
    ConsistencyReport,
    DenseOutputInterpolator,
    FloatField,
    MpmathField,
    UninitializedInterpolatorError,
    assert_consistent,
    check_consistency,
    get_family,
    to_real_interpolator,
)
from rk_dense.errors import ErrorCode

StepFactory = Callable[..., DenseOutputInterpolator]

STATE_RTOL = 1e-15

# Derivative weights of the 5(4) pairs reach a few tens, so their rounding
# error is larger than that of the low order families.
DERIVATIVE_RTOL = {
    "euler": 1e-14,
    "midpoint": 1e-14,
    "classical": 1e-14,
    "gill": 1e-14,
    "three-eighths": 1e-14,
    "higham-hall-54": 2e-13,
    "dormand-prince-54": 2e-13,
    "luther": 1e-12,
}


@pytest.mark.mpmath
@pytest.mark.parametrize("h", [0.125, -0.125], ids=["forward", "backward"])
def test_mpmath_interpolator_matches_float_twin(
    step_interpolator: StepFactory, family_name: str, h: float
) -> None:
    """An mpmath interpolator agrees with its float twin to rounding level."""
    interp = step_interpolator(family_name, MpmathField(dps=50), h=h)
    report = assert_consistent(
        interp,
        samples=100,
        rtol=STATE_RTOL,
        derivative_rtol=DERIVATIVE_RTOL[family_name],
    )
    assert report.ok
    assert report.samples == 100


def test_float_interpolator_is_its_own_twin(
    step_interpolator: StepFactory, family_name: str
) -> None:
    """The float twin of a float interpolator reproduces it exactly."""
    interp = step_interpolator(family_name, FloatField())
    report = check_consistency(interp, samples=16, rtol=0.0)
    assert report.max_state_error == 0.0
    assert report.max_derivative_error == 0.0
    assert report.ok


@pytest.mark.mpmath
def test_twin_shares_family_and_direction(step_interpolator: StepFactory) -> None:
    """to_real_interpolator keeps the family object and orientation."""
    interp = step_interpolator("classical", MpmathField(dps=30), t0=0.5, h=-0.125)
    twin = to_real_interpolator(interp)
    assert twin.family is interp.family
    assert twin.forward is False
    assert isinstance(twin.field, FloatField)
    assert twin.is_ready
    assert twin.previous_state.time == 0.5
    assert twin.current_state.time == 0.375


def test_twin_requires_complete_step() -> None:
    """No twin can be built before a step is complete."""
    interp = DenseOutputInterpolator(get_family("euler"))
    with pytest.raises(UninitializedInterpolatorError):
        to_real_interpolator(interp)


def test_check_consistency_rejects_bad_samples(step_interpolator: StepFactory) -> None:
    """samples must be positive."""
    interp = step_interpolator("euler", FloatField())
    with pytest.raises(ValueError, match="positive"):
        check_consistency(interp, samples=0)


def test_report_raises_when_out_of_tolerance() -> None:
    """raise_for_errors signals a failing report with its error code."""
    report = ConsistencyReport(
        samples=10,
        max_state_error=1e-10,
        max_derivative_error=0.0,
        rtol=1e-15,
        derivative_rtol=1e-15,
    )
    assert not report.ok
    with pytest.raises(ConsistencyError, match="disagree over 11 samples") as excinfo:
        report.raise_for_errors()
    assert excinfo.value.code is ErrorCode.INCONSISTENT_INTERPOLATION


def test_check_consistency_logs_summary(
    step_interpolator: StepFactory, caplog: pytest.LogCaptureFixture
) -> None:
    """The comparison result is logged at INFO."""
    interp = step_interpolator("midpoint", FloatField())
    with caplog.at_level(logging.INFO, logger="rk_dense.consistency"):
        check_consistency(interp, samples=4)
    assert any(
        "Consistency of midpoint in float" in r.getMessage() for r in caplog.records
    )
