"""Unit tests for rk_dense.errors."""

from __future__ import annotations

import pytest

from rk_dense import errors
from rk_dense.errors import ErrorCode


@pytest.mark.parametrize(
    ("exc_type", "builtin"),
    [
        (errors.DimensionMismatchError, ValueError),
        (errors.UninitializedInterpolatorError, RuntimeError),
        (errors.OutOfStepRangeError, ValueError),
        (errors.InvalidSequenceError, RuntimeError),
        (errors.InvalidTableauError, ValueError),
        (errors.ConsistencyError, AssertionError),
    ],
)
def test_errors_derive_from_base_and_builtin(
    exc_type: type[Exception], builtin: type[Exception]
) -> None:
    """Every rk_dense error is catchable as RkDenseError and as its builtin."""
    assert issubclass(exc_type, errors.RkDenseError)
    assert issubclass(exc_type, builtin)


def test_base_error_carries_code() -> None:
    """RkDenseError stores its optional code."""
    err = errors.RkDenseError("boom", code=ErrorCode.INVALID_SEQUENCE)
    assert str(err) == "boom"
    assert err.code is ErrorCode.INVALID_SEQUENCE
    assert errors.RkDenseError("plain").code is None


def test_raise_dimension_mismatch() -> None:
    """raise_dimension_mismatch names the quantity and both sizes."""
    with pytest.raises(errors.DimensionMismatchError) as excinfo:
        errors.raise_dimension_mismatch(name="state", expected=3, got=2)
    assert excinfo.value.code is ErrorCode.DIMENSION_MISMATCH
    assert str(excinfo.value) == "state has size 2, expected 3."


def test_raise_uninitialized() -> None:
    """raise_uninitialized includes the missing piece."""
    with pytest.raises(errors.UninitializedInterpolatorError) as excinfo:
        errors.raise_uninitialized(detail="no state has been stored")
    assert excinfo.value.code is ErrorCode.UNINITIALIZED_INTERPOLATOR
    assert "no state has been stored" in str(excinfo.value)


def test_raise_out_of_step_range() -> None:
    """raise_out_of_step_range reports method and theta."""
    with pytest.raises(errors.OutOfStepRangeError) as excinfo:
        errors.raise_out_of_step_range(method="classical", theta=1.5)
    assert excinfo.value.code is ErrorCode.OUT_OF_STEP_RANGE
    assert "'classical'" in str(excinfo.value)
    assert "theta=1.5" in str(excinfo.value)


def test_raise_invalid_sequence() -> None:
    """raise_invalid_sequence names the rejected operation."""
    with pytest.raises(errors.InvalidSequenceError) as excinfo:
        errors.raise_invalid_sequence(operation="shift", reason="too early")
    assert excinfo.value.code is ErrorCode.INVALID_SEQUENCE
    assert str(excinfo.value) == "shift called out of sequence: too early"


def test_raise_invalid_tableau() -> None:
    """raise_invalid_tableau prefixes the detail."""
    with pytest.raises(errors.InvalidTableauError) as excinfo:
        errors.raise_invalid_tableau(detail="a is not square")
    assert excinfo.value.code is ErrorCode.INVALID_TABLEAU
    assert str(excinfo.value) == "Invalid Butcher tableau: a is not square"


def test_error_codes_are_strings() -> None:
    """ErrorCode members compare equal to their string values."""
    assert ErrorCode.DIMENSION_MISMATCH == "dimension_mismatch"
    assert ErrorCode.INCONSISTENT_INTERPOLATION == "inconsistent_interpolation"
