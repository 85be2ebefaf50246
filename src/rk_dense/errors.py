# rk_dense/src/rk_dense/errors.py
"""Error types and standard raise helpers for rk_dense.

Every failure raised by the interpolation layer is a caller protocol
violation or a configuration mismatch. None of them is retried internally;
they propagate to the integration loop, which decides whether to abort.

Each concrete exception also derives from the closest builtin so callers can
catch either the rk_dense type or the generic one.
"""

from __future__ import annotations

from enum import StrEnum


class ErrorCode(StrEnum):
    """Machine-readable classification for rk_dense failures."""

    DIMENSION_MISMATCH = "dimension_mismatch"
    UNINITIALIZED_INTERPOLATOR = "uninitialized_interpolator"
    OUT_OF_STEP_RANGE = "out_of_step_range"
    INVALID_SEQUENCE = "invalid_sequence"
    INVALID_TABLEAU = "invalid_tableau"
    INCONSISTENT_INTERPOLATION = "inconsistent_interpolation"


class RkDenseError(Exception):
    """Base exception for rk_dense errors."""

    def __init__(self, message: str, *, code: ErrorCode | None = None) -> None:
        """
        Initialize an RkDenseError.

        Args:
            message: Human-readable error message.
            code: Optional machine-readable error code classifying the error.
        """
        super().__init__(message)
        self.code: ErrorCode | None = code


class DimensionMismatchError(RkDenseError, ValueError):
    """Raised when a vector length or stage count disagrees with N or S."""


class UninitializedInterpolatorError(RkDenseError, RuntimeError):
    """Raised when an interpolator is queried before a step is complete."""


class OutOfStepRangeError(RkDenseError, ValueError):
    """Raised when a query falls outside the step for a non-extrapolating family."""


class InvalidSequenceError(RkDenseError, RuntimeError):
    """Raised when states or slopes are stored out of the expected order."""


class InvalidTableauError(RkDenseError, ValueError):
    """Raised when Butcher arrays do not describe an explicit method."""


class ConsistencyError(RkDenseError, AssertionError):
    """Raised when a field interpolator disagrees with its float twin."""


def raise_dimension_mismatch(*, name: str, expected: int, got: int) -> None:
    """
    Raise a standardized DimensionMismatchError.

    Args:
        name: Name of the quantity with the wrong size.
        expected: Size required by the configured N or S.
        got: Size actually received.

    Raises:
        DimensionMismatchError: Always.
    """
    msg = f"{name} has size {got}, expected {expected}."
    raise DimensionMismatchError(msg, code=ErrorCode.DIMENSION_MISMATCH)


def raise_uninitialized(*, detail: str) -> None:
    """
    Raise a standardized UninitializedInterpolatorError.

    Args:
        detail: What is missing before the query can be answered.

    Raises:
        UninitializedInterpolatorError: Always.
    """
    msg = f"Interpolator holds no complete step: {detail}"
    raise UninitializedInterpolatorError(
        msg, code=ErrorCode.UNINITIALIZED_INTERPOLATOR
    )


def raise_out_of_step_range(*, method: str, theta: float) -> None:
    """
    Raise a standardized OutOfStepRangeError.

    Args:
        method: Registry name of the family that forbids extrapolation.
        theta: Normalized position of the rejected query.

    Raises:
        OutOfStepRangeError: Always.
    """
    msg = (
        f"Method '{method}' does not extrapolate; requested theta={theta:.17g} "
        "lies outside [0, 1]."
    )
    raise OutOfStepRangeError(msg, code=ErrorCode.OUT_OF_STEP_RANGE)


def raise_invalid_sequence(*, operation: str, reason: str) -> None:
    """
    Raise a standardized InvalidSequenceError.

    Args:
        operation: Name of the rejected protocol operation.
        reason: Why the operation is not valid at this point.

    Raises:
        InvalidSequenceError: Always.
    """
    msg = f"{operation} called out of sequence: {reason}"
    raise InvalidSequenceError(msg, code=ErrorCode.INVALID_SEQUENCE)


def raise_invalid_tableau(*, detail: str) -> None:
    """
    Raise a standardized InvalidTableauError.

    Args:
        detail: Description of the malformed coefficient array.

    Raises:
        InvalidTableauError: Always.
    """
    msg = f"Invalid Butcher tableau: {detail}"
    raise InvalidTableauError(msg, code=ErrorCode.INVALID_TABLEAU)
