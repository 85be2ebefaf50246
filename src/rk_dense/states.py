# rk_dense/src/rk_dense/states.py
"""Immutable value types exchanged with the dense-output interpolator.

StepState holds (time, state, derivative) at one instant; StageSlopes holds
the S stage derivatives of one step. Both copy their inputs into read-only
numpy arrays on construction, so a value handed to an interpolator can never
be mutated behind its back and the interpolator never aliases caller storage.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import numpy as np

from .errors import raise_dimension_mismatch

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

    from .fields import FieldArray, RealField, Scalar


_STATE_NOT_1D_ERROR = "{name} must be a 1D vector, got shape {shape}"
_SLOPES_EMPTY_ERROR = "StageSlopes requires at least one stage"


def _frozen_vector(values: object, *, name: str) -> FieldArray:
    """Copy values into a read-only 1D array.

    Integer and boolean input is promoted to float64; float64 and object
    (mpmath) arrays keep their dtype.

    Returns:
        Read-only 1D array owning its data.

    Raises:
        ValueError: If values is not one-dimensional.
    """
    arr = np.array(values, copy=True)
    if arr.dtype.kind in "biu":
        arr = arr.astype(np.float64)
    if arr.ndim != 1:
        raise ValueError(_STATE_NOT_1D_ERROR.format(name=name, shape=arr.shape))
    arr.flags.writeable = False
    return arr


@dataclass(frozen=True, slots=True)
class StepState:
    """State and derivative of the system at one instant.

    Attributes:
        time: Time of the snapshot (field scalar or float).
        state: State vector, shape (N,).
        derivative: Time derivative of the state, shape (N,).
    """

    time: Scalar
    state: FieldArray
    derivative: FieldArray

    def __post_init__(self) -> None:
        """Copy and freeze the vectors, enforcing equal dimensions."""
        state = _frozen_vector(self.state, name="state")
        derivative = _frozen_vector(self.derivative, name="derivative")
        if derivative.shape != state.shape:
            raise_dimension_mismatch(
                name="derivative",
                expected=int(state.shape[0]),
                got=int(derivative.shape[0]),
            )
        object.__setattr__(self, "state", state)
        object.__setattr__(self, "derivative", derivative)

    @classmethod
    def from_field(
        cls,
        field: RealField,
        time: object,
        state: Sequence[object] | FieldArray,
        derivative: Sequence[object] | FieldArray,
    ) -> StepState:
        """Build a StepState whose scalars all belong to field.

        Args:
            field: Target arithmetic.
            time: Snapshot time.
            state: State values.
            derivative: Derivative values.

        Returns:
            StepState holding field scalars.
        """
        return cls(
            time=field.convert(time),
            state=field.array(state),
            derivative=field.array(derivative),
        )

    @property
    def dimension(self) -> int:
        """Return N, the length of the state vector."""
        return int(self.state.shape[0])


@dataclass(frozen=True, slots=True)
class StageSlopes:
    """Stage derivatives of one Runge-Kutta step.

    Row 0 is the derivative at the start of the step; row S-1 is the last
    stage evaluated by the method.

    Attributes:
        vectors: Read-only array of shape (S, N).
    """

    vectors: FieldArray

    def __post_init__(self) -> None:
        """Validate that every stage vector has the same length, then freeze."""
        rows = [np.asarray(v) for v in self.vectors]
        if not rows:
            raise ValueError(_SLOPES_EMPTY_ERROR)
        n = rows[0].shape[0] if rows[0].ndim == 1 else -1
        for i, row in enumerate(rows):
            if row.ndim != 1:
                raise ValueError(
                    _STATE_NOT_1D_ERROR.format(name=f"slope {i}", shape=row.shape)
                )
            if row.shape[0] != n:
                raise_dimension_mismatch(
                    name=f"slope {i}", expected=n, got=int(row.shape[0])
                )

        dtype: Any = object if any(r.dtype == object for r in rows) else None
        arr = np.array(np.stack(rows), dtype=dtype, copy=True)
        if arr.dtype.kind in "biu":
            arr = arr.astype(np.float64)
        arr.flags.writeable = False
        object.__setattr__(self, "vectors", arr)

    @classmethod
    def from_field(
        cls, field: RealField, vectors: Sequence[Sequence[object]] | FieldArray
    ) -> StageSlopes:
        """Build StageSlopes whose scalars all belong to field.

        Args:
            field: Target arithmetic.
            vectors: S stage derivative vectors.

        Returns:
            StageSlopes holding field scalars.
        """
        return cls(vectors=np.stack([field.array(v) for v in vectors]))

    @property
    def stages(self) -> int:
        """Return S, the number of stage vectors."""
        return int(self.vectors.shape[0])

    @property
    def dimension(self) -> int:
        """Return N, the length of each stage vector."""
        return int(self.vectors.shape[1])

    def __len__(self) -> int:
        """Number of stages."""
        return self.stages

    def __getitem__(self, index: int) -> FieldArray:
        """Slope vector of stage index."""
        return self.vectors[index]

    def __iter__(self) -> Iterator[FieldArray]:
        """Iterate over stage slope vectors in order."""
        return iter(self.vectors)
