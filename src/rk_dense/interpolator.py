# rk_dense/src/rk_dense/interpolator.py
"""Dense-output interpolator for one explicit Runge-Kutta step.

The interpolator holds the boundary states of the last completed step and the
stage slopes computed inside it, and reconstructs state and derivative at any
time of (or, where the family allows it, around) that step.

Protocol driven by the integration loop:

    interp.store_state(start)    # seed the step start
    interp.set_slopes(slopes)    # stage derivatives of the step
    interp.store_state(end)      # step end; interpolator is now ready
    interp.interpolate(t)        # any number of queries
    interp.shift()               # end becomes the next start; slopes go stale
    interp.set_slopes(...)       # next step ...

Evaluation uses the local parameter theta = (t - t_prev) / h with
h = t_curr - t_prev (negative for backward integration; no other sign
handling exists). The state is formed from the nearer boundary:

    theta <= 1/2:  y_prev + theta*h       * sum_i wp_i(theta) k_i
    theta >  1/2:  y_curr - (1 - theta)*h * sum_i wc_i(theta) k_i

so theta == 0 and theta == 1 return the stored boundary states bit-exactly.
The derivative is sum_i b_i'(theta) k_i, pinned to the stored boundary
derivatives at theta == 0 and theta == 1.

All arithmetic is carried out in the interpolator's field; values handed in
are converted into that field and copied.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING, cast

import numpy as np

from .errors import (
    raise_dimension_mismatch,
    raise_invalid_sequence,
    raise_out_of_step_range,
    raise_uninitialized,
)
from .fields import FloatField
from .states import StageSlopes, StepState

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .fields import FieldArray, RealField, Scalar
    from .polynomials import DenseOutputPolynomial
    from .tableau import ButcherTableau

logger = logging.getLogger(__name__)


class _Phase(Enum):
    """Position of the interpolator in the store/slopes/shift protocol."""

    EMPTY = "empty"
    SEEDED = "seeded"
    SHIFTED = "shifted"
    SLOPED = "sloped"
    READY = "ready"


# Phases in which a store_state call seeds the step start.
_SEEDING_PHASES = frozenset({_Phase.EMPTY, _Phase.SEEDED, _Phase.SHIFTED})

# Phases in which set_slopes is accepted.
_SLOPE_PHASES = frozenset({_Phase.SEEDED, _Phase.SHIFTED, _Phase.SLOPED})


class DenseOutputInterpolator:
    """Dense output over the last completed Runge-Kutta step."""

    def __init__(
        self,
        family: DenseOutputPolynomial,
        *,
        field: RealField | None = None,
        forward: bool = True,
    ) -> None:
        """
        Initialize DenseOutputInterpolator.

        Args:
            family: Dense-output strategy of the integrating method.
            field: Scalar arithmetic (default FloatField).
            forward: True if time increases along the integration.
        """
        self.family = family
        self.field: RealField = field if field is not None else FloatField()
        self._forward = bool(forward)
        self._tableau: ButcherTableau | None = None

        self._previous: StepState | None = None
        self._current: StepState | None = None
        self._slopes: StageSlopes | None = None
        self._dimension: int | None = None
        self._phase = _Phase.EMPTY

    def __repr__(self) -> str:
        """Readable summary of the interpolator setup."""
        return (
            f"{type(self).__name__}(family={self.family!r}, "
            f"field={self.field!r}, forward={self._forward}, "
            f"phase={self._phase.value!r})"
        )

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def forward(self) -> bool:
        """Return True if time increases along the integration."""
        return self._forward

    @property
    def stages(self) -> int:
        """Return S, the number of stage slopes of one step."""
        return self.family.stages

    @property
    def dimension(self) -> int | None:
        """Return N once the first state has been stored, else None."""
        return self._dimension

    @property
    def tableau(self) -> ButcherTableau:
        """Return the family's Butcher arrays in this interpolator's field."""
        if self._tableau is None:
            self._tableau = self.family.tableau(self.field)
        return self._tableau

    @property
    def previous_state(self) -> StepState:
        """Return the state at the start of the step.

        Raises:
            UninitializedInterpolatorError: If no state was stored yet.
        """
        if self._previous is None:
            raise_uninitialized(detail="no state has been stored")
        return self._previous  # type: ignore[return-value]

    @property
    def current_state(self) -> StepState:
        """Return the state at the end of the step.

        Before the end of the in-progress step is stored this mirrors
        previous_state.

        Raises:
            UninitializedInterpolatorError: If no state was stored yet.
        """
        if self._current is None:
            raise_uninitialized(detail="no state has been stored")
        return self._current  # type: ignore[return-value]

    @property
    def slopes(self) -> StageSlopes | None:
        """Return the stage slopes of the current step, or None if stale."""
        return self._slopes

    @property
    def is_ready(self) -> bool:
        """Return True if interpolate() can be called."""
        return self._phase is _Phase.READY

    @property
    def step_size(self) -> Scalar:
        """Return h = current.time - previous.time of the completed step.

        Raises:
            UninitializedInterpolatorError: If no step is complete.
        """
        self._require_ready()
        return self._current.time - self._previous.time  # type: ignore[union-attr]

    # ------------------------------------------------------------------
    # Protocol
    # ------------------------------------------------------------------

    def store_state(self, state: StepState) -> None:
        """
        Record a boundary state.

        Before the slopes of the in-progress step are attached, the state
        seeds the step start (previous and current both point to it). Once
        slopes are attached, it completes the step as its end.

        Args:
            state: Boundary snapshot; converted into this field and copied.
        """
        if self._phase is _Phase.READY:
            raise_invalid_sequence(
                operation="store_state",
                reason="the step is already complete; call shift() first",
            )

        adopted = self._adopt_state(state)

        if self._phase in _SEEDING_PHASES:
            self._previous = adopted
            self._current = adopted
            self._phase = _Phase.SEEDED
            logger.debug("Seeded step start at t=%s", adopted.time)
            return

        previous = cast("StepState", self._previous)
        h = adopted.time - previous.time
        if h == 0:
            raise_invalid_sequence(
                operation="store_state",
                reason=(
                    "step end time equals step start time "
                    f"({self.field.to_real(previous.time)!r}); degenerate step"
                ),
            )
        if (h > 0) != self._forward:
            direction = "forward" if self._forward else "backward"
            raise_invalid_sequence(
                operation="store_state",
                reason=(
                    f"step from t={self.field.to_real(previous.time)!r} to "
                    f"t={self.field.to_real(adopted.time)!r} contradicts "
                    f"{direction} integration"
                ),
            )

        self._current = adopted
        self._phase = _Phase.READY
        logger.debug(
            "Completed step [%s, %s] (h=%s)", previous.time, adopted.time, h
        )

    def set_slopes(self, slopes: StageSlopes | Sequence[Sequence[object]]) -> None:
        """
        Attach the stage derivatives of the in-progress step.

        Args:
            slopes: S stage vectors of length N; converted into this field
                and copied. Re-attaching before the step end is stored
                replaces the previous slopes.
        """
        if self._phase not in _SLOPE_PHASES:
            reason = (
                "no step start has been stored"
                if self._phase is _Phase.EMPTY
                else "the step is already complete; call shift() first"
            )
            raise_invalid_sequence(operation="set_slopes", reason=reason)

        vectors = slopes.vectors if isinstance(slopes, StageSlopes) else slopes
        if len(vectors) != self.stages:
            raise_dimension_mismatch(
                name="stage slopes", expected=self.stages, got=len(vectors)
            )
        for i, vector in enumerate(vectors):
            shape = np.shape(vector)
            if len(shape) != 1 or shape[0] != self._dimension:
                raise_dimension_mismatch(
                    name=f"slope {i}",
                    expected=int(self._dimension),  # type: ignore[arg-type]
                    got=int(np.size(vector)),
                )

        self._slopes = StageSlopes.from_field(self.field, vectors)
        self._phase = _Phase.SLOPED
        logger.debug("Attached %d stage slopes", self.stages)

    def shift(self) -> None:
        """
        Promote the step end to the start of the next step.

        The slopes become stale and must be replaced through set_slopes()
        before the next query. Calling shift() again without an intervening
        store_state()/set_slopes() changes nothing.
        """
        if self._phase is _Phase.EMPTY:
            raise_invalid_sequence(
                operation="shift", reason="no state has been stored"
            )
        if self._phase is _Phase.SHIFTED:
            return

        self._previous = self._current
        self._slopes = None
        self._phase = _Phase.SHIFTED
        logger.debug(
            "Shifted to step start t=%s", cast("StepState", self._previous).time
        )

    def interpolate(self, time: object) -> StepState:
        """
        Compute state and derivative at a time of the completed step.

        Args:
            time: Query time (field scalar or anything the field converts).

        Returns:
            StepState at the requested time.

        Raises:
            UninitializedInterpolatorError: If no step is complete.
            OutOfStepRangeError: If the query lies outside the step and the
                family forbids extrapolation.
        """
        self._require_ready()
        previous = cast("StepState", self._previous)
        current = cast("StepState", self._current)
        field = self.field

        t = field.convert(time)
        h = current.time - previous.time
        theta = (t - previous.time) / h

        if not self.family.allows_extrapolation and (theta < 0 or theta > 1):
            raise_out_of_step_range(
                method=self.family.name, theta=field.to_real(theta)
            )

        if theta <= 0.5:
            weights = self.family.previous_weights(theta, field)
            state = previous.state + self._combine(weights) * (theta * h)
        else:
            weights = self.family.current_weights(theta, field)
            state = current.state - self._combine(weights) * ((field.one - theta) * h)

        if theta == 0:
            derivative = previous.derivative
        elif theta == 1:
            derivative = current.derivative
        else:
            derivative = self._combine(self.family.derivative_weights(theta, field))

        return StepState(time=t, state=state, derivative=derivative)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _require_ready(self) -> None:
        if self._phase is _Phase.READY:
            return
        details = {
            _Phase.EMPTY: "no state has been stored",
            _Phase.SEEDED: "slopes of the step have not been set",
            _Phase.SHIFTED: "slopes have not been set since the last shift()",
            _Phase.SLOPED: "the step end state has not been stored",
        }
        raise_uninitialized(detail=details[self._phase])

    def _adopt_state(self, state: StepState) -> StepState:
        adopted = StepState.from_field(
            self.field, state.time, state.state, state.derivative
        )
        if self._dimension is None:
            self._dimension = adopted.dimension
        elif adopted.dimension != self._dimension:
            raise_dimension_mismatch(
                name="state", expected=self._dimension, got=adopted.dimension
            )
        return adopted

    def _combine(self, weights: Sequence[Scalar]) -> FieldArray:
        """Return sum_i weights[i] * slopes[i], accumulated in stage order."""
        vectors = cast("StageSlopes", self._slopes).vectors
        acc = vectors[0] * weights[0]
        for k, w in zip(vectors[1:], weights[1:], strict=True):
            acc = acc + k * w
        return np.asarray(acc)
