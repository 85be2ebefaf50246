# rk_dense/src/rk_dense/stepping.py
"""Stage evaluation of one explicit Runge-Kutta step.

This is the piece of an integration loop that produces what the dense-output
interpolator consumes: the stage slopes of a step and the state at its end.
It performs no error estimation and no step-size control.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, TypeAlias

from .errors import raise_dimension_mismatch
from .states import StageSlopes, StepState

if TYPE_CHECKING:
    from .fields import FieldArray, RealField, Scalar
    from .tableau import ButcherTableau

DerivativeFunction: TypeAlias = Callable[["Scalar", "FieldArray"], Sequence[object]]


def _evaluate(
    derivative: DerivativeFunction,
    field: RealField,
    t: Scalar,
    y: FieldArray,
) -> FieldArray:
    """Call the RHS and convert its result into a field vector.

    Returns:
        Field vector of the same length as y.
    """
    out = field.array(derivative(t, y))
    if out.shape != y.shape:
        raise_dimension_mismatch(
            name="derivative result", expected=int(y.shape[0]), got=int(out.shape[0])
        )
    return out


def explicit_step(
    derivative: DerivativeFunction,
    tableau: ButcherTableau,
    field: RealField,
    t0: object,
    y0: Sequence[object] | FieldArray,
    h: object,
) -> tuple[StageSlopes, StepState]:
    """
    Take one explicit Runge-Kutta step.

    Stage i is evaluated as

        k_i = f(t0 + c_i h, y0 + h * sum_{j<i} a_ij k_j)

    and the step end is y1 = y0 + h * sum_i b_i k_i.

    Args:
        derivative: Right-hand side f(t, y) of the ODE.
        tableau: Butcher arrays of the method, in field.
        field: Arithmetic used for every operation.
        t0: Start time.
        y0: State at t0.
        h: Signed step size.

    Returns:
        (slopes, end) where end holds t0 + h, y1 and f(t0 + h, y1).
    """
    t0_f = field.convert(t0)
    h_f = field.convert(h)
    y0_f = field.array(y0)

    a, b, c = tableau.a, tableau.b, tableau.c
    k: list[FieldArray] = []
    for i in range(tableau.stages):
        y = y0_f
        for j in range(i):
            y = y + k[j] * (h_f * a[i, j])
        k.append(_evaluate(derivative, field, t0_f + h_f * c[i], y))

    y1 = y0_f
    for i in range(tableau.stages):
        y1 = y1 + k[i] * (h_f * b[i])
    t1 = t0_f + h_f

    end = StepState(time=t1, state=y1, derivative=_evaluate(derivative, field, t1, y1))
    return StageSlopes(vectors=k), end
