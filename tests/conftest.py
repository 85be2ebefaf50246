"""Global pytest configuration and shared fixtures for rk_dense."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Final

import pytest

from rk_dense import (
    FAMILIES,
    DenseOutputInterpolator,
    DenseOutputPolynomial,
    FloatField,
    MpmathField,
    StepState,
    explicit_step,
    get_family,
)

if TYPE_CHECKING:
    from rk_dense import RealField
    from rk_dense.fields import FieldArray

# -----------------------------------------------------------------------------
# Constants
# -----------------------------------------------------------------------------

FAMILY_NAMES: Final[tuple[str, ...]] = tuple(FAMILIES)

# Extended precision used whenever a test needs a non-float field.
MPMATH_DPS: Final[int] = 50

StepFactory = Callable[..., DenseOutputInterpolator]


# -----------------------------------------------------------------------------
# Markers
# -----------------------------------------------------------------------------


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers used by the test suite."""
    config.addinivalue_line(
        "markers",
        "mpmath: mark test as exercising extended precision arithmetic",
    )


# -----------------------------------------------------------------------------
# Fixtures
# -----------------------------------------------------------------------------


@pytest.fixture(params=["float", "mpmath"])
def field(request: pytest.FixtureRequest) -> RealField:
    """Each supported scalar field."""
    if request.param == "mpmath":
        return MpmathField(dps=MPMATH_DPS)
    return FloatField()


@pytest.fixture(params=FAMILY_NAMES)
def family_name(request: pytest.FixtureRequest) -> str:
    """Every registered dense-output family."""
    return str(request.param)


def harmonic_rhs(field: RealField) -> Callable[[object, FieldArray], list[object]]:  # noqa: ARG001
    """
    Right-hand side of y0' = y1, y1' = -y0.

    With y(t0) = (sin t0, cos t0) the exact solution is (sin t, cos t).

    Returns:
        f(t, y) computed with field operators.
    """

    def rhs(_t: object, y: FieldArray) -> list[object]:
        return [y[1], -y[0]]

    return rhs


def harmonic_state(field: RealField, t: object) -> StepState:
    """Exact state and derivative of the harmonic oscillator at t."""
    tt = field.convert(t)
    s = field.sin(tt)
    c = field.cos(tt)
    return StepState(time=tt, state=field.array([s, c]), derivative=field.array([c, -s]))


@pytest.fixture
def step_interpolator() -> StepFactory:
    """
    Factory building an interpolator over one harmonic-oscillator step.

    The interpolator is driven exactly as an integration loop drives it:
    seed the start, shift, take the step, attach slopes, store the end.

    Returns:
        Callable(family, field, t0=0.25, h=0.125, **family_kwargs), where
        family is a registered name or a ready DenseOutputPolynomial.
    """

    def _make(
        name: str | DenseOutputPolynomial,
        field: RealField,
        *,
        t0: float = 0.25,
        h: float = 0.125,
        **family_kwargs: bool,
    ) -> DenseOutputInterpolator:
        family = (
            name
            if isinstance(name, DenseOutputPolynomial)
            else get_family(name, **family_kwargs)
        )
        interp = DenseOutputInterpolator(family, field=field, forward=h > 0)
        start = harmonic_state(field, t0)
        interp.store_state(start)
        interp.shift()
        slopes, end = explicit_step(
            harmonic_rhs(field), interp.tableau, field, start.time, start.state, h
        )
        interp.set_slopes(slopes)
        interp.store_state(end)
        return interp

    return _make


@pytest.fixture
def exact_state() -> Callable[[RealField, object], StepState]:
    """Exact harmonic-oscillator StepState at a time, in a field."""
    return harmonic_state


@pytest.fixture
def rhs_factory() -> Callable[[RealField], Callable[[object, FieldArray], list[object]]]:
    """Harmonic-oscillator right-hand side, in a field."""
    return harmonic_rhs
