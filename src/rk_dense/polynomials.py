# rk_dense/src/rk_dense/polynomials.py
"""Method-specific dense-output polynomials.

A dense-output family supplies, for one Runge-Kutta tableau, weight
polynomials b_i(theta) such that

    y(t0 + theta*h)  = y0 + h * sum_i b_i(theta) * k_i
    y'(t0 + theta*h) =      sum_i b_i'(theta) * k_i

with b_i(0) == 0 and b_i(1) == B_i. The interpolator never evaluates b_i
directly. It asks for one of three weight sets:

    previous_weights:   w_i with b_i(theta) = theta * w_i(theta)
    current_weights:    w_i with B_i - b_i(theta) = (1 - theta) * w_i(theta)
    derivative_weights: b_i'(theta)

so the state can be formed from whichever boundary is closer, with the
distance to that boundary as an explicit factor. That factor is exactly zero
at the boundary itself, which is what makes the endpoints bit-exact.

Families with rational coefficients subclass :class:`RationalDenseOutput`
and only list their tables; the three weight sets are derived once per field
with exact Fraction arithmetic and evaluated in Horner form through the
field's own operators. Families whose formulas do not fit that mould can
implement :class:`DenseOutputPolynomial` directly.

Supported families:
    - "euler":             Explicit Euler, linear interpolation.
    - "midpoint":          Explicit midpoint, quadratic interpolation.
    - "classical":         Classical RK4 with its cubic continuous extension.
    - "gill":              Gill's RK4 variant; RK4 cubic with the middle
                           weight split by 1 -/+ 1/sqrt(2).
    - "three-eighths":     Kutta's 3/8 rule with its cubic extension.
    - "higham-hall-54":    Higham-Hall 5(4) pair, quartic extension.
    - "dormand-prince-54": Dormand-Prince 5(4) pair, Shampine's quartic
                           extension (the dopri5 dense output).
    - "luther":            Luther's sixth-order method, quintic extension;
                           entries of the form p + q*sqrt(21).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from fractions import Fraction
from typing import TYPE_CHECKING, ClassVar, Final

from .tableau import ButcherTableau

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from .fields import RealField, Scalar


_UNKNOWN_METHOD_ERROR_MSG = "Unknown method: {method}. Known methods: {known}"

F = Fraction

RationalRows = tuple[tuple[Fraction, ...], ...]


# =============================================================================
# Strategy interface
# =============================================================================


class DenseOutputPolynomial(ABC):
    """Uniform interface of a dense-output family.

    Attributes:
        name: Registry name of the family.
        stages: Number of stages S of the tableau.
        order: Order of the step update.
        interpolation_order: Order of the continuous extension.
        allows_extrapolation: Whether queries with theta outside [0, 1] are
            answered (True) or rejected with OutOfStepRangeError (False).
    """

    name: ClassVar[str]
    stages: ClassVar[int]
    order: ClassVar[int]
    interpolation_order: ClassVar[int]

    def __init__(self, *, allows_extrapolation: bool = True) -> None:
        """Initialize the family.

        Args:
            allows_extrapolation: Whether to answer queries outside the step.
        """
        self.allows_extrapolation = bool(allows_extrapolation)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(allows_extrapolation={self.allows_extrapolation})"
        )

    @abstractmethod
    def tableau(self, field: RealField) -> ButcherTableau:
        """Return the Butcher arrays of the method in the given field."""

    @abstractmethod
    def previous_weights(self, theta: Scalar, field: RealField) -> list[Scalar]:
        """Return w_i(theta) with b_i(theta) = theta * w_i(theta)."""

    @abstractmethod
    def current_weights(self, theta: Scalar, field: RealField) -> list[Scalar]:
        """Return w_i(theta) with B_i - b_i(theta) = (1 - theta) * w_i(theta)."""

    @abstractmethod
    def derivative_weights(self, theta: Scalar, field: RealField) -> list[Scalar]:
        """Return b_i'(theta)."""


# =============================================================================
# Rational coefficient tables
# =============================================================================


@dataclass(frozen=True, slots=True)
class _FieldCoefficients:
    """Weight polynomial coefficients converted into one field.

    Every row is stored lowest power first, ready for Horner evaluation.
    """

    previous: tuple[tuple[Scalar, ...], ...]
    current: tuple[tuple[Scalar, ...], ...]
    derivative: tuple[tuple[Scalar, ...], ...]
    multipliers: tuple[Scalar, ...] | None


def _horner(coeffs: Sequence[Scalar], theta: Scalar, zero: Scalar) -> Scalar:
    acc = zero
    for c in reversed(coeffs):
        acc = acc * theta + c
    return acc


def _quotient_by_one_minus_theta(row: Sequence[Fraction]) -> tuple[Fraction, ...]:
    """Divide B - b(theta) by (1 - theta) exactly.

    With b(theta) = sum_{j>=1} row[j-1] * theta**j and B = b(1), the quotient
    coefficients are the running remainders q_k = B - sum_{j<=k} row[j-1].

    Returns:
        Quotient coefficients, lowest power first.
    """
    remainder = sum(row, F(0))
    quotient = []
    for c in row:
        quotient.append(remainder)
        remainder -= c
    return tuple(quotient)


def _trim(row: Sequence[Fraction]) -> tuple[Fraction, ...]:
    out = list(row)
    while out and out[-1] == 0:
        out.pop()
    return tuple(out)


def _derivative_row(row: Sequence[Fraction]) -> tuple[Fraction, ...]:
    return tuple(j * c for j, c in enumerate(row, start=1))


def _surd_values(
    field: RealField,
    root: Scalar | None,
    rational: Sequence[Fraction],
    surd: Sequence[Fraction],
) -> tuple[Scalar, ...]:
    """Return rational[j] + root * surd[j] in field.

    The shorter sequence is padded with zeros; zero surd parts add nothing,
    so purely rational entries stay exact conversions.
    """
    out = []
    for j in range(max(len(rational), len(surd))):
        value = field.convert(rational[j]) if j < len(rational) else field.zero
        if j < len(surd) and surd[j] != 0:
            value = value + root * field.convert(surd[j])
        out.append(value)
    return tuple(out)


class RationalDenseOutput(DenseOutputPolynomial):
    """Dense output described by exact rational tables.

    Subclasses set:
        A_ROWS:  lower rows 1..S-1 of the Butcher matrix.
        B:       quadrature weights.
        C:       stage nodes.
        WEIGHTS: row i lists the coefficients of b_i(theta) for
                 theta**1, theta**2, ... (an empty row means b_i == 0).

    Tableaux of the form p + q*sqrt(SURD) with rational p and q also set
    SURD and list the q parts in A_SURD_ROWS, C_SURD and SURD_WEIGHTS
    (same layout as their rational counterparts, empty when all zero).
    """

    A_ROWS: ClassVar[RationalRows]
    B: ClassVar[tuple[Fraction, ...]]
    C: ClassVar[tuple[Fraction, ...]]
    WEIGHTS: ClassVar[RationalRows]

    SURD: ClassVar[int | None] = None
    A_SURD_ROWS: ClassVar[RationalRows] = ()
    C_SURD: ClassVar[tuple[Fraction, ...]] = ()
    SURD_WEIGHTS: ClassVar[RationalRows] = ()

    def __init__(self, *, allows_extrapolation: bool = True) -> None:
        """Initialize the family with an empty per-field coefficient cache."""
        super().__init__(allows_extrapolation=allows_extrapolation)
        self._cache: dict[RealField, _FieldCoefficients] = {}

    def _root(self, field: RealField) -> Scalar | None:
        if self.SURD is None:
            return None
        return field.sqrt(field.convert(self.SURD))

    def tableau(self, field: RealField) -> ButcherTableau:
        """Return the Butcher arrays converted into field.

        Returns:
            ButcherTableau whose entries are field scalars.
        """
        if self.SURD is None:
            return ButcherTableau.from_rows(field, self.A_ROWS, self.B, self.C)
        root = self._root(field)
        surd_rows = self.A_SURD_ROWS or tuple(() for _ in self.A_ROWS)
        a_rows = [
            _surd_values(field, root, row, surd)
            for row, surd in zip(self.A_ROWS, surd_rows, strict=True)
        ]
        c = _surd_values(field, root, self.C, self.C_SURD)
        return ButcherTableau.from_rows(field, a_rows, self.B, c)

    def stage_multipliers(self, field: RealField) -> tuple[Scalar, ...] | None:  # noqa: ARG002
        """Return per-stage factors applied on top of the rational weights.

        Irrational tableaux (Gill) scale otherwise rational weight
        polynomials by field constants; rational families return None.
        """
        return None

    def _coefficients(self, field: RealField) -> _FieldCoefficients:
        cached = self._cache.get(field)
        if cached is not None:
            return cached

        root = self._root(field)
        surd_rows = self.SURD_WEIGHTS or tuple(() for _ in self.WEIGHTS)

        def build(
            transform: Callable[[Sequence[Fraction]], Sequence[Fraction]],
        ) -> tuple[tuple[Scalar, ...], ...]:
            return tuple(
                _surd_values(field, root, transform(row), transform(surd))
                for row, surd in zip(self.WEIGHTS, surd_rows, strict=True)
            )

        coeffs = _FieldCoefficients(
            previous=build(tuple),
            current=build(_quotient_by_one_minus_theta),
            derivative=build(_derivative_row),
            multipliers=self.stage_multipliers(field),
        )
        self._cache[field] = coeffs
        return coeffs

    def _evaluate(
        self,
        rows: tuple[tuple[Scalar, ...], ...],
        multipliers: tuple[Scalar, ...] | None,
        theta: Scalar,
        field: RealField,
    ) -> list[Scalar]:
        zero = field.zero
        values = [_horner(row, theta, zero) for row in rows]
        if multipliers is None:
            return values
        return [v * m for v, m in zip(values, multipliers, strict=True)]

    def previous_weights(self, theta: Scalar, field: RealField) -> list[Scalar]:
        """Return w_i(theta) with b_i(theta) = theta * w_i(theta)."""
        coeffs = self._coefficients(field)
        return self._evaluate(coeffs.previous, coeffs.multipliers, theta, field)

    def current_weights(self, theta: Scalar, field: RealField) -> list[Scalar]:
        """Return w_i(theta) with B_i - b_i(theta) = (1 - theta) * w_i(theta)."""
        coeffs = self._coefficients(field)
        return self._evaluate(coeffs.current, coeffs.multipliers, theta, field)

    def derivative_weights(self, theta: Scalar, field: RealField) -> list[Scalar]:
        """Return b_i'(theta), the analytic derivative of each weight."""
        coeffs = self._coefficients(field)
        return self._evaluate(coeffs.derivative, coeffs.multipliers, theta, field)


def _hermite_quartic_rows(
    b: Sequence[Fraction], d: Sequence[Fraction]
) -> RationalRows:
    """Expand a Hermite cubic plus quartic correction into weight rows.

    The interpolant is

        y0 + theta*[ dy - eta*(dy - h*k_0) + theta*eta*(2*dy - h*k_0 - h*k_last)
                     + theta*eta**2 * h*sum_i d_i k_i ]

    with eta = 1 - theta and dy = h*sum_i b_i k_i. The first stage is the
    derivative at t0 and the last stage (FSAL) the derivative at t0 + h.

    Returns:
        Rows of b_i(theta) coefficients for theta**1..theta**4.
    """
    last = len(b) - 1
    rows = []
    for i, (bi, di) in enumerate(zip(b, d, strict=True)):
        e = F(1) if i == 0 else F(0)
        f = F(1) if i == last else F(0)
        rows.append(_trim((e, 3 * bi - 2 * e - f + di, -2 * bi + e + f - 2 * di, di)))
    return tuple(rows)


# =============================================================================
# Families
# =============================================================================


class Euler(RationalDenseOutput):
    """Explicit Euler with linear interpolation."""

    name = "euler"
    stages = 1
    order = 1
    interpolation_order = 1

    A_ROWS = ()
    B = (F(1),)
    C = (F(0),)
    WEIGHTS = ((F(1),),)


class Midpoint(RationalDenseOutput):
    """Explicit midpoint rule with quadratic interpolation."""

    name = "midpoint"
    stages = 2
    order = 2
    interpolation_order = 2

    A_ROWS = ((F(1, 2),),)
    B = (F(0), F(1))
    C = (F(0), F(1, 2))
    WEIGHTS = (
        (F(1), F(-1)),
        (F(0), F(1)),
    )


class ClassicalRungeKutta(RationalDenseOutput):
    """Classical fourth-order Runge-Kutta method.

    The continuous extension is the third-order cubic

        b_1 = theta - 3/2 theta^2 + 2/3 theta^3
        b_2 = b_3 = theta^2 - 2/3 theta^3
        b_4 = -1/2 theta^2 + 2/3 theta^3
    """

    name = "classical"
    stages = 4
    order = 4
    interpolation_order = 3

    A_ROWS = (
        (F(1, 2),),
        (F(0), F(1, 2)),
        (F(0), F(0), F(1)),
    )
    B = (F(1, 6), F(1, 3), F(1, 3), F(1, 6))
    C = (F(0), F(1, 2), F(1, 2), F(1))
    WEIGHTS = (
        (F(1), F(-3, 2), F(2, 3)),
        (F(0), F(1), F(-2, 3)),
        (F(0), F(1), F(-2, 3)),
        (F(0), F(-1, 2), F(2, 3)),
    )


class Gill(ClassicalRungeKutta):
    """Gill's fourth-order method.

    Same cubic as the classical method; the two middle stages carry the
    shared weight scaled by 1 - 1/sqrt(2) and 1 + 1/sqrt(2).
    """

    name = "gill"

    def tableau(self, field: RealField) -> ButcherTableau:
        """Return the Gill tableau with its sqrt(2) entries computed in field."""
        one = field.one
        two = field.convert(2)
        sqrt2 = field.sqrt(two)
        half = one / two
        return ButcherTableau.from_rows(
            field,
            (
                (half,),
                ((sqrt2 - one) / two, (two - sqrt2) / two),
                (field.zero, -sqrt2 / two, (two + sqrt2) / two),
            ),
            (one / 6, (two - sqrt2) / 6, (two + sqrt2) / 6, one / 6),
            (field.zero, half, half, one),
        )

    def stage_multipliers(self, field: RealField) -> tuple[Scalar, ...]:
        """Return (1, 1 - 1/sqrt(2), 1 + 1/sqrt(2), 1) in field."""
        one = field.one
        inv_sqrt2 = one / field.sqrt(field.convert(2))
        return (one, one - inv_sqrt2, one + inv_sqrt2, one)


class ThreeEighths(RationalDenseOutput):
    """Kutta's 3/8 rule with its cubic continuous extension."""

    name = "three-eighths"
    stages = 4
    order = 4
    interpolation_order = 3

    A_ROWS = (
        (F(1, 3),),
        (F(-1, 3), F(1)),
        (F(1), F(-1), F(1)),
    )
    B = (F(1, 8), F(3, 8), F(3, 8), F(1, 8))
    C = (F(0), F(1, 3), F(2, 3), F(1))
    WEIGHTS = (
        (F(1), F(-15, 8), F(1)),
        (F(0), F(15, 8), F(-3, 2)),
        (F(0), F(3, 8)),
        (F(0), F(-3, 8), F(1, 2)),
    )


class HighamHall54(RationalDenseOutput):
    """Higham-Hall 5(4) embedded pair.

    The seventh stage is the derivative at the step end; it carries no
    weight in the update nor in the quartic continuous extension.
    """

    name = "higham-hall-54"
    stages = 7
    order = 5
    interpolation_order = 3

    A_ROWS = (
        (F(2, 9),),
        (F(1, 12), F(1, 4)),
        (F(1, 8), F(0), F(3, 8)),
        (F(91, 500), F(-27, 100), F(78, 125), F(8, 125)),
        (F(-11, 20), F(27, 20), F(12, 5), F(-36, 5), F(5)),
        (F(1, 12), F(0), F(27, 32), F(-4, 3), F(125, 96), F(5, 48)),
    )
    B = (F(1, 12), F(0), F(27, 32), F(-4, 3), F(125, 96), F(5, 48), F(0))
    C = (F(0), F(2, 9), F(1, 3), F(1, 2), F(3, 5), F(1), F(1))
    WEIGHTS = (
        (F(1), F(-15, 4), F(16, 3), F(-5, 2)),
        (),
        (F(0), F(459, 32), F(-243, 8), F(135, 8)),
        (F(0), F(-22), F(152, 3), F(-30)),
        (F(0), F(375, 32), F(-625, 24), F(125, 8)),
        (F(0), F(-5, 16), F(5, 12)),
        (),
    )


class DormandPrince54(RationalDenseOutput):
    """Dormand-Prince 5(4) embedded pair with Shampine's dense output."""

    name = "dormand-prince-54"
    stages = 7
    order = 5
    interpolation_order = 4

    A_ROWS = (
        (F(1, 5),),
        (F(3, 40), F(9, 40)),
        (F(44, 45), F(-56, 15), F(32, 9)),
        (F(19372, 6561), F(-25360, 2187), F(64448, 6561), F(-212, 729)),
        (
            F(9017, 3168),
            F(-355, 33),
            F(46732, 5247),
            F(49, 176),
            F(-5103, 18656),
        ),
        (F(35, 384), F(0), F(500, 1113), F(125, 192), F(-2187, 6784), F(11, 84)),
    )
    B = (F(35, 384), F(0), F(500, 1113), F(125, 192), F(-2187, 6784), F(11, 84), F(0))
    C = (F(0), F(1, 5), F(3, 10), F(4, 5), F(8, 9), F(1), F(1))

    # Quartic correction coefficients of the dopri5 continuous extension.
    D: ClassVar[tuple[Fraction, ...]] = (
        F(-12715105075, 11282082432),
        F(0),
        F(87487479700, 32700410799),
        F(-10690763975, 1880347072),
        F(701980252875, 199316789632),
        F(-1453857185, 822651844),
        F(69997945, 29380423),
    )
    WEIGHTS = _hermite_quartic_rows(B, D)


class Luther(RationalDenseOutput):
    """Luther's sixth-order method with its quintic continuous extension.

    Nodes and coupling coefficients involve sqrt(21); every such entry is
    stored as a rational part plus a rational multiple of sqrt(21). The
    quadrature weights are rational.
    """

    name = "luther"
    stages = 7
    order = 6
    interpolation_order = 4

    SURD = 21

    A_ROWS = (
        (F(1),),
        (F(3, 8), F(1, 8)),
        (F(8, 27), F(2, 27), F(8, 27)),
        (F(-21, 392), F(-56, 392), F(336, 392), F(-63, 392)),
        (F(-1155, 1960), F(-280, 1960), F(0), F(63, 1960), F(2352, 1960)),
        (
            F(330, 180),
            F(120, 180),
            F(-200, 180),
            F(126, 180),
            F(-686, 180),
            F(490, 180),
        ),
    )
    A_SURD_ROWS = (
        (),
        (),
        (),
        (F(9, 392), F(8, 392), F(-48, 392), F(3, 392)),
        (F(-255, 1960), F(-40, 1960), F(-320, 1960), F(363, 1960), F(392, 1960)),
        (F(105, 180), F(0), F(280, 180), F(-189, 180), F(-126, 180), F(-70, 180)),
    )
    B = (F(1, 20), F(0), F(16, 45), F(0), F(49, 180), F(49, 180), F(1, 20))
    C = (F(0), F(1), F(1, 2), F(2, 3), F(1, 2), F(1, 2), F(1))
    C_SURD = (F(0), F(0), F(0), F(0), F(-1, 14), F(1, 14), F(0))

    WEIGHTS = (
        (F(1), F(-27, 5), F(12), F(-47, 4), F(21, 5)),
        (),
        (F(0), F(-104, 15), F(320, 9), F(-152, 3), F(112, 5)),
        (F(0), F(162, 25), F(-162, 5), F(243, 5), F(-567, 25)),
        (F(0), F(833, 300), F(-637, 90), F(392, 60), F(-49, 25)),
        (F(0), F(833, 300), F(-637, 90), F(392, 60), F(-49, 25)),
        (F(0), F(3, 10), F(-1), F(3, 4)),
    )
    SURD_WEIGHTS = (
        (),
        (),
        (),
        (),
        (F(0), F(343, 300), F(-357, 90), F(287, 60), F(-49, 25)),
        (F(0), F(-343, 300), F(357, 90), F(-287, 60), F(49, 25)),
        (),
    )


# =============================================================================
# Registry
# =============================================================================

FAMILIES: Final[dict[str, type[DenseOutputPolynomial]]] = {
    cls.name: cls
    for cls in (
        Euler,
        Midpoint,
        ClassicalRungeKutta,
        Gill,
        ThreeEighths,
        HighamHall54,
        DormandPrince54,
        Luther,
    )
}


def get_family(name: str, *, allows_extrapolation: bool = True) -> DenseOutputPolynomial:
    """Build a dense-output family by registry name.

    Args:
        name: Registry name, for example "classical" or "dormand-prince-54".
        allows_extrapolation: Whether the family answers queries outside the step.

    Returns:
        New family instance.

    Raises:
        ValueError: If name is not registered.
    """
    key = str(name).strip().lower()
    try:
        cls = FAMILIES[key]
    except KeyError:
        msg = _UNKNOWN_METHOD_ERROR_MSG.format(method=name, known=sorted(FAMILIES))
        raise ValueError(msg) from None
    return cls(allows_extrapolation=allows_extrapolation)
