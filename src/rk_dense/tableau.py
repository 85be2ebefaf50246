# rk_dense/src/rk_dense/tableau.py
"""Butcher arrays of explicit Runge-Kutta methods.

A tableau is built for one field: its coefficients are field scalars, so an
mpmath tableau carries 1/3 (or sqrt(2)) at the field's precision rather than
at double precision. Families describe their coefficients with exact
rationals (or with field expressions for irrational entries) and call
:meth:`ButcherTableau.from_rows`.

Layout follows the usual convention

    c | A
    --+----
      | b^T

with A strictly lower triangular (explicit method) and c[0] == 0.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from .errors import raise_invalid_tableau

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .fields import FieldArray, RealField


@dataclass(frozen=True, slots=True)
class ButcherTableau:
    """Immutable (A, b, c) coefficient arrays.

    Attributes:
        a: Stage coupling matrix, shape (S, S), strictly lower triangular.
        b: Quadrature weights, shape (S,).
        c: Stage nodes, shape (S,).
    """

    a: FieldArray
    b: FieldArray
    c: FieldArray

    def __post_init__(self) -> None:
        """Validate shapes and explicitness, then freeze the arrays."""
        b = np.array(self.b, copy=True)
        c = np.array(self.c, copy=True)
        a = np.array(self.a, copy=True)

        if b.ndim != 1 or b.size == 0:
            raise_invalid_tableau(detail=f"b must be a non-empty vector, got {b.shape}")
        s = int(b.shape[0])
        if c.shape != (s,):
            raise_invalid_tableau(detail=f"c has shape {c.shape}, expected ({s},)")
        if a.shape != (s, s):
            raise_invalid_tableau(detail=f"a has shape {a.shape}, expected ({s}, {s})")
        if any(a[i, j] != 0 for i in range(s) for j in range(i, s)):
            raise_invalid_tableau(detail="a must be strictly lower triangular")
        if c[0] != 0:
            raise_invalid_tableau(detail="c[0] must be zero for an explicit method")

        for arr in (a, b, c):
            arr.flags.writeable = False
        object.__setattr__(self, "a", a)
        object.__setattr__(self, "b", b)
        object.__setattr__(self, "c", c)

    @classmethod
    def from_rows(
        cls,
        field: RealField,
        a_rows: Sequence[Sequence[object]],
        b: Sequence[object],
        c: Sequence[object],
    ) -> ButcherTableau:
        """Build a tableau from the non-zero lower rows of A.

        Args:
            field: Arithmetic of the resulting arrays.
            a_rows: Rows 1..S-1 of A, row i holding its i leading entries.
                Row 0 of an explicit method is all zeros and is omitted.
            b: Quadrature weights (length S).
            c: Stage nodes (length S, starting with 0).

        Returns:
            ButcherTableau holding field scalars.
        """
        s = len(b)
        if len(a_rows) != s - 1:
            raise_invalid_tableau(
                detail=f"expected {s - 1} lower rows of a, got {len(a_rows)}"
            )
        a = np.empty((s, s), dtype=field.dtype)
        a[:, :] = field.zero
        for i, row in enumerate(a_rows, start=1):
            if len(row) != i:
                raise_invalid_tableau(
                    detail=f"row {i} of a must hold {i} entries, got {len(row)}"
                )
            for j, value in enumerate(row):
                a[i, j] = field.convert(value)
        return cls(a=a, b=field.array(b), c=field.array(c))

    @property
    def stages(self) -> int:
        """Return S, the number of stages."""
        return int(self.b.shape[0])
