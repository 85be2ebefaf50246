# rk_dense/src/rk_dense/config.py
"""Configuration model for building dense-output interpolators.

The model is YAML/JSON friendly (plain strings, bools and ints) and turns into
native rk_dense objects: a RealField, a DenseOutputPolynomial family and a
DenseOutputInterpolator bound to both. The family/field pairing is explicit
data here; nothing is discovered from class names.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .fields import FloatField, MpmathField, RealField
from .interpolator import DenseOutputInterpolator
from .polynomials import DenseOutputPolynomial, get_family

MethodName = Literal[
    "euler",
    "midpoint",
    "classical",
    "gill",
    "three-eighths",
    "higham-hall-54",
    "dormand-prince-54",
    "luther",
]
ArithmeticName = Literal["float", "mpmath"]


class InterpolatorConfig(BaseModel):
    """Configuration schema for a DenseOutputInterpolator."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    method: MethodName = Field(
        default="classical", description="Runge-Kutta family of the integrator"
    )
    forward: bool = Field(
        default=True, description="True if time increases along the integration"
    )
    arithmetic: ArithmeticName = Field(
        default="float", description="Scalar representation used by the formulas"
    )

    # Only meaningful for arithmetic == "mpmath".
    precision: int = Field(
        default=50,
        ge=16,
        le=10_000,
        description="Working precision in decimal digits for mpmath arithmetic",
    )

    allow_extrapolation: bool | None = Field(
        default=None,
        description=(
            "Answer queries outside the step; None keeps the family default."
        ),
    )

    @model_validator(mode="after")
    def _validate_precision_usage(self) -> InterpolatorConfig:
        if self.arithmetic == "float" and "precision" in self.model_fields_set:
            msg = (
                "precision only applies to mpmath arithmetic; "
                "float arithmetic is fixed at IEEE double precision."
            )
            raise ValueError(msg)
        return self

    def build_field(self) -> RealField:
        """
        Build the configured scalar field.

        Returns:
            FloatField or MpmathField at the configured precision.
        """
        if self.arithmetic == "mpmath":
            return MpmathField(dps=self.precision)
        return FloatField()

    def build_family(self) -> DenseOutputPolynomial:
        """
        Build the configured dense-output family.

        Returns:
            Family instance honoring allow_extrapolation when it is set.
        """
        if self.allow_extrapolation is None:
            return get_family(self.method)
        return get_family(self.method, allows_extrapolation=self.allow_extrapolation)

    def build_interpolator(self) -> DenseOutputInterpolator:
        """
        Build an empty interpolator from this configuration.

        Returns:
            DenseOutputInterpolator ready for its first store_state call.
        """
        return DenseOutputInterpolator(
            self.build_family(), field=self.build_field(), forward=self.forward
        )
