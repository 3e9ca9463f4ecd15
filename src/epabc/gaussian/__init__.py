"""
gaussian
========

Gaussian approximating family for EP-ABC.

This subpackage provides:
- NaturalParams : immutable (r, Q) pair, the unit of site/global bookkeeping.
- ScalarGaussian, MultivariateGaussian : the algebra behind every
  conversion, cavity and moment computation.
- ParameterTransform : moment <-> natural conversion over a representation.
- GaussianPrior : caller-supplied prior in moment form.
"""

from .prior import GaussianPrior
from .representation import (
    GaussianRepresentation,
    MultivariateGaussian,
    NaturalParams,
    ScalarGaussian,
    representation_for,
)
from .transform import ParameterTransform, moment_to_natural, natural_to_moment

__all__ = [
    "GaussianPrior",
    "GaussianRepresentation",
    "MultivariateGaussian",
    "NaturalParams",
    "ScalarGaussian",
    "representation_for",
    "ParameterTransform",
    "moment_to_natural",
    "natural_to_moment",
]
