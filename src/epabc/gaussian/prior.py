"""
prior.py
--------

Gaussian prior over the model parameter θ.

The caller supplies the prior in moment form (μ₀, Σ₀) for a vector θ, or
(μ₀, v₀) for a scalar θ. The natural parameters are derived once at
construction and never change; the engine starts its global approximation
from them and keeps the identity

    global = prior + Σᵢ site[i]

Connections
-----------
- EPABCEngine reads GaussianPrior.natural and GaussianPrior.representation.
- The representation (scalar vs multivariate) is inferred from mean's shape.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import jax
import jax.numpy as jnp

from epabc.errors import InvalidConfigurationError, NumericalDegeneracyError
from epabc.gaussian.representation import (
    GaussianRepresentation,
    NaturalParams,
    as_float_array,
    representation_for,
)
from epabc.gaussian.transform import ParameterTransform


@dataclass(frozen=True, eq=False)
class GaussianPrior:
    """
    Gaussian prior N(mean, cov).

    Parameters
    ----------
    mean : array-like
        Prior mean. Scalar for a univariate parameter, shape (d,) otherwise.
    cov : array-like
        Prior variance (scalar) or covariance matrix, shape (d, d).
        Must be symmetric positive-definite.

    Raises
    ------
    InvalidConfigurationError
        On shape mismatch, or when cov is not symmetric positive-definite.
    """

    mean: jnp.ndarray
    cov: jnp.ndarray
    representation: GaussianRepresentation = field(init=False, repr=False)
    natural: NaturalParams = field(init=False, repr=False)

    def __post_init__(self):
        mean = as_float_array(self.mean)
        cov = as_float_array(self.cov)
        representation = representation_for(mean)
        representation.check_moments(mean, cov)
        if not representation.is_positive_definite(cov):
            raise InvalidConfigurationError(
                "prior covariance must be symmetric positive-definite"
            )
        try:
            natural = ParameterTransform(representation).moment_to_natural(mean, cov)
        except NumericalDegeneracyError as err:
            raise InvalidConfigurationError(f"invalid prior covariance: {err}") from err

        object.__setattr__(self, "mean", mean)
        object.__setattr__(self, "cov", cov)
        object.__setattr__(self, "representation", representation)
        object.__setattr__(self, "natural", natural)

    @classmethod
    def standard(cls, dim: int | None = None) -> GaussianPrior:
        """N(0, 1) for dim=None, else N(0, I_dim)."""
        if dim is None:
            return cls(mean=0.0, cov=1.0)
        return cls(mean=jnp.zeros(dim), cov=jnp.eye(dim))

    @property
    def dim(self) -> int:
        return self.representation.dim

    def sample(self, key: jax.Array, n: int) -> jnp.ndarray:
        """Draw n parameter vectors from the prior, shape (n,) + event_shape."""
        return self.representation.sample(key, self.mean, self.cov, n)

    @staticmethod
    def from_any(prior: Any) -> GaussianPrior:
        """Accept a GaussianPrior or a (mean, cov) pair."""
        if isinstance(prior, GaussianPrior):
            return prior
        try:
            mean, cov = prior
        except (TypeError, ValueError) as err:
            raise InvalidConfigurationError(
                "prior must be a GaussianPrior or a (mean, cov) pair"
            ) from err
        return GaussianPrior(mean=mean, cov=cov)
