"""
posterior.py
------------

Gaussian posterior approximation returned by EP-ABC.

Wraps the moments of the global approximation after some number of passes
and provides cheap sampling and density evaluation.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any

import jax
import jax.numpy as jnp
from jax.scipy.stats import multivariate_normal, norm

from epabc.gaussian.representation import (
    GaussianRepresentation,
    as_float_array,
    representation_for,
)


@dataclass(frozen=True, eq=False)
class GaussianPosterior:
    """
    Gaussian approximation N(mean, cov) to p(θ | data).

    Parameters
    ----------
    mean : array-like
        Shape () or (d,).
    cov : array-like
        Variance (scalar) or covariance, shape (d, d).
    Z : float
        Accepted fraction of the last successful site update.
    """

    mean: jnp.ndarray
    cov: jnp.ndarray
    Z: float = math.nan
    representation: GaussianRepresentation = field(init=False, repr=False)

    def __post_init__(self):
        mean = as_float_array(self.mean)
        object.__setattr__(self, "mean", mean)
        object.__setattr__(self, "cov", as_float_array(self.cov))
        object.__setattr__(self, "representation", representation_for(mean))

    @property
    def std(self) -> jnp.ndarray:
        """Marginal standard deviations."""
        if self.cov.ndim == 0:
            return jnp.sqrt(self.cov)
        return jnp.sqrt(jnp.diag(self.cov))

    def marginal(self, i: int) -> tuple[jnp.ndarray, jnp.ndarray]:
        """Mean and variance of coordinate i."""
        if self.cov.ndim == 0:
            if i != 0:
                raise IndexError("scalar posterior only has coordinate 0")
            return self.mean, self.cov
        return self.mean[i], self.cov[i, i]

    def sample(self, n: int, *, key: jax.Array) -> jnp.ndarray:
        """Draw n samples, shape (n,) or (n, d)."""
        return self.representation.sample(key, self.mean, self.cov, n)

    def log_prob(self, theta: Any) -> jnp.ndarray:
        """Gaussian log density at theta (batched over leading axes)."""
        theta = as_float_array(theta)
        if self.cov.ndim == 0:
            return norm.logpdf(theta, loc=self.mean, scale=jnp.sqrt(self.cov))
        return multivariate_normal.logpdf(theta, self.mean, self.cov)
