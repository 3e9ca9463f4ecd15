"""
diagnostics.py
--------------

Checks on EP-ABC runs.

Provides:
- additive_residual : how far the engine is from global = prior + Σ sites.
- conjugate_gaussian_posterior : closed-form posterior of a Gaussian mean
  with known noise covariance, the reference answer for Gaussian toy models.
- stack_trace (re-exported) : trace -> arrays for plotting.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import jax.numpy as jnp

from epabc.gaussian.representation import as_float_array
from epabc.inference.trace import stack_trace
from epabc.posterior.posterior import GaussianPosterior

if TYPE_CHECKING:
    from epabc.inference.engine import EPABCEngine

__all__ = ["additive_residual", "conjugate_gaussian_posterior", "stack_trace"]


def additive_residual(engine: EPABCEngine) -> float:
    """
    Max-abs residual of global - (prior + Σᵢ site[i]) over r and Q.

    Parameters
    ----------
    engine : EPABCEngine

    Returns
    -------
    float
        0 up to floating point error for a consistent engine.
    """
    rep = engine.representation
    expected = rep.add(engine.prior.natural, engine.sites.total())
    current = engine.natural_params
    return float(
        jnp.maximum(
            jnp.max(jnp.abs(current.r - expected.r)),
            jnp.max(jnp.abs(current.Q - expected.Q)),
        )
    )


def conjugate_gaussian_posterior(
    prior_mean: Any, prior_cov: Any, noise_cov: Any, data: Any
) -> GaussianPosterior:
    """
    Exact posterior of μ for y_j ~ N(μ, noise_cov), μ ~ N(prior_mean, prior_cov).

        Σ_post = (Σ₀⁻¹ + n Σ⁻¹)⁻¹
        μ_post = Σ_post (Σ₀⁻¹ μ₀ + n Σ⁻¹ ȳ)

    Parameters
    ----------
    prior_mean, prior_cov : array-like
        Prior moments (scalar or (d,), (d, d)).
    noise_cov : array-like
        Known observation noise variance / covariance.
    data : array-like
        Observations, shape (n,) or (n, d).

    Returns
    -------
    GaussianPosterior
    """
    data = as_float_array(data)
    mu0 = as_float_array(prior_mean)
    n = data.shape[0]
    ybar = jnp.mean(data, axis=0)
    if mu0.ndim == 0:
        precision = 1.0 / as_float_array(prior_cov) + n / as_float_array(noise_cov)
        post_var = 1.0 / precision
        post_mean = post_var * (
            mu0 / as_float_array(prior_cov) + n * ybar / as_float_array(noise_cov)
        )
        return GaussianPosterior(mean=post_mean, cov=post_var)
    prior_prec = jnp.linalg.inv(as_float_array(prior_cov))
    noise_prec = jnp.linalg.inv(as_float_array(noise_cov))
    post_cov = jnp.linalg.inv(prior_prec + n * noise_prec)
    post_cov = 0.5 * (post_cov + post_cov.T)
    post_mean = post_cov @ (prior_prec @ mu0 + n * noise_prec @ ybar)
    return GaussianPosterior(mean=post_mean, cov=post_cov)
