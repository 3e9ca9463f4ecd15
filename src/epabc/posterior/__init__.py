"""
posterior
=========

Posterior representation and diagnostics.

This subpackage provides:
- GaussianPosterior : N(μ, Σ) approximation with sample() and log_prob().
- diagnostics : additive-invariant residual, closed-form conjugate posterior
  for Gaussian toy models, trace stacking for plots.
"""

from .diagnostics import additive_residual, conjugate_gaussian_posterior, stack_trace
from .posterior import GaussianPosterior

__all__ = [
    "GaussianPosterior",
    "additive_residual",
    "conjugate_gaussian_posterior",
    "stack_trace",
]
