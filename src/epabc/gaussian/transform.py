"""
transform.py
------------

Conversion between moment parameters (μ, Σ) and natural parameters (r, Q).

    moment -> natural :  Q = -0.5 Σ⁻¹ ,  r = Σ⁻¹ μ
    natural -> moment :  Σ = -0.5 Q⁻¹ ,  μ = -0.5 Q⁻¹ r

A single ParameterTransform handles both the scalar and the multivariate
case by delegating the algebra to a GaussianRepresentation.

Examples
--------
>>> import jax.numpy as jnp
>>> from epabc.gaussian import moment_to_natural, natural_to_moment
>>> nat = moment_to_natural(jnp.array([0.0, 1.0]), jnp.eye(2))
>>> mean, cov = natural_to_moment(nat.r, nat.Q)
"""

from __future__ import annotations

from typing import Any

import jax.numpy as jnp

from epabc.errors import NotPositiveDefiniteError
from epabc.gaussian.representation import (
    GaussianRepresentation,
    NaturalParams,
    as_float_array,
    representation_for,
)


class ParameterTransform:
    """
    Moment/natural parameter conversion over one Gaussian representation.

    Parameters
    ----------
    representation : GaussianRepresentation
        Scalar or multivariate algebra.
    """

    def __init__(self, representation: GaussianRepresentation):
        self.representation = representation

    def moment_to_natural(self, mean: Any, cov: Any) -> NaturalParams:
        """
        Convert (μ, Σ) to (r, Q).

        Raises
        ------
        NonInvertibleParameterError
            If Σ is singular to machine precision.
        """
        rep = self.representation
        mean = as_float_array(mean)
        cov_inv = rep.invert(as_float_array(cov))
        return NaturalParams(r=rep.matvec(cov_inv, mean), Q=-0.5 * cov_inv)

    def natural_to_moment(self, params: NaturalParams) -> tuple[jnp.ndarray, jnp.ndarray]:
        """
        Convert (r, Q) to (μ, Σ); Σ is symmetrised in the multivariate case.

        Raises
        ------
        NonInvertibleParameterError
            If Q is singular to machine precision.
        NotPositiveDefiniteError
            If the resulting Σ is not positive-definite.
        """
        rep = self.representation
        Q_inv = rep.invert(params.Q)
        cov = rep.symmetrize(-0.5 * Q_inv)
        if not rep.is_positive_definite(cov):
            raise NotPositiveDefiniteError(
                "natural parameters do not describe a proper Gaussian "
                "(covariance is not positive-definite)"
            )
        mean = -0.5 * rep.matvec(Q_inv, params.r)
        return mean, cov


def moment_to_natural(mean: Any, cov: Any) -> NaturalParams:
    """Convert (μ, Σ) to natural form, inferring scalar vs multivariate from μ."""
    return ParameterTransform(representation_for(mean)).moment_to_natural(mean, cov)


def natural_to_moment(r: Any, Q: Any) -> tuple[jnp.ndarray, jnp.ndarray]:
    """Convert (r, Q) to moment form, inferring scalar vs multivariate from r."""
    params = NaturalParams(r=as_float_array(r), Q=as_float_array(Q))
    return ParameterTransform(representation_for(params.r)).natural_to_moment(params)
