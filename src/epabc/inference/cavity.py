"""
cavity.py
---------

Cavity ("leave-one-out") distribution.

    cavity_i = global - site_i          (in natural parameters)

The cavity is the current approximation with the contribution of data
point i removed. It is the sampling distribution for the Monte Carlo draws
of iteration i, and the reference point from which the new site delta is
measured after moment matching:

    site_i_new = matched - cavity_i
"""

from __future__ import annotations

from epabc.gaussian.representation import GaussianRepresentation, NaturalParams


def cavity(
    global_params: NaturalParams,
    site_params: NaturalParams,
    representation: GaussianRepresentation,
) -> NaturalParams:
    """
    Remove one site from the global approximation.

    Pure: neither argument is modified (JAX arrays are immutable and a new
    NaturalParams is returned).

    Parameters
    ----------
    global_params : NaturalParams
        Natural parameters of the global approximation.
    site_params : NaturalParams
        Natural-parameter contribution of the site being refined.
    representation : GaussianRepresentation
        Scalar or multivariate algebra.

    Returns
    -------
    NaturalParams
        Cavity natural parameters (r_cav, Q_cav).
    """
    return representation.subtract(global_params, site_params)
