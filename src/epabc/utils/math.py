"""
math.py
-------

Math utilities for epabc.

Includes:
- l2_distance : Euclidean distance, the default ABC discrepancy.
- l1_distance : sum of absolute differences.

Both are written with jax.numpy so they can be vmapped inside the
vectorized simulation sampler.

Examples
--------
>>> import jax.numpy as jnp
>>> from epabc.utils.math import l2_distance
>>> float(l2_distance(jnp.array([3.0, 0.0]), jnp.array([0.0, 4.0])))
5.0
"""

from __future__ import annotations

import jax.numpy as jnp


def l2_distance(x: jnp.ndarray, y: jnp.ndarray) -> jnp.ndarray:
    """
    Euclidean distance ||x - y||₂.

    Parameters
    ----------
    x, y : jnp.ndarray
        Observations of identical shape (scalars are allowed).

    Returns
    -------
    jnp.ndarray
        Scalar distance.
    """
    z = jnp.ravel(jnp.asarray(x) - jnp.asarray(y))
    return jnp.sqrt(jnp.dot(z, z))


def l1_distance(x: jnp.ndarray, y: jnp.ndarray) -> jnp.ndarray:
    """Manhattan distance Σ|x - y|."""
    return jnp.sum(jnp.abs(jnp.asarray(x) - jnp.asarray(y)))
