"""
rng.py
------

Random number utilities for epabc.

All randomness in the package flows through explicit JAX PRNG keys:
the engine owns one key, derives a fresh key per iteration by folding in
a running iteration counter, and splits that key into one key per
Monte Carlo trial. Two engines built from the same seed therefore produce
identical traces.

Examples
--------
>>> from epabc.utils.rng import seed, split
>>> key = seed(0)
>>> k1, k2 = split(key)
"""

from __future__ import annotations

import numbers
from typing import Any

import jax
import jax.random as jr


def seed(seed_value: int) -> jax.Array:
    """
    Create a new PRNG key from an integer seed.

    Parameters
    ----------
    seed_value : int
        Seed for random number generation.

    Returns
    -------
    jax.Array
        New PRNG key.
    """
    return jr.PRNGKey(seed_value)


def split(key: jax.Array, num: int = 2):
    """
    Split a PRNG key into multiple independent keys.

    Parameters
    ----------
    key : jax.Array
        RNG key to split.
    num : int, default=2
        Number of new keys to return.

    Returns
    -------
    jax.Array
        Array of `num` independent PRNG keys.
    """
    return jr.split(key, num=num)


def fold_in(key: jax.Array, counter: int) -> jax.Array:
    """Derive a key bound to an integer counter (e.g. the iteration number)."""
    return jr.fold_in(key, counter)


def as_key(key_or_seed: Any = None) -> jax.Array:
    """
    Normalise a key argument.

    None maps to seed(0), any integer (Python or NumPy, not bool) is used
    as a seed, anything else is assumed to already be a PRNG key.
    """
    if key_or_seed is None:
        return seed(0)
    if isinstance(key_or_seed, bool):
        raise TypeError("a bool is neither a seed nor a PRNG key")
    if isinstance(key_or_seed, numbers.Integral):
        return seed(int(key_or_seed))
    return key_or_seed
