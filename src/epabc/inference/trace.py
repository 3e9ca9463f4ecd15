"""
trace.py
--------

Per-iteration snapshots of the Gaussian approximation.

One TraceEntry is emitted per EP-ABC iteration, in iteration order. Lists of
entries from successive passes can simply be concatenated.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import jax.numpy as jnp
import numpy as np


@dataclass(frozen=True, eq=False)
class TraceEntry:
    """
    Immutable snapshot taken at the end of one iteration.

    Attributes
    ----------
    index : int
        Data point processed by the iteration.
    mean : jnp.ndarray
        Mean μ, shape () or (d,). The matched global mean after an update,
        the cavity mean after a rejected or degenerate match.
    cov : jnp.ndarray
        Variance v (scalar case) or covariance Σ, shape () or (d, d).
    Z : float
        Accepted-fraction estimate of the local normalising constant of the
        last successful update (NaN before the first one).
    """

    index: int
    mean: jnp.ndarray
    cov: jnp.ndarray
    Z: float

    @property
    def var(self) -> jnp.ndarray:
        """Marginal variances (alias of cov for a scalar parameter)."""
        return self.cov if self.cov.ndim == 0 else jnp.diag(self.cov)


def stack_trace(
    trace: Sequence[TraceEntry],
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Stack a trace into host-side NumPy arrays for plotting.

    Parameters
    ----------
    trace : sequence of TraceEntry

    Returns
    -------
    means : np.ndarray
        Shape (T,) or (T, d).
    covs : np.ndarray
        Shape (T,) or (T, d, d).
    Z : np.ndarray
        Shape (T,).
    """
    if len(trace) == 0:
        raise ValueError("trace is empty")
    means = np.stack([np.asarray(entry.mean) for entry in trace])
    covs = np.stack([np.asarray(entry.cov) for entry in trace])
    Z = np.array([entry.Z for entry in trace], dtype=float)
    return means, covs, Z
