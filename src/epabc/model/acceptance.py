"""
acceptance.py
-------------

Acceptance oracles: decide whether a simulated observation is compatible
with the observed data point.

Each oracle maps (observed, simulated, key) to a boolean. The key is only
used by stochastic rules; deterministic oracles ignore it. The engine
treats every mode through this single interface.

Modes
-----
- PredicateAcceptance : user predicate accept(observed, simulated) -> bool.
- DistanceAcceptance : distance(simulated, observed) <= tolerance.
- KernelAcceptance : accept with probability exp(log_kernel(observed, simulated)),
  i.e. log(u) < log_kernel with u ~ U(0, 1).

Oracles are written with jax.numpy so the vectorized sampler can vmap them.

Connections
-----------
- resolve_acceptance() turns user input (oracle, callable, or a registered
  distance name plus a tolerance) into an oracle.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from typing import Any, Callable

import jax
import jax.numpy as jnp
import jax.random as jr

from epabc.errors import InvalidConfigurationError
from epabc.utils.math import l1_distance, l2_distance

# Registry for string-based distance selection
DISTANCES: dict[str, Callable[[Any, Any], jnp.ndarray]] = {
    "l2": l2_distance,
    "euclidean": l2_distance,
    "l1": l1_distance,
}


class AcceptanceOracle(ABC):
    """
    Abstract base class for acceptance rules.
    """

    @abstractmethod
    def __call__(self, observed: Any, simulated: Any, key: jax.Array) -> jnp.ndarray:
        """Return a boolean (scalar array) telling whether `simulated` is accepted."""
        ...


class PredicateAcceptance(AcceptanceOracle):
    """
    Boolean predicate acceptance.

    Parameters
    ----------
    predicate : callable
        accept(observed, simulated) -> bool.
    """

    def __init__(self, predicate: Callable[[Any, Any], Any]):
        self.predicate = predicate

    def __call__(self, observed, simulated, key):
        return jnp.asarray(self.predicate(observed, simulated), dtype=bool)


class DistanceAcceptance(AcceptanceOracle):
    """
    Distance-plus-tolerance acceptance: accepted iff dist(simulated, observed) <= ε.

    Parameters
    ----------
    distance : callable or str
        dist(simulated, observed) -> non-negative scalar, or a key of DISTANCES.
    tolerance : float
        ABC tolerance ε (>= 0).
    """

    def __init__(self, distance: Callable[[Any, Any], Any] | str, tolerance: float):
        if isinstance(distance, str):
            if distance not in DISTANCES:
                available = ", ".join(DISTANCES.keys())
                raise InvalidConfigurationError(
                    f"Unknown distance: '{distance}'. Available: {available}"
                )
            distance = DISTANCES[distance]
        tolerance = float(tolerance)
        if not math.isfinite(tolerance) or tolerance < 0:
            raise InvalidConfigurationError(
                f"tolerance must be finite and >= 0, got {tolerance}"
            )
        self.distance = distance
        self.tolerance = tolerance

    def __call__(self, observed, simulated, key):
        return jnp.asarray(self.distance(simulated, observed) <= self.tolerance)


class KernelAcceptance(AcceptanceOracle):
    """
    Stochastic acceptance with probability min(1, exp(log_kernel(observed, simulated))).

    Useful when a simulated quantity defines a tractable density for the
    observed data point (e.g. a simulated tree distribution scoring an
    observed tree).

    Parameters
    ----------
    log_kernel : callable
        log_kernel(observed, simulated) -> log acceptance probability (<= 0).
    """

    def __init__(self, log_kernel: Callable[[Any, Any], Any]):
        self.log_kernel = log_kernel

    def __call__(self, observed, simulated, key):
        u = jr.uniform(key, dtype=jnp.result_type(float))
        return jnp.log(u) < self.log_kernel(observed, simulated)


def resolve_acceptance(
    acceptance: AcceptanceOracle | Callable[..., Any] | str,
    tolerance: float | None = None,
) -> AcceptanceOracle:
    """
    Build an AcceptanceOracle from user input.

    Parameters
    ----------
    acceptance : AcceptanceOracle | callable | str
        - an oracle is returned unchanged (tolerance must be None);
        - a callable is a predicate when tolerance is None, a distance otherwise;
        - a string names a distance in DISTANCES and requires a tolerance.
    tolerance : float | None
        ABC tolerance ε for distance mode.

    Returns
    -------
    AcceptanceOracle

    Raises
    ------
    InvalidConfigurationError
        On ambiguous or malformed combinations.
    """
    if isinstance(acceptance, AcceptanceOracle):
        if tolerance is not None:
            raise InvalidConfigurationError(
                "Cannot pass a tolerance with an AcceptanceOracle instance"
            )
        return acceptance
    if isinstance(acceptance, str):
        if tolerance is None:
            raise InvalidConfigurationError(
                f"distance '{acceptance}' requires a tolerance"
            )
        return DistanceAcceptance(acceptance, tolerance)
    if callable(acceptance):
        if tolerance is None:
            return PredicateAcceptance(acceptance)
        return DistanceAcceptance(acceptance, tolerance)
    raise InvalidConfigurationError(
        f"acceptance must be an AcceptanceOracle, a callable or a distance name, "
        f"got {type(acceptance)}"
    )
