"""
config.py
---------

Configuration objects for the EP-ABC engine.

Provides:
- AcceptanceGuard : rejects moment-matching updates backed by too few
  accepted simulations.
- EPABCConfig : number of simulations per iteration, ABC tolerance, guard
  and execution strategy of the simulation sampler.

All validation happens in __post_init__, so an invalid configuration can
never reach the engine.
"""

from __future__ import annotations

import math
import numbers
import warnings
from dataclasses import dataclass, field

from epabc.errors import InvalidConfigurationError


@dataclass(frozen=True)
class AcceptanceGuard:
    """
    Minimum evidence required before a site is updated.

    An update is admitted iff both
        accepted >= min_count
        accepted / num_simulations >= min_fraction
    hold. Both boundaries are inclusive.

    Attributes
    ----------
    min_fraction : float
        Minimum accepted fraction, in [0, 1].
    min_count : int
        Minimum absolute number of accepted draws (>= 1, so that the
        empirical mean is always defined).

    Examples
    --------
    >>> guard = AcceptanceGuard(min_fraction=0.0, min_count=5)
    >>> guard.admits(4, 100), guard.admits(5, 100)
    (False, True)
    """

    min_fraction: float = 0.001
    min_count: int = 5

    def __post_init__(self):
        if isinstance(self.min_count, bool) or not isinstance(self.min_count, numbers.Integral):
            raise InvalidConfigurationError(
                f"min_count must be an integer, got {self.min_count!r}"
            )
        if self.min_count < 1:
            raise InvalidConfigurationError(
                f"min_count must be >= 1, got {self.min_count}"
            )
        if (
            isinstance(self.min_fraction, bool)
            or not isinstance(self.min_fraction, numbers.Real)
            or not math.isfinite(self.min_fraction)
            or not 0.0 <= self.min_fraction <= 1.0
        ):
            raise InvalidConfigurationError(
                f"min_fraction must lie in [0, 1], got {self.min_fraction}"
            )

    def admits(self, accepted: int, num_simulations: int) -> bool:
        """Whether `accepted` out of `num_simulations` is enough for an update."""
        return (
            accepted >= self.min_count
            and accepted / num_simulations >= self.min_fraction
        )


@dataclass(frozen=True)
class EPABCConfig:
    """
    Configuration of an EP-ABC run.

    Attributes
    ----------
    num_simulations : int
        Monte Carlo draws M per iteration (>= 1).
    tolerance : float | None
        ABC tolerance ε. When set, a callable or named acceptance is treated
        as a distance and a draw is accepted iff distance <= ε. When None,
        a callable acceptance is a boolean predicate.
    guard : AcceptanceGuard
        Minimum evidence for an update.
    vectorize : bool
        Run the M trials with jax.vmap (requires a JAX-traceable model and
        acceptance). If False, trials run in a Python loop.
    max_workers : int | None
        Loop mode only: number of threads used to run trials concurrently.
        None or 1 runs trials sequentially.

    Examples
    --------
    >>> # Distance mode with the original tolerance
    >>> config = EPABCConfig(num_simulations=30_000, tolerance=1.8)

    >>> # Non-traceable simulator, four worker threads
    >>> config = EPABCConfig(num_simulations=5_000, vectorize=False, max_workers=4)
    """

    num_simulations: int = 10_000
    tolerance: float | None = None
    guard: AcceptanceGuard = field(default_factory=AcceptanceGuard)
    vectorize: bool = True
    max_workers: int | None = None

    def __post_init__(self):
        """Validate configuration."""
        if (
            isinstance(self.num_simulations, bool)
            or not isinstance(self.num_simulations, numbers.Integral)
            or self.num_simulations < 1
        ):
            raise InvalidConfigurationError(
                f"num_simulations must be a positive integer, got {self.num_simulations!r}"
            )
        if self.tolerance is not None and (
            not isinstance(self.tolerance, numbers.Real)
            or not math.isfinite(self.tolerance) or self.tolerance < 0
        ):
            raise InvalidConfigurationError(
                f"tolerance must be finite and >= 0, got {self.tolerance}"
            )
        if not isinstance(self.guard, AcceptanceGuard):
            raise InvalidConfigurationError(
                f"guard must be an AcceptanceGuard, got {type(self.guard)}"
            )
        if self.max_workers is not None and (
            isinstance(self.max_workers, bool)
            or not isinstance(self.max_workers, numbers.Integral)
            or self.max_workers < 1
        ):
            raise InvalidConfigurationError(
                f"max_workers must be >= 1, got {self.max_workers}"
            )
        if self.guard.min_count > self.num_simulations:
            warnings.warn(
                f"guard.min_count={self.guard.min_count} exceeds "
                f"num_simulations={self.num_simulations}; no update can be accepted.",
                UserWarning,
                stacklevel=3,
            )
