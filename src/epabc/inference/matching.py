"""
matching.py
-----------

Moment matching of accepted simulation draws.

Given a SimulationBatch, accumulate over accepted trials

    acc = Σ 1,   s1 = Σ θ,   s2 = Σ θ θᵀ   (scalar case: θ²)

and, if the AcceptanceGuard admits `acc`, return the empirical moments

    μ̂ = s1 / acc,   Σ̂ = s2 / acc - μ̂ μ̂ᵀ,   Ẑ = acc / M.

The accumulation is a masked sum over all trials, which makes the result
independent of trial order.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

import jax.numpy as jnp

from epabc.errors import DegenerateCovarianceError
from epabc.gaussian.representation import GaussianRepresentation
from epabc.inference.config import AcceptanceGuard
from epabc.inference.sampler import SimulationBatch


@dataclass(frozen=True, eq=False)
class Updated:
    """Moment matching succeeded."""

    mean: jnp.ndarray
    cov: jnp.ndarray
    Z: float
    accepted: int
    num_simulations: int


@dataclass(frozen=True)
class Insufficient:
    """Too few accepted draws; no update is produced."""

    accepted: int
    num_simulations: int
    reason: str = ""


UpdateOutcome = Union[Updated, Insufficient]


class MomentMatcher:
    """
    Empirical moments of accepted draws, behind an acceptance guard.

    Parameters
    ----------
    representation : GaussianRepresentation
        Scalar or multivariate algebra.
    guard : AcceptanceGuard
        Minimum evidence for an update.
    """

    def __init__(self, representation: GaussianRepresentation, guard: AcceptanceGuard):
        self.representation = representation
        self.guard = guard

    def match(self, batch: SimulationBatch) -> UpdateOutcome:
        """
        Match moments of the accepted draws.

        Returns
        -------
        Updated | Insufficient

        Raises
        ------
        DegenerateCovarianceError
            If the empirical covariance is not positive-definite
            (scalar: variance <= 0).
        """
        rep = self.representation
        num_simulations = batch.num_simulations
        accepted = batch.num_accepted

        if not self.guard.admits(accepted, num_simulations):
            return Insufficient(
                accepted=accepted,
                num_simulations=num_simulations,
                reason=(
                    f"{accepted}/{num_simulations} accepted, guard requires "
                    f">= {self.guard.min_count} and fraction >= {self.guard.min_fraction}"
                ),
            )

        weights = batch.accepted.astype(batch.thetas.dtype)
        mean = jnp.tensordot(weights, batch.thetas, axes=1) / accepted
        second = rep.weighted_second_moment(batch.thetas, weights) / accepted
        cov = rep.symmetrize(second - rep.outer(mean))
        if not rep.is_positive_definite(cov):
            raise DegenerateCovarianceError(
                f"empirical covariance of {accepted} accepted draws is not "
                "positive-definite"
            )
        return Updated(
            mean=mean,
            cov=cov,
            Z=accepted / num_simulations,
            accepted=accepted,
            num_simulations=num_simulations,
        )
