"""
sampler.py
----------

Simulation sampler: Monte Carlo draws from the cavity and ABC acceptance.

For one iteration with data point y_i and cavity N(μ_cav, Σ_cav):

    θ_1..θ_M ~ N(μ_cav, Σ_cav)
    model_i  = model.specialize(y_i)
    y_m      = model_i.instantiate(θ_m).sample(key_m)
    accepted_m = acceptance(y_i, y_m, key'_m)

Trials share no mutable state: each receives its own pair of PRNG keys
split from the iteration key. The sampler does not filter; it returns all
M draws with their acceptance flags and leaves the reduction to the
MomentMatcher.

Execution strategies
--------------------
- vectorized : jax.vmap over (θ, keys). Requires a traceable model/oracle.
- loop : Python loop, optionally fanned out on a thread pool. Results are
  collected in trial order so the output does not depend on scheduling.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any

import jax
import jax.numpy as jnp
import jax.random as jr

from epabc.gaussian.representation import GaussianRepresentation
from epabc.model.acceptance import AcceptanceOracle
from epabc.model.base import Model
from epabc.utils.rng import split


@dataclass(frozen=True, eq=False)
class SimulationBatch:
    """
    Outcome of M simulation trials.

    Attributes
    ----------
    thetas : jnp.ndarray
        Parameter draws, shape (M,) + event_shape.
    accepted : jnp.ndarray
        Boolean acceptance flags, shape (M,).
    """

    thetas: jnp.ndarray
    accepted: jnp.ndarray

    @property
    def num_simulations(self) -> int:
        return int(self.accepted.shape[0])

    @property
    def num_accepted(self) -> int:
        return int(jnp.sum(self.accepted))


class SimulationSampler:
    """
    Draw parameters from the cavity, simulate, and test acceptance.

    Parameters
    ----------
    model : Model
        Simulator.
    acceptance : AcceptanceOracle
        Acceptance rule.
    representation : GaussianRepresentation
        Algebra used to draw θ from the cavity.
    vectorize : bool, default=True
        Use jax.vmap across trials.
    max_workers : int | None, default=None
        Loop mode only: thread pool size (None or 1 means sequential).
    """

    def __init__(
        self,
        model: Model,
        acceptance: AcceptanceOracle,
        representation: GaussianRepresentation,
        *,
        vectorize: bool = True,
        max_workers: int | None = None,
    ):
        self.model = model
        self.acceptance = acceptance
        self.representation = representation
        self.vectorize = vectorize
        self.max_workers = max_workers

    def sample(
        self,
        key: jax.Array,
        cavity_mean: jnp.ndarray,
        cavity_cov: jnp.ndarray,
        num_simulations: int,
        observation: Any,
    ) -> SimulationBatch:
        """
        Run `num_simulations` independent trials against `observation`.

        Parameters
        ----------
        key : jax.Array
            PRNG key for this iteration.
        cavity_mean, cavity_cov : jnp.ndarray
            Moments of the cavity distribution.
        num_simulations : int
            Number of trials M.
        observation : Any
            Observed data point y_i.

        Returns
        -------
        SimulationBatch
            All M draws with their acceptance flags (unfiltered).
        """
        theta_key, trial_key = split(key)
        thetas = self.representation.sample(
            theta_key, cavity_mean, cavity_cov, num_simulations
        )
        trial_keys = jax.vmap(jr.split)(jr.split(trial_key, num_simulations))
        sim_keys, acc_keys = trial_keys[:, 0], trial_keys[:, 1]

        model = self.model.specialize(observation)

        def trial(theta, sim_key, acc_key):
            simulated = model.instantiate(theta).sample(sim_key)
            return self.acceptance(observation, simulated, acc_key)

        if self.vectorize:
            accepted = jax.vmap(trial)(thetas, sim_keys, acc_keys)
        else:
            accepted = self._run_loop(trial, thetas, sim_keys, acc_keys)
        return SimulationBatch(thetas=thetas, accepted=jnp.asarray(accepted, dtype=bool))

    def _run_loop(self, trial, thetas, sim_keys, acc_keys) -> list[bool]:
        def run_one(m: int) -> bool:
            return bool(trial(thetas[m], sim_keys[m], acc_keys[m]))

        indices = range(thetas.shape[0])
        if self.max_workers is None or self.max_workers == 1:
            return [run_one(m) for m in indices]
        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            # pool.map yields in submission order
            return list(pool.map(run_one, indices))
