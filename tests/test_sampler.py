"""
test_sampler.py
---------------

Tests for SimulationSampler: shapes, reproducibility, specialisation, and
agreement between the vectorized, loop and thread-pool strategies.
"""

import jax.numpy as jnp
import jax.random as jr
import pytest

from epabc.gaussian import MultivariateGaussian, ScalarGaussian
from epabc.inference import SimulationSampler
from epabc.model import DistanceAcceptance, Model, PredicateAcceptance, SimulatorModel


def shift_model():
    return SimulatorModel(lambda theta, key: theta + 0.1 * jr.normal(key, jnp.shape(theta)))


def test_output_is_unfiltered_and_shaped():
    sampler = SimulationSampler(
        shift_model(), DistanceAcceptance("l2", 0.5), MultivariateGaussian(2)
    )
    batch = sampler.sample(jr.PRNGKey(0), jnp.zeros(2), jnp.eye(2), 1000, jnp.zeros(2))
    assert batch.thetas.shape == (1000, 2)
    assert batch.accepted.shape == (1000,)
    assert batch.accepted.dtype == jnp.bool_
    assert 0 < batch.num_accepted < 1000
    assert batch.num_simulations == 1000


def test_same_key_same_batch():
    sampler = SimulationSampler(shift_model(), DistanceAcceptance("l2", 0.5), ScalarGaussian())
    a = sampler.sample(jr.PRNGKey(3), 0.0, 1.0, 500, jnp.array(0.2))
    b = sampler.sample(jr.PRNGKey(3), 0.0, 1.0, 500, jnp.array(0.2))
    assert jnp.array_equal(a.thetas, b.thetas)
    assert jnp.array_equal(a.accepted, b.accepted)


def test_accepted_draws_are_near_observation():
    sampler = SimulationSampler(shift_model(), DistanceAcceptance("l2", 0.3), ScalarGaussian())
    batch = sampler.sample(jr.PRNGKey(1), 0.0, 4.0, 5000, jnp.array(1.5))
    kept = batch.thetas[batch.accepted]
    assert kept.shape[0] > 0
    assert float(jnp.max(jnp.abs(kept - 1.5))) < 0.3 + 0.6


@pytest.mark.parametrize("max_workers", [None, 4])
def test_loop_strategy_matches_vectorized(max_workers):
    acceptance = PredicateAcceptance(lambda obs, sim: sim > obs)
    model = shift_model()
    vectorized = SimulationSampler(model, acceptance, ScalarGaussian())
    loop = SimulationSampler(
        model, acceptance, ScalarGaussian(), vectorize=False, max_workers=max_workers
    )
    key = jr.PRNGKey(11)
    a = vectorized.sample(key, 0.0, 1.0, 60, jnp.array(0.0))
    b = loop.sample(key, 0.0, 1.0, 60, jnp.array(0.0))
    assert jnp.array_equal(a.thetas, b.thetas)
    assert jnp.array_equal(a.accepted, b.accepted)


def test_specialize_is_called_with_observation():
    seen = []

    class Specialising(Model):
        def __init__(self, offset=0.0):
            self.offset = offset

        def specialize(self, observation):
            seen.append(observation)
            return Specialising(offset=float(observation))

        def instantiate(self, theta):
            return SimulatorModel(lambda t, key: t + self.offset).instantiate(theta)

    sampler = SimulationSampler(
        Specialising(), PredicateAcceptance(lambda obs, sim: sim > 100.0), ScalarGaussian()
    )
    batch = sampler.sample(jr.PRNGKey(0), 0.0, 1.0, 200, 100.0)
    assert seen == [100.0]
    # sim = theta + 100 > 100 iff theta > 0
    assert jnp.array_equal(batch.accepted, batch.thetas > 0)
