"""
test_representation.py
----------------------

Tests for the scalar / multivariate Gaussian algebra.
"""

import jax.numpy as jnp
import jax.random as jr
import numpy as np
import pytest

from epabc.errors import InvalidConfigurationError
from epabc.gaussian import MultivariateGaussian, ScalarGaussian, representation_for


def test_representation_for_picks_by_shape():
    assert isinstance(representation_for(0.0), ScalarGaussian)
    rep = representation_for(jnp.zeros(4))
    assert isinstance(rep, MultivariateGaussian)
    assert rep.dim == 4
    with pytest.raises(InvalidConfigurationError):
        representation_for(jnp.zeros((2, 2)))


def test_zeros_shapes():
    zs = ScalarGaussian().zeros()
    assert zs.r.shape == () and zs.Q.shape == ()
    zm = MultivariateGaussian(3).zeros()
    assert zm.r.shape == (3,) and zm.Q.shape == (3, 3)
    assert not jnp.any(zm.Q)


def test_positive_definite_checks():
    rep = MultivariateGaussian(2)
    assert rep.is_positive_definite(jnp.eye(2))
    assert not rep.is_positive_definite(-jnp.eye(2))
    assert not rep.is_positive_definite(jnp.array([[1.0, 2.0], [2.0, 1.0]]))
    assert not rep.is_positive_definite(jnp.array([[1.0, 0.5], [0.0, 1.0]]))
    assert not rep.is_positive_definite(jnp.array([[jnp.nan, 0.0], [0.0, 1.0]]))

    scalar = ScalarGaussian()
    assert scalar.is_positive_definite(jnp.array(0.3))
    assert not scalar.is_positive_definite(jnp.array(0.0))
    assert not scalar.is_positive_definite(jnp.array(-1.0))


def test_weighted_second_moment_matches_loop():
    rep = MultivariateGaussian(3)
    thetas = jr.normal(jr.PRNGKey(0), (7, 3))
    weights = jnp.array([1.0, 0.0, 1.0, 1.0, 0.0, 0.0, 1.0])
    expected = sum(w * jnp.outer(t, t) for w, t in zip(weights, thetas))
    np.testing.assert_allclose(rep.weighted_second_moment(thetas, weights), expected)

    scalar = ScalarGaussian()
    x = jnp.array([1.0, 2.0, 3.0])
    assert float(scalar.weighted_second_moment(x, jnp.array([1.0, 0.0, 1.0]))) == 10.0


def test_sample_shapes_and_moments():
    key = jr.PRNGKey(4)
    rep = MultivariateGaussian(2)
    cov = jnp.array([[1.0, 0.3], [0.3, 0.5]])
    draws = rep.sample(key, jnp.array([1.0, -1.0]), cov, 20_000)
    assert draws.shape == (20_000, 2)
    np.testing.assert_allclose(jnp.mean(draws, axis=0), [1.0, -1.0], atol=0.05)
    np.testing.assert_allclose(jnp.cov(draws.T), cov, atol=0.05)

    scalar_draws = ScalarGaussian().sample(key, 2.0, 4.0, 20_000)
    assert scalar_draws.shape == (20_000,)
    assert float(jnp.std(scalar_draws)) == pytest.approx(2.0, abs=0.1)
