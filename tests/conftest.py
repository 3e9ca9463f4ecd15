"""
Central pytest configuration for this project.

This file is automatically discovered by pytest and is intended for:

- **Fixtures**: reusable simulators and data shared across test files.
- **JAX setup**: double precision, so that round-trip and invariant checks
  can use tight tolerances.

Notes
-----
- Contributors should
  install the package in editable mode (`pip install -e .[test]`) so that
  imports are resolved consistently in local dev and CI environments.
- Keep this file focused on test setup. Do not add application logic here.
"""

import jax

jax.config.update("jax_enable_x64", True)

import jax.numpy as jnp  # noqa: E402
import jax.random as jr  # noqa: E402
import pytest  # noqa: E402

from epabc.model.base import Model, ModelInstance  # noqa: E402


class _GaussianLocationInstance(ModelInstance):
    def __init__(self, mean, cov):
        self.mean = mean
        self.cov = cov

    def sample(self, key):
        if self.mean.ndim == 0:
            return self.mean + jnp.sqrt(self.cov) * jr.normal(key, dtype=self.mean.dtype)
        return jr.multivariate_normal(key, self.mean, self.cov, dtype=self.mean.dtype)


class GaussianLocationModel(Model):
    """y ~ N(θ, cov) with known cov; JAX-traceable."""

    def __init__(self, cov, param_dim=None):
        self.cov = jnp.asarray(cov, dtype=float)
        self.param_dim = param_dim

    def instantiate(self, theta):
        return _GaussianLocationInstance(jnp.asarray(theta), self.cov)


class _CountingInstance(ModelInstance):
    def __init__(self, owner):
        self.owner = owner

    def sample(self, key):
        self.owner.calls += 1
        return self.owner.calls


class CountingModel(Model):
    """Returns 1, 2, 3, ... on successive simulations (loop mode only)."""

    def __init__(self):
        self.calls = 0

    def instantiate(self, theta):
        return _CountingInstance(self)


@pytest.fixture
def gaussian_location_model():
    """Factory for Gaussian location simulators."""
    return GaussianLocationModel


@pytest.fixture
def counting_model():
    return CountingModel()


@pytest.fixture
def univariate_data():
    """100 draws from N(0.7, 1)."""
    return 0.7 + jr.normal(jr.PRNGKey(123), (100,))


@pytest.fixture
def multivariate_data():
    """100 draws from N(true_mean, I_3)."""
    true_mean = jnp.array([-0.5, 0.3, 1.1])
    return true_mean + jr.normal(jr.PRNGKey(321), (100, 3))
