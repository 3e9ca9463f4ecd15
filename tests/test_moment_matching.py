"""
test_moment_matching.py
-----------------------

Tests for MomentMatcher:
- empirical moments of accepted draws only
- guard boundary (threshold - 1 skips, threshold updates)
- degenerate covariance detection
"""

import jax.numpy as jnp
import jax.random as jr
import numpy as np
import pytest

from epabc.errors import DegenerateCovarianceError
from epabc.gaussian import MultivariateGaussian, ScalarGaussian
from epabc.inference import (
    AcceptanceGuard,
    Insufficient,
    MomentMatcher,
    SimulationBatch,
    Updated,
)


def mask(n, accepted):
    return jnp.arange(n) < accepted


def test_scalar_moments_of_accepted_draws():
    thetas = jnp.array([1.0, 2.0, 3.0, 100.0])
    batch = SimulationBatch(thetas=thetas, accepted=jnp.array([True, True, True, False]))
    matcher = MomentMatcher(ScalarGaussian(), AcceptanceGuard(min_fraction=0.0, min_count=1))

    outcome = matcher.match(batch)

    assert isinstance(outcome, Updated)
    assert float(outcome.mean) == pytest.approx(2.0)
    assert float(outcome.cov) == pytest.approx(2.0 / 3.0)  # biased 1/acc variance
    assert outcome.Z == pytest.approx(0.75)
    assert outcome.accepted == 3


def test_multivariate_moments_match_numpy():
    thetas = jr.normal(jr.PRNGKey(0), (500, 3))
    accepted = jr.bernoulli(jr.PRNGKey(1), 0.4, (500,))
    matcher = MomentMatcher(MultivariateGaussian(3), AcceptanceGuard())

    outcome = matcher.match(SimulationBatch(thetas=thetas, accepted=accepted))

    kept = np.asarray(thetas)[np.asarray(accepted)]
    assert isinstance(outcome, Updated)
    np.testing.assert_allclose(outcome.mean, kept.mean(axis=0), rtol=1e-10)
    np.testing.assert_allclose(outcome.cov, np.cov(kept.T, bias=True), atol=1e-10)
    assert jnp.array_equal(outcome.cov, outcome.cov.T)
    assert outcome.Z == pytest.approx(kept.shape[0] / 500)


@pytest.mark.parametrize("threshold", [2, 5, 17])
def test_guard_count_boundary(threshold):
    n = 50
    thetas = jr.normal(jr.PRNGKey(threshold), (n,))
    matcher = MomentMatcher(
        ScalarGaussian(), AcceptanceGuard(min_fraction=0.0, min_count=threshold)
    )

    below = matcher.match(SimulationBatch(thetas=thetas, accepted=mask(n, threshold - 1)))
    at = matcher.match(SimulationBatch(thetas=thetas, accepted=mask(n, threshold)))

    assert isinstance(below, Insufficient)
    assert below.accepted == threshold - 1
    assert isinstance(at, Updated)
    assert at.accepted == threshold


def test_guard_fraction_boundary():
    n = 1000
    thetas = jr.normal(jr.PRNGKey(7), (n, 2))
    matcher = MomentMatcher(
        MultivariateGaussian(2), AcceptanceGuard(min_fraction=0.01, min_count=1)
    )
    assert isinstance(
        matcher.match(SimulationBatch(thetas=thetas, accepted=mask(n, 9))), Insufficient
    )
    assert isinstance(
        matcher.match(SimulationBatch(thetas=thetas, accepted=mask(n, 10))), Updated
    )


def test_guard_fraction_boundary_with_inexact_threshold():
    # 0.28 * 25 evaluates to 7.000000000000001
    n = 25
    thetas = jr.normal(jr.PRNGKey(8), (n,))
    matcher = MomentMatcher(ScalarGaussian(), AcceptanceGuard(min_fraction=0.28, min_count=1))

    at = matcher.match(SimulationBatch(thetas=thetas, accepted=mask(n, 7)))
    below = matcher.match(SimulationBatch(thetas=thetas, accepted=mask(n, 6)))

    assert isinstance(at, Updated)
    assert at.Z == pytest.approx(0.28)
    assert isinstance(below, Insufficient)


def test_no_accepted_draws_is_insufficient():
    matcher = MomentMatcher(ScalarGaussian(), AcceptanceGuard(min_fraction=0.0, min_count=1))
    outcome = matcher.match(
        SimulationBatch(thetas=jnp.ones(10), accepted=jnp.zeros(10, dtype=bool))
    )
    assert isinstance(outcome, Insufficient)
    assert outcome.accepted == 0


def test_identical_draws_are_degenerate():
    matcher = MomentMatcher(ScalarGaussian(), AcceptanceGuard(min_fraction=0.0, min_count=1))
    with pytest.raises(DegenerateCovarianceError):
        matcher.match(SimulationBatch(thetas=jnp.full(10, 3.0), accepted=mask(10, 6)))


def test_collinear_draws_are_degenerate():
    # all accepted draws on a line: rank-1 empirical covariance
    t = jnp.linspace(-1.0, 1.0, 20)
    thetas = jnp.stack([t, 2.0 * t], axis=1)
    matcher = MomentMatcher(
        MultivariateGaussian(2), AcceptanceGuard(min_fraction=0.0, min_count=1)
    )
    with pytest.raises(DegenerateCovarianceError):
        matcher.match(SimulationBatch(thetas=thetas, accepted=jnp.ones(20, dtype=bool)))
