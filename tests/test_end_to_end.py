"""
test_end_to_end.py
------------------

EP-ABC on Gaussian location models, where the exact posterior is known.

Scenario A: scalar θ, y ~ N(θ, 1), prior N(0, 1).
Scenario B: θ ∈ R³, y ~ N(θ, I), prior N(0, I), several passes.

The ABC kernel widens the effective likelihood slightly, so agreement with
the conjugate posterior is checked with tolerances matched to the kernel
width rather than to Monte Carlo error alone.
"""

import jax.numpy as jnp
import numpy as np
import pytest

from epabc import EPABC, EPABCConfig, EPABCEngine, GaussianPrior
from epabc.posterior import additive_residual, conjugate_gaussian_posterior, stack_trace
from epabc.utils import NullEventSink, RecordingEventSink


@pytest.mark.parametrize("seed", [0, 1, 2])
def test_univariate_matches_conjugate_posterior(
    gaussian_location_model, univariate_data, seed
):
    sink = RecordingEventSink()
    engine = EPABCEngine(
        univariate_data,
        gaussian_location_model(1.0),
        GaussianPrior(mean=0.0, cov=1.0),
        "l2",
        EPABCConfig(num_simulations=30_000, tolerance=0.1),
        key=seed,
        event_sink=sink,
    )
    trace = engine.run_pass()
    exact = conjugate_gaussian_posterior(0.0, 1.0, 1.0, univariate_data)

    assert len(trace) == len(univariate_data)
    assert sink.kinds().count("updated") == len(univariate_data)
    assert abs(float(engine.mean) - float(exact.mean)) < 0.15
    assert 0.5 < float(engine.cov) / float(exact.cov) < 2.0
    assert 0.0 < engine.Z < 1.0
    assert additive_residual(engine) < 1e-8


def test_multivariate_matches_conjugate_posterior(
    gaussian_location_model, multivariate_data
):
    data = multivariate_data[:50]
    fitter = EPABC(
        passes=3,
        config=EPABCConfig(num_simulations=20_000, tolerance=1.8),
        event_sink=NullEventSink(),
    )
    posterior = fitter.fit(
        gaussian_location_model(jnp.eye(3)),
        data,
        prior=GaussianPrior.standard(3),
        acceptance="l2",
        key=11,
    )
    exact = conjugate_gaussian_posterior(jnp.zeros(3), jnp.eye(3), jnp.eye(3), data)

    np.testing.assert_allclose(posterior.mean, exact.mean, atol=0.25)
    cov = np.asarray(posterior.cov)
    np.testing.assert_allclose(cov, cov.T, atol=1e-12)
    assert np.all(np.linalg.eigvalsh(cov) > 0)

    means, covs, Z = stack_trace(fitter.trace_)
    assert means.shape == (150, 3)
    assert covs.shape == (150, 3, 3)
    assert Z.shape == (150,)
    assert additive_residual(fitter.engine_) < 1e-8


def test_later_passes_do_not_drift(gaussian_location_model, univariate_data):
    data = univariate_data[:30]
    engine = EPABCEngine(
        data,
        gaussian_location_model(1.0),
        GaussianPrior.standard(),
        "l2",
        EPABCConfig(num_simulations=20_000, tolerance=0.2),
        key=3,
        event_sink=NullEventSink(),
    )
    engine.run_pass()
    after_one = float(engine.mean)
    engine.run(n_passes=2)
    exact = conjugate_gaussian_posterior(0.0, 1.0, 1.0, data)

    assert abs(float(engine.mean) - after_one) < 0.2
    assert abs(float(engine.mean) - float(exact.mean)) < 0.2
