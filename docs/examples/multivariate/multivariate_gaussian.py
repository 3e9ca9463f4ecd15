"""
Multivariate example: EP-ABC in three dimensions, several passes
----------------------------------------------------------------

θ* ∈ R³, observations y_j ~ N(θ*, I). EPABC runs three passes over the data
with an l2 acceptance ball of radius 1.8 and reports the final Gaussian
approximation next to the conjugate posterior.

Skipped iterations (too few accepted draws) are logged at WARNING by the
default event sink; a RecordingEventSink is used here to count them.
"""

from __future__ import annotations

import os
import sys

import jax
import jax.numpy as jnp
import jax.random as jr
import matplotlib.pyplot as plt
import numpy as np

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "../../../src")))
# --8<-- [start:imports]
from epabc import EPABC, EPABCConfig, GaussianPrior, SimulatorModel
from epabc.posterior import conjugate_gaussian_posterior, stack_trace
from epabc.utils import RecordingEventSink

# --8<-- [end:imports]

PLOTS_DIR = os.path.join(os.path.dirname(__file__), "plots")

jax.config.update("jax_enable_x64", True)

TRUE_MEAN = jnp.array([-0.5, 0.3, 1.1])
N_DATA = 50
key_data, key_fit = jr.split(jr.PRNGKey(1))
data = TRUE_MEAN + jr.normal(key_data, (N_DATA, 3))

# --8<-- [start:fit]
model = SimulatorModel(
    lambda theta, key: jr.multivariate_normal(key, theta, jnp.eye(3)), param_dim=3
)
sink = RecordingEventSink()
fitter = EPABC(
    passes=3,
    config=EPABCConfig(num_simulations=20_000, tolerance=1.8),
    event_sink=sink,
)
posterior = fitter.fit(model, data, prior=GaussianPrior.standard(3), acceptance="l2", key=key_fit)
# --8<-- [end:fit]

exact = conjugate_gaussian_posterior(jnp.zeros(3), jnp.eye(3), jnp.eye(3), data)
skipped = sum(event.skipped for event in sink.events)
print(f"iterations: {len(sink.events)}  skipped: {skipped}")
print("EP-ABC mean:", np.round(np.asarray(posterior.mean), 4))
print("Exact  mean:", np.round(np.asarray(exact.mean), 4))
print("EP-ABC std :", np.round(np.asarray(posterior.std), 4))
print("Exact  std :", np.round(np.asarray(exact.std), 4))

means, covs, Z = stack_trace(fitter.trace_)
iterations = np.arange(1, len(means) + 1)

fig, axes = plt.subplots(1, 2, figsize=(10, 3.5))
for i in range(3):
    axes[0].plot(iterations, means[:, i], label=f"θ[{i}]")
    axes[0].axhline(float(exact.mean[i]), ls="--", c="k", lw=0.8)
axes[0].set_title("posterior mean per coordinate")
axes[0].legend()
for p in range(1, fitter.passes):
    axes[0].axvline(p * N_DATA, c="grey", lw=0.5)

axes[1].semilogy(iterations, np.trace(covs, axis1=1, axis2=2))
axes[1].set_title("trace of Σ")
for ax in axes:
    ax.set_xlabel("iteration")
fig.tight_layout()

os.makedirs(PLOTS_DIR, exist_ok=True)
out = os.path.join(PLOTS_DIR, "multivariate_trace.png")
fig.savefig(out, dpi=150)
print(f"Saved plot to {out}")
