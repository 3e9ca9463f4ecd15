"""
Univariate example: EP-ABC for the mean of a Gaussian with known variance
--------------------------------------------------------------------------

This script runs EP-ABC on a toy problem where the exact posterior is known:

1. Draw n observations y_j ~ N(θ*, 1) with a 'ground-truth' θ*.
2. Run one EP-ABC pass with prior N(0, 1), an l2 distance and tolerance ε.
3. Compare the Gaussian approximation to the conjugate posterior.

For each data point the simulator is
    y ~ N(θ, 1)
and a draw θ from the cavity is accepted when |y - y_j| <= ε. The moments
of the accepted draws define the new global approximation.

Note:
- Smaller ε makes the ABC likelihood closer to the true one but lowers the
  acceptance rate, so num_simulations has to grow accordingly.
- The plot shows how mean and variance evolve over iterations of the pass,
  with the exact posterior as dashed lines.
"""

from __future__ import annotations

import logging
import os
import sys

import jax
import jax.random as jr
import matplotlib.pyplot as plt
import numpy as np

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "../../../src")))
# --8<-- [start:imports]
from epabc import EPABCConfig, EPABCEngine, GaussianPrior, SimulatorModel
from epabc.posterior import conjugate_gaussian_posterior, stack_trace

# --8<-- [end:imports]

PLOTS_DIR = os.path.join(os.path.dirname(__file__), "plots")

jax.config.update("jax_enable_x64", True)
logging.basicConfig(level=logging.WARNING, format="%(name)s %(levelname)s: %(message)s")

# ---------- Data ----------
TRUE_MEAN = 0.7
N_DATA = 100
key_data, key_fit = jr.split(jr.PRNGKey(0))
data = TRUE_MEAN + jr.normal(key_data, (N_DATA,))

# ---------- Model ----------
# --8<-- [start:model]
model = SimulatorModel(lambda theta, key: theta + jr.normal(key, theta.shape))
prior = GaussianPrior(mean=0.0, cov=1.0)
config = EPABCConfig(num_simulations=30_000, tolerance=0.1)
# --8<-- [end:model]

# ---------- Fit ----------
# --8<-- [start:fit]
engine = EPABCEngine(data, model, prior, "l2", config, key=key_fit)
trace = engine.run_pass()
# --8<-- [end:fit]

exact = conjugate_gaussian_posterior(0.0, 1.0, 1.0, data)
print(f"EP-ABC : mean={float(engine.mean):.4f}  var={float(engine.cov):.5f}  Z={engine.Z:.4f}")
print(f"Exact  : mean={float(exact.mean):.4f}  var={float(exact.cov):.5f}")

# ---------- Plot ----------
means, variances, Z = stack_trace(trace)
iterations = np.arange(1, len(trace) + 1)

fig, axes = plt.subplots(1, 3, figsize=(13, 3.5))
axes[0].plot(iterations, means, label="EP-ABC")
axes[0].axhline(float(exact.mean), ls="--", c="k", label="exact")
axes[0].set_title("posterior mean")
axes[0].legend()

axes[1].semilogy(iterations, variances)
axes[1].axhline(float(exact.cov), ls="--", c="k")
axes[1].set_title("posterior variance")

axes[2].plot(iterations, Z)
axes[2].set_title("accepted fraction Z")

for ax in axes:
    ax.set_xlabel("iteration")
fig.tight_layout()

os.makedirs(PLOTS_DIR, exist_ok=True)
out = os.path.join(PLOTS_DIR, "univariate_trace.png")
fig.savefig(out, dpi=150)
print(f"Saved plot to {out}")
