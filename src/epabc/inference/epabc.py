"""
epabc.py
--------

One-call EP-ABC fitting.

EPABC builds an EPABCEngine, runs a fixed number of passes, and returns the
resulting GaussianPosterior. The engine and its full trace stay available
on the instance for diagnostics and plotting.

Examples
--------
>>> fitter = EPABC(passes=3, config=EPABCConfig(num_simulations=30_000, tolerance=1.8))
>>> posterior = fitter.fit(model, data, prior=GaussianPrior.standard(3), acceptance="l2")
>>> means, covs, Z = stack_trace(fitter.trace_)
"""

from __future__ import annotations

from typing import Any

import jax

from epabc.inference.base import InferenceEngine
from epabc.inference.config import EPABCConfig
from epabc.inference.engine import EPABCEngine
from epabc.inference.trace import TraceEntry
from epabc.posterior.posterior import GaussianPosterior
from epabc.utils.events import EventSink


class EPABC(InferenceEngine):
    """
    EP-ABC inference with a fixed number of passes.

    Parameters
    ----------
    passes : int, default=1
        Number of sweeps over the data.
    config : EPABCConfig | None
        Engine configuration.
    event_sink : EventSink | None
        Diagnostic sink handed to the engine.

    Attributes
    ----------
    engine_ : EPABCEngine | None
        Engine of the last fit.
    trace_ : list[TraceEntry]
        Trace of the last fit.
    """

    def __init__(
        self,
        passes: int = 1,
        config: EPABCConfig | None = None,
        *,
        event_sink: EventSink | None = None,
    ):
        if passes < 1:
            raise ValueError(f"passes must be >= 1, got {passes}")
        self.passes = passes
        self.config = config
        self.event_sink = event_sink
        self.engine_: EPABCEngine | None = None
        self.trace_: list[TraceEntry] = []

    def fit(
        self,
        model,
        data,
        *,
        prior: Any,
        acceptance: Any,
        key: jax.Array | int | None = None,
    ) -> GaussianPosterior:
        """
        Run EP-ABC and return the Gaussian approximation.

        Parameters
        ----------
        model : Model
            Simulator.
        data : sequence
            Observations in sweep order.
        prior : GaussianPrior | tuple
            Prior moments.
        acceptance : AcceptanceOracle | callable | str
            Acceptance rule.
        key : jax.Array | int | None
            PRNG key or seed.

        Returns
        -------
        GaussianPosterior
        """
        engine = EPABCEngine(
            data,
            model,
            prior,
            acceptance,
            self.config,
            key=key,
            event_sink=self.event_sink,
        )
        self.trace_ = engine.run(self.passes)
        self.engine_ = engine
        return engine.posterior()
