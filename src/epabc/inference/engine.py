"""
engine.py
---------

EP-ABC iteration engine with a Gaussian approximating family.

One iteration refines the site of a single data point i:

    ComputeCavity -> Sample -> Match -> {CommitUpdate | SkipUpdate} -> Emit

1. cavity = global - site[i]; convert to moments (μ_cav, Σ_cav).
   A cavity that is not a proper Gaussian skips the iteration.
2. Draw M parameters from the cavity, simulate, test acceptance.
3. Match moments of the accepted draws (guarded).
4. Commit: global <- matched, site[i] <- matched - cavity, Z <- acc / M.
   Skip: global, site[i] and Z stay exactly as they were.
5. Append a TraceEntry: the matched moments after a commit, the cavity
   moments after a rejected or degenerate match, the unchanged global
   moments when the cavity itself is degenerate. Z is the committed value.

A pass runs the iteration for i = 0..n-1 in dataset order. The engine
never decides when to stop; callers run as many passes as they like.

Invariant
---------
After every iteration:
    global == prior + Σᵢ site[i]      (up to floating point)
The new (global, sites, Z) state is built off to the side and installed in
a single assignment, while a lock serialises whole iterations.

Connections
-----------
- Numerical degeneracies (NumericalDegeneracyError) are absorbed here and
  reported through the event sink; they never abort a pass.
- Configuration problems raise InvalidConfigurationError in __init__.
"""

from __future__ import annotations

import math
import threading
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

import jax
import jax.numpy as jnp

from epabc.errors import InvalidConfigurationError, NumericalDegeneracyError
from epabc.gaussian.prior import GaussianPrior
from epabc.gaussian.representation import GaussianRepresentation, NaturalParams
from epabc.gaussian.transform import ParameterTransform
from epabc.inference.cavity import cavity
from epabc.inference.config import EPABCConfig
from epabc.inference.matching import Insufficient, MomentMatcher
from epabc.inference.sampler import SimulationSampler
from epabc.inference.sites import SiteStore
from epabc.inference.trace import TraceEntry
from epabc.model.acceptance import AcceptanceOracle, resolve_acceptance
from epabc.model.base import Model
from epabc.posterior.posterior import GaussianPosterior
from epabc.utils.events import DiagnosticEvent, EventSink, LoggingEventSink
from epabc.utils.rng import as_key, fold_in


@dataclass(frozen=True, eq=False)
class _EPState:
    """Everything an iteration may change, swapped as one value."""

    global_params: NaturalParams
    mean: jnp.ndarray
    cov: jnp.ndarray
    Z: float
    sites: SiteStore


class EPABCEngine:
    """
    Gaussian EP-ABC over an ordered dataset.

    Parameters
    ----------
    data : sequence
        Observed data points, in sweep order. Copied into an immutable tuple.
    model : Model
        Simulator instantiated at parameter draws.
    prior : GaussianPrior | tuple
        Prior in moment form, or a (mean, cov) pair.
    acceptance : AcceptanceOracle | callable | str
        Acceptance rule. See `epabc.model.resolve_acceptance`; the tolerance
        is taken from `config.tolerance`.
    config : EPABCConfig | None
        Run configuration. Defaults to EPABCConfig().
    key : jax.Array | int | None
        PRNG key or integer seed. Defaults to seed 0.
    event_sink : EventSink | None
        Receives one DiagnosticEvent per iteration. Defaults to a
        LoggingEventSink.

    Raises
    ------
    InvalidConfigurationError
        Empty dataset, prior/model dimension mismatch, observations of
        mixed shape in vectorized mode, or malformed acceptance.

    Examples
    --------
    >>> import jax.numpy as jnp
    >>> import jax.random as jr
    >>> from epabc import EPABCConfig, EPABCEngine, GaussianPrior, SimulatorModel
    >>> model = SimulatorModel(lambda theta, key: theta + jr.normal(key, theta.shape))
    >>> data = jr.normal(jr.PRNGKey(1), (20, 2)) + 1.0
    >>> engine = EPABCEngine(
    ...     data, model, GaussianPrior.standard(2), "l2",
    ...     EPABCConfig(num_simulations=5_000, tolerance=1.0),
    ... )
    >>> trace = engine.run(n_passes=2)
    """

    def __init__(
        self,
        data: Sequence[Any],
        model: Model,
        prior: GaussianPrior | tuple[Any, Any],
        acceptance: AcceptanceOracle | Any,
        config: EPABCConfig | None = None,
        *,
        key: jax.Array | int | None = None,
        event_sink: EventSink | None = None,
    ):
        self.config = config or EPABCConfig()
        self.prior = GaussianPrior.from_any(prior)
        self.data: tuple[Any, ...] = tuple(data)
        self.model = model
        self.acceptance = resolve_acceptance(acceptance, self.config.tolerance)
        self.event_sink: EventSink = event_sink or LoggingEventSink()

        if len(self.data) == 0:
            raise InvalidConfigurationError("data must contain at least one observation")
        self._check_model_dim()
        if self.config.vectorize:
            self._check_observation_shapes()

        rep = self.prior.representation
        self._transform = ParameterTransform(rep)
        self._sampler = SimulationSampler(
            model,
            self.acceptance,
            rep,
            vectorize=self.config.vectorize,
            max_workers=self.config.max_workers,
        )
        self._matcher = MomentMatcher(rep, self.config.guard)

        self._state = _EPState(
            global_params=self.prior.natural,
            mean=self.prior.mean,
            cov=self.prior.cov,
            Z=math.nan,
            sites=SiteStore.zeros(rep, len(self.data)),
        )
        self._key = as_key(key)
        self._iteration = 0
        self._trace: list[TraceEntry] = []
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def _check_model_dim(self) -> None:
        param_dim = getattr(self.model, "param_dim", None)
        if param_dim is None:
            return
        if self.prior.representation.event_shape == ():
            expected = None
        else:
            expected = self.prior.dim
        if param_dim != expected:
            raise InvalidConfigurationError(
                f"Dimension mismatch: model expects param_dim={param_dim}, "
                f"prior has dimension {expected}"
            )

    def _check_observation_shapes(self) -> None:
        shapes = {jnp.shape(obs) for obs in self.data}
        if len(shapes) > 1:
            raise InvalidConfigurationError(
                f"Dimension mismatch: observations have different shapes {sorted(shapes)}; "
                "use vectorize=False for heterogeneous data"
            )

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def representation(self) -> GaussianRepresentation:
        return self.prior.representation

    @property
    def num_data(self) -> int:
        return len(self.data)

    @property
    def natural_params(self) -> NaturalParams:
        """Natural parameters (r, Q) of the global approximation."""
        return self._state.global_params

    @property
    def mean(self) -> jnp.ndarray:
        return self._state.mean

    @property
    def cov(self) -> jnp.ndarray:
        return self._state.cov

    @property
    def Z(self) -> float:
        """Accepted fraction of the last successful update (NaN before any)."""
        return self._state.Z

    @property
    def sites(self) -> SiteStore:
        return self._state.sites

    def site(self, index: int) -> NaturalParams:
        """Natural-parameter contribution of data point `index`."""
        return self._state.sites.site(index)

    @property
    def trace(self) -> list[TraceEntry]:
        """All trace entries emitted so far, across passes."""
        return list(self._trace)

    def posterior(self) -> GaussianPosterior:
        """Current approximation as a GaussianPosterior."""
        state = self._state
        return GaussianPosterior(mean=state.mean, cov=state.cov, Z=state.Z)

    # ------------------------------------------------------------------
    # Iteration
    # ------------------------------------------------------------------

    def run_iteration(self, index: int) -> TraceEntry:
        """
        Refine the site of data point `index`.

        Parameters
        ----------
        index : int
            Data point index, 0 <= index < num_data.

        Returns
        -------
        TraceEntry
            Matched moments after an update, cavity moments after a
            rejected match, global moments after a degenerate cavity;
            Z of the last committed update.

        Raises
        ------
        IndexError
            If index is out of range.
        """
        if not 0 <= index < self.num_data:
            raise IndexError(f"index {index} out of range for {self.num_data} data points")
        with self._lock:
            key = fold_in(self._key, self._iteration)
            self._iteration += 1
            entry = self._iterate(index, key)
            self._trace.append(entry)
        return entry

    def run_pass(self) -> list[TraceEntry]:
        """One sweep over the data in order; returns one entry per data point."""
        return [self.run_iteration(i) for i in range(self.num_data)]

    def run(self, n_passes: int = 1) -> list[TraceEntry]:
        """Run `n_passes` sweeps and return the concatenated trace."""
        if n_passes < 0:
            raise ValueError(f"n_passes must be >= 0, got {n_passes}")
        trace: list[TraceEntry] = []
        for _ in range(n_passes):
            trace.extend(self.run_pass())
        return trace

    def _iterate(self, index: int, key: jax.Array) -> TraceEntry:
        state = self._state
        rep = self.representation
        num_simulations = self.config.num_simulations

        cav = cavity(state.global_params, state.sites.site(index), rep)
        try:
            cav_mean, cav_cov = self._transform.natural_to_moment(cav)
        except NumericalDegeneracyError as err:
            return self._skip(
                index, "degenerate_cavity", None, str(err), state.mean, state.cov
            )

        batch = self._sampler.sample(
            key, cav_mean, cav_cov, num_simulations, self.data[index]
        )
        try:
            outcome = self._matcher.match(batch)
            if isinstance(outcome, Insufficient):
                return self._skip(
                    index, "insufficient", outcome.accepted, outcome.reason,
                    cav_mean, cav_cov,
                )
            matched = self._transform.moment_to_natural(outcome.mean, outcome.cov)
        except NumericalDegeneracyError as err:
            return self._skip(
                index, "degenerate_covariance", batch.num_accepted, str(err),
                cav_mean, cav_cov,
            )

        new_state = _EPState(
            global_params=matched,
            mean=outcome.mean,
            cov=outcome.cov,
            Z=outcome.Z,
            sites=state.sites.with_site(index, rep.subtract(matched, cav)),
        )
        self._state = new_state
        self.event_sink(
            DiagnosticEvent(
                kind="updated",
                index=index,
                accepted=outcome.accepted,
                num_simulations=num_simulations,
            )
        )
        return TraceEntry(index=index, mean=new_state.mean, cov=new_state.cov, Z=new_state.Z)

    def _skip(
        self,
        index: int,
        kind: str,
        accepted: int | None,
        message: str,
        mean: jnp.ndarray,
        cov: jnp.ndarray,
    ) -> TraceEntry:
        self.event_sink(
            DiagnosticEvent(
                kind=kind,  # type: ignore[arg-type]
                index=index,
                accepted=accepted,
                num_simulations=self.config.num_simulations,
                message=message,
            )
        )
        return TraceEntry(index=index, mean=mean, cov=cov, Z=self._state.Z)
