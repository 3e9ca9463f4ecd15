"""
epabc
=====

Expectation Propagation with Approximate Bayesian Computation (EP-ABC),
Gaussian approximating family.

Given an ordered dataset y_1..y_n, a stochastic simulator parameterised by
θ, and an acceptance rule comparing simulated to observed data, EP-ABC
refines a Gaussian approximation to p(θ | y_1..y_n). Each data point owns a
Gaussian "site" factor, obtained by moment matching simulation draws that
were accepted against that data point. No likelihood is ever evaluated.

----------------------------------------------------------------------
Workflow
----------------------------------------------------------------------

Core design
-----------
1. GaussianPrior (gaussian/prior.py):
   - Prior in moment form (μ₀, Σ₀) or (μ₀, v₀); natural form derived once.

2. ParameterTransform (gaussian/transform.py):
   - (μ, Σ) <-> (r, Q), one implementation for scalar and vector θ via
     ScalarGaussian / MultivariateGaussian representations.

3. Model and AcceptanceOracle (model/):
   - Model.instantiate(θ).sample(key) simulates an observation.
   - Acceptance by predicate, distance + tolerance, or stochastic kernel.

4. EPABCEngine (inference/engine.py):
   - Per data point: cavity -> simulate -> moment match -> commit or skip.
   - Maintains global = prior + Σᵢ site[i] and a trace of snapshots.

Unified import style
--------------------
Top-level:
  from epabc import EPABCEngine, EPABCConfig, AcceptanceGuard, GaussianPrior
  from epabc import Model, SimulatorModel, EPABC, GaussianPosterior

Subpackages:
  from epabc.gaussian import ParameterTransform, moment_to_natural, natural_to_moment
  from epabc.model import PredicateAcceptance, DistanceAcceptance, KernelAcceptance
  from epabc.inference import MomentMatcher, SimulationSampler, SiteStore, cavity
  from epabc.posterior import additive_residual, conjugate_gaussian_posterior, stack_trace
  from epabc.utils import LoggingEventSink, RecordingEventSink, l2_distance

Data flow
---------
- EPABCEngine(data, model, prior, acceptance, config) builds the state.
- engine.run_iteration(i) -> TraceEntry; engine.run_pass() -> list of entries.
- Skipped iterations leave the state and Z unchanged and record the cavity
  moments in the trace; the reason is reported through the event sink
  (LoggingEventSink by default).

----------------------------------------------------------------------
"""

from . import gaussian as gaussian
from . import inference as inference
from . import model as model
from . import posterior as posterior
from . import utils as utils
from .errors import (
    DegenerateCovarianceError,
    EPABCError,
    InvalidConfigurationError,
    NonInvertibleParameterError,
    NotPositiveDefiniteError,
    NumericalDegeneracyError,
)
from .gaussian.prior import GaussianPrior
from .gaussian.transform import ParameterTransform
from .inference.config import AcceptanceGuard, EPABCConfig
from .inference.engine import EPABCEngine
from .inference.epabc import EPABC
from .inference.trace import TraceEntry
from .model.acceptance import (
    DistanceAcceptance,
    KernelAcceptance,
    PredicateAcceptance,
)
from .model.base import Model, ModelInstance, SimulatorModel
from .posterior.posterior import GaussianPosterior

__all__ = [
    # Engine
    "EPABCEngine",
    "EPABC",
    "EPABCConfig",
    "AcceptanceGuard",
    "TraceEntry",
    # Gaussian family
    "GaussianPrior",
    "ParameterTransform",
    "GaussianPosterior",
    # Simulators and acceptance
    "Model",
    "ModelInstance",
    "SimulatorModel",
    "PredicateAcceptance",
    "DistanceAcceptance",
    "KernelAcceptance",
    # Errors
    "EPABCError",
    "NumericalDegeneracyError",
    "NonInvertibleParameterError",
    "NotPositiveDefiniteError",
    "DegenerateCovarianceError",
    "InvalidConfigurationError",
    # Subpackages
    "gaussian",
    "inference",
    "model",
    "posterior",
    "utils",
]
