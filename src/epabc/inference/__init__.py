"""
inference
=========

EP-ABC inference engine.

This subpackage provides the pieces of one EP-ABC iteration and the engine
that strings them together:
- cavity : leave-one-out natural parameters.
- SimulationSampler : cavity draws, simulation, acceptance.
- MomentMatcher : guarded empirical moments of accepted draws.
- SiteStore : one natural-parameter delta per data point.
- EPABCEngine : iteration / pass orchestration and trace.
- EPABC : fit façade returning a GaussianPosterior.
- EPABCConfig, AcceptanceGuard : validated configuration.
"""

from .base import InferenceEngine
from .cavity import cavity
from .config import AcceptanceGuard, EPABCConfig
from .engine import EPABCEngine
from .epabc import EPABC
from .matching import Insufficient, MomentMatcher, Updated, UpdateOutcome
from .sampler import SimulationBatch, SimulationSampler
from .sites import SiteStore
from .trace import TraceEntry, stack_trace

__all__ = [
    "InferenceEngine",
    "EPABC",
    "EPABCEngine",
    "EPABCConfig",
    "AcceptanceGuard",
    "cavity",
    "MomentMatcher",
    "Updated",
    "Insufficient",
    "UpdateOutcome",
    "SimulationSampler",
    "SimulationBatch",
    "SiteStore",
    "TraceEntry",
    "stack_trace",
]
