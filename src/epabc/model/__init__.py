"""
model
=====

External collaborators of the EP-ABC engine.

This subpackage provides:
- Model / ModelInstance : simulator interfaces (instantiate at θ, sample).
- SimulatorModel : wrap a `simulate(theta, key)` function as a Model.
- AcceptanceOracle : acceptance rules (predicate, distance + tolerance,
  stochastic kernel) behind one boolean-per-trial interface.

Extensibility
-------------
- To add a simulator: subclass Model, implement instantiate(); override
  specialize() when simulation needs per-observation context.
- To add an acceptance rule: subclass AcceptanceOracle, implement __call__.
"""

from .acceptance import (
    DISTANCES,
    AcceptanceOracle,
    DistanceAcceptance,
    KernelAcceptance,
    PredicateAcceptance,
    resolve_acceptance,
)
from .base import Model, ModelInstance, SimulatorModel

__all__ = [
    "Model",
    "ModelInstance",
    "SimulatorModel",
    "AcceptanceOracle",
    "PredicateAcceptance",
    "DistanceAcceptance",
    "KernelAcceptance",
    "DISTANCES",
    "resolve_acceptance",
]
