"""
base.py
-------

Simulator interfaces consumed by the EP-ABC engine.

EP-ABC never evaluates a likelihood. It only needs to *simulate* an
observation for a given parameter draw θ:

    instance = model.instantiate(theta)
    y_sim = instance.sample(key)

Optionally a model may be specialised to the data point being processed
(e.g. to fix a tree topology taken from that observation) before being
instantiated:

    model_i = model.specialize(observation_i)

The default specialisation is the identity.

Vectorized sampling
-------------------
When EPABCConfig.vectorize is True (the default) the engine wraps
`model.instantiate(theta).sample(key)` in `jax.vmap`, so both calls must
be JAX-traceable (pure jax.numpy on θ and key). Simulators that are not
traceable should be run with vectorize=False.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable

import jax
import jax.numpy as jnp


class ModelInstance(ABC):
    """A simulator with its parameter fixed."""

    @abstractmethod
    def sample(self, key: jax.Array) -> Any:
        """Draw one simulated observation."""
        ...


class Model(ABC):
    """
    Stochastic simulator parameterised by θ.

    Attributes
    ----------
    param_dim : int | None
        Dimension of θ if the model knows it (None for a scalar θ or when
        unknown). Checked against the prior when the engine is built.

    Subclasses must implement:
    - instantiate(theta) --> ModelInstance
    """

    param_dim: int | None = None

    @abstractmethod
    def instantiate(self, theta: jnp.ndarray) -> ModelInstance:
        """Fix the parameter of the simulator to theta."""
        ...

    def specialize(self, observation: Any) -> Model:
        """Return a model conditioned on one observed data point (identity by default)."""
        return self


class _BoundSimulator(ModelInstance):
    def __init__(self, simulate: Callable[[jnp.ndarray, jax.Array], Any], theta):
        self._simulate = simulate
        self.theta = theta

    def sample(self, key):
        return self._simulate(self.theta, key)


class SimulatorModel(Model):
    """
    Wrap a plain function `simulate(theta, key) -> observation` as a Model.

    Parameters
    ----------
    simulate : callable
        Simulator taking a parameter draw and a PRNG key.
    param_dim : int | None
        Optional dimension of θ.

    Examples
    --------
    >>> import jax.random as jr
    >>> model = SimulatorModel(lambda theta, key: theta + jr.normal(key, theta.shape))
    """

    def __init__(
        self,
        simulate: Callable[[jnp.ndarray, jax.Array], Any],
        param_dim: int | None = None,
    ):
        self.simulate = simulate
        self.param_dim = param_dim

    def instantiate(self, theta):
        return _BoundSimulator(self.simulate, theta)
