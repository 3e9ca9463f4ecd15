"""
representation.py
-----------------

Gaussian representations: the algebra EP-ABC needs, for scalars and vectors.

A Gaussian approximation is carried in natural form (r, Q), with
    Q = -0.5 * Σ⁻¹,   r = Σ⁻¹ μ.
Every other part of the package (parameter transform, cavity, moment
matching, sampling of cavity draws) is written once against the
GaussianRepresentation interface, which hides whether r and Q are scalars
(univariate parameter) or a (d,) vector and (d, d) matrix (multivariate
parameter).

Implements:
- NaturalParams: immutable (r, Q) pair supporting + and -.
- GaussianRepresentation: abstract algebra (invert, PD check, sampling, ...).
- ScalarGaussian: θ ∈ ℝ, shapes () and ().
- MultivariateGaussian: θ ∈ ℝ^d, shapes (d,) and (d, d).
- representation_for(mean): pick the representation from a prior mean.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

import jax
import jax.numpy as jnp
import jax.random as jr

from epabc.errors import InvalidConfigurationError, NonInvertibleParameterError


def as_float_array(x: Any) -> jnp.ndarray:
    """Convert to a JAX array of the default floating dtype."""
    return jnp.asarray(x, dtype=jnp.result_type(float))


@dataclass(frozen=True, eq=False)
class NaturalParams:
    """
    Natural parameters (r, Q) of a Gaussian, or an additive delta of them.

    Attributes
    ----------
    r : jnp.ndarray
        Shape () or (d,).
    Q : jnp.ndarray
        Shape () or (d, d).
    """

    r: jnp.ndarray
    Q: jnp.ndarray

    def __add__(self, other: NaturalParams) -> NaturalParams:
        return NaturalParams(r=self.r + other.r, Q=self.Q + other.Q)

    def __sub__(self, other: NaturalParams) -> NaturalParams:
        return NaturalParams(r=self.r - other.r, Q=self.Q - other.Q)


class GaussianRepresentation(ABC):
    """
    Abstract algebra over one Gaussian parameter shape.

    Subclasses fix the event shape of θ and implement the handful of linear
    algebra primitives the EP-ABC iteration needs.
    """

    #: Shape of a single parameter draw θ.
    event_shape: tuple[int, ...] = ()

    @property
    def dim(self) -> int:
        """Number of scalar parameters in θ."""
        return 1

    @property
    def cov_shape(self) -> tuple[int, ...]:
        return self.event_shape + self.event_shape

    def zeros(self) -> NaturalParams:
        """Additive identity in natural parameter space."""
        return NaturalParams(
            r=jnp.zeros(self.event_shape, dtype=jnp.result_type(float)),
            Q=jnp.zeros(self.cov_shape, dtype=jnp.result_type(float)),
        )

    def subtract(self, a: NaturalParams, b: NaturalParams) -> NaturalParams:
        return a - b

    def add(self, a: NaturalParams, b: NaturalParams) -> NaturalParams:
        return a + b

    def check_moments(self, mean: jnp.ndarray, cov: jnp.ndarray) -> None:
        """Raise InvalidConfigurationError when mean/cov do not fit this shape."""
        if mean.shape != self.event_shape:
            raise InvalidConfigurationError(
                f"Dimension mismatch: expected mean of shape {self.event_shape}, "
                f"got {mean.shape}"
            )
        if cov.shape != self.cov_shape:
            raise InvalidConfigurationError(
                f"Dimension mismatch: expected covariance of shape {self.cov_shape}, "
                f"got {cov.shape}"
            )

    @abstractmethod
    def invert(self, a: jnp.ndarray) -> jnp.ndarray:
        """Inverse of a scalar or matrix; NonInvertibleParameterError if singular."""
        ...

    @abstractmethod
    def matvec(self, a: jnp.ndarray, v: jnp.ndarray) -> jnp.ndarray:
        """Product a·v (scalar product or matrix-vector product)."""
        ...

    @abstractmethod
    def symmetrize(self, a: jnp.ndarray) -> jnp.ndarray:
        ...

    @abstractmethod
    def is_positive_definite(self, cov: jnp.ndarray) -> bool:
        ...

    @abstractmethod
    def outer(self, v: jnp.ndarray) -> jnp.ndarray:
        """Outer product v vᵀ (scalar: v²)."""
        ...

    @abstractmethod
    def weighted_second_moment(self, thetas: jnp.ndarray, weights: jnp.ndarray) -> jnp.ndarray:
        """Σₘ wₘ θₘ θₘᵀ over a batch of draws of shape (M,) + event_shape."""
        ...

    @abstractmethod
    def sample(
        self, key: jax.Array, mean: jnp.ndarray, cov: jnp.ndarray, n: int
    ) -> jnp.ndarray:
        """Draw n samples, shape (n,) + event_shape."""
        ...


class ScalarGaussian(GaussianRepresentation):
    """Univariate Gaussian: μ, v, r and Q are all scalars."""

    event_shape: tuple[int, ...] = ()

    def invert(self, a):
        a = as_float_array(a)
        if not bool(jnp.isfinite(a)) or bool(jnp.abs(a) < jnp.finfo(a.dtype).tiny):
            raise NonInvertibleParameterError(f"scalar {float(a)} is not invertible")
        return 1.0 / a

    def matvec(self, a, v):
        return a * v

    def symmetrize(self, a):
        return a

    def is_positive_definite(self, cov) -> bool:
        return bool(jnp.isfinite(cov)) and bool(cov > 0)

    def outer(self, v):
        return v * v

    def weighted_second_moment(self, thetas, weights):
        return jnp.sum(weights * thetas**2)

    def sample(self, key, mean, cov, n):
        return mean + jnp.sqrt(cov) * jr.normal(key, (n,), dtype=jnp.result_type(float))

    def __repr__(self) -> str:
        return "ScalarGaussian()"


class MultivariateGaussian(GaussianRepresentation):
    """
    Multivariate Gaussian over θ ∈ ℝ^d.

    Parameters
    ----------
    dim : int
        Dimension d of θ (>= 1).
    """

    def __init__(self, dim: int):
        if int(dim) < 1:
            raise InvalidConfigurationError(f"dim must be >= 1, got {dim}")
        self.event_shape = (int(dim),)

    @property
    def dim(self) -> int:
        return self.event_shape[0]

    def invert(self, a):
        a = as_float_array(a)
        if not bool(jnp.all(jnp.isfinite(a))):
            raise NonInvertibleParameterError("matrix has non-finite entries")
        cond = jnp.linalg.cond(a)
        if not bool(jnp.isfinite(cond)) or bool(cond * jnp.finfo(a.dtype).eps >= 1.0):
            raise NonInvertibleParameterError(
                f"matrix is singular to machine precision (cond={float(cond):.3g})"
            )
        return jnp.linalg.inv(a)

    def matvec(self, a, v):
        return a @ v

    def symmetrize(self, a):
        return 0.5 * (a + a.T)

    def is_positive_definite(self, cov) -> bool:
        cov = as_float_array(cov)
        if not bool(jnp.all(jnp.isfinite(cov))):
            return False
        scale = jnp.max(jnp.abs(cov))
        tol = jnp.sqrt(jnp.finfo(cov.dtype).eps) * jnp.maximum(scale, 1.0)
        if bool(jnp.max(jnp.abs(cov - cov.T)) > tol):
            return False
        # jnp.linalg.cholesky signals failure with NaNs rather than raising
        chol = jnp.linalg.cholesky(cov)
        return bool(jnp.all(jnp.isfinite(chol)))

    def outer(self, v):
        return jnp.outer(v, v)

    def weighted_second_moment(self, thetas, weights):
        return jnp.einsum("m,mi,mj->ij", weights, thetas, thetas)

    def sample(self, key, mean, cov, n):
        return jr.multivariate_normal(
            key, mean, cov, shape=(n,), dtype=jnp.result_type(float)
        )

    def __repr__(self) -> str:
        return f"MultivariateGaussian(dim={self.dim})"


def representation_for(mean: Any) -> GaussianRepresentation:
    """
    Choose the representation matching a mean vector or scalar.

    Parameters
    ----------
    mean : array-like
        Scalar (univariate) or 1-D array (multivariate).

    Returns
    -------
    GaussianRepresentation

    Raises
    ------
    InvalidConfigurationError
        If mean has more than one axis.
    """
    mean = as_float_array(mean)
    if mean.ndim == 0:
        return ScalarGaussian()
    if mean.ndim == 1:
        return MultivariateGaussian(mean.shape[0])
    raise InvalidConfigurationError(
        f"mean must be a scalar or 1-D array, got shape {mean.shape}"
    )
