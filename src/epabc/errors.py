"""
errors.py
---------

Exception taxonomy for epabc.

Two families:
- NumericalDegeneracyError and its subclasses are raised by the Gaussian
  algebra and the moment matcher. They are recoverable: the engine absorbs
  them and skips the offending iteration.
- InvalidConfigurationError is raised while building configuration objects
  or the engine. It is fatal; no engine is built in an invalid state.
"""

from __future__ import annotations


class EPABCError(Exception):
    """Base class for all epabc errors."""


class NumericalDegeneracyError(EPABCError):
    """A moment/natural conversion or empirical estimate is numerically invalid."""


class NonInvertibleParameterError(NumericalDegeneracyError):
    """Covariance or precision-like matrix is singular to machine precision."""


class NotPositiveDefiniteError(NumericalDegeneracyError):
    """Covariance obtained from natural parameters is not positive-definite."""


class DegenerateCovarianceError(NumericalDegeneracyError):
    """Empirical covariance of accepted draws is not positive-definite."""


class InvalidConfigurationError(EPABCError, ValueError):
    """Engine or configuration was built with invalid settings."""
