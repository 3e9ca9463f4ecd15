"""
base.py
-------

Abstract base class for inference engines.

All inference engines must implement a `fit(model, data, ...)` method that
returns a posterior object.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class InferenceEngine(ABC):
    """
    Abstract interface for inference engines.

    Methods
    -------
    fit(model, data, ...) -> GaussianPosterior
        Fit the parameter of a simulator to data and return a posterior.
    """

    @abstractmethod
    def fit(self, model: Any, data: Any, **kwargs: Any) -> Any:
        """
        Fit model parameters to data.

        Parameters
        ----------
        model : Model
            Simulator to fit.
        data : sequence
            Observed data points.

        Returns
        -------
        GaussianPosterior
            Posterior approximation.
        """
        ...
