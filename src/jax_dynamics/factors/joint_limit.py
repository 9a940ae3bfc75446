"""Soft penalty keeping a scalar joint quantity inside its limits."""

from dataclasses import dataclass
from typing import Hashable, Mapping

import numpy as np

from ..linear.jacobian_factor import JacobianFactor
from ..linear.noise_model import NoiseModel


@dataclass(frozen=True)
class JointLimitFactor:
    """Hinge penalty on a scalar variable.

    The residual is zero inside [lower + threshold, upper - threshold] and
    grows linearly outside it; the cost model shapes the penalty.
    """
    key: Hashable
    cost_model: NoiseModel
    lower_limit: float
    upper_limit: float
    limit_threshold: float

    @property
    def keys(self):
        return (self.key,)

    @property
    def low(self) -> float:
        return self.lower_limit + self.limit_threshold

    @property
    def high(self) -> float:
        return self.upper_limit - self.limit_threshold

    def evaluate_error(self, x: float, jacobian: bool = False):
        """Residual (1,) and, on request, its (1, 1) derivative."""
        x = float(x)
        if x < self.low:
            residual, H = self.low - x, -1.0
        elif x <= self.high:
            residual, H = 0.0, 0.0
        else:
            residual, H = x - self.high, 1.0
        if not jacobian:
            return np.array([residual])
        return np.array([residual]), np.array([[H]])

    def error(self, values: Mapping) -> float:
        residual = self.evaluate_error(values[self.key])
        return 0.5 * self.cost_model.squared_mahalanobis(residual)

    def linearize(self, values: Mapping) -> JacobianFactor:
        """Gaussian approximation H dx = -residual around `values`."""
        residual, H = self.evaluate_error(values[self.key], jacobian=True)
        return JacobianFactor.create([(self.key, H)], -residual, self.cost_model)
