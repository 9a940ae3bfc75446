"""Centered finite differences for checking closed-form Jacobians.

Vector-valued functions are differenced component-wise. Pose-valued functions
are differenced in local coordinates around f(x), so the result is directly
comparable with the right-trivialized Jacobians returned by the kinematics.
"""

from typing import Callable

import numpy as np

from .transforms import se3


def _perturbations(x, delta):
    x = np.asarray(x, dtype=np.float64)
    if x.ndim == 0:
        yield float(x + delta), float(x - delta)
        return
    for i in range(x.size):
        step = np.zeros_like(x)
        step.flat[i] = delta
        yield x + step, x - step


def numerical_derivative(f: Callable, x, delta: float = 1e-5) -> np.ndarray:
    """Jacobian of a scalar- or vector-valued f at a scalar or vector x.

    Returns shape (m,) for a scalar x and (m, n) for an n-vector x, where m is
    the size of f(x) (a scalar f gives m = 1 squeezed away for scalar x).
    """
    columns = [
        (np.asarray(f(x_plus), dtype=np.float64) - np.asarray(f(x_minus), dtype=np.float64)) / (2.0 * delta)
        for x_plus, x_minus in _perturbations(x, delta)
    ]
    if np.ndim(x) == 0:
        return columns[0]
    return np.stack([np.atleast_1d(c) for c in columns], axis=-1)


def numerical_pose_derivative(f: Callable, x, delta: float = 1e-5) -> np.ndarray:
    """Right-trivialized Jacobian of a pose-valued f, shape (6,) or (6, n)."""
    T0 = f(x)
    return numerical_derivative(
        lambda y: np.asarray(se3.local(T0, f(y))), x, delta)
