"""
JAX Dynamics: screw-theory joint dynamics exposed as factor-graph constraints.

This library provides closed-form, JIT-compilable joint kinematics (poses,
twists, twist accelerations, torques and their Jacobians) using JAX, together
with the linear factors and ordered elimination needed to solve for joint
dynamics with a factor-graph backend.
"""

import jax
jax.config.update("jax_enable_x64", True)

# Import core modules
from . import transforms
from . import core
from . import linear
from . import factors
from .config import OptimizerSetting
from .errors import IndeterminantLinearSystemError, InvalidOrderingError, MissingValueError
from .values import Values

__version__ = "0.1.0"
__all__ = [
    "transforms",
    "core",
    "linear",
    "factors",
    "OptimizerSetting",
    "IndeterminantLinearSystemError",
    "InvalidOrderingError",
    "MissingValueError",
    "Values",
]
