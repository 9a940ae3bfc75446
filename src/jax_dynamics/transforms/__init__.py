"""
Rigid-motion primitives for screw-theory kinematics.

This module provides mathematically rigorous, JIT-compilable implementations of:
- SO(3) rotations (so3 module)
- SE(3) rigid body transforms, twists and their derivatives (se3 module)

Twists are ordered [angular, linear]. All functions are pure and stateless.
"""

from . import so3
from . import se3

__all__ = [
    "so3",
    "se3",
]
