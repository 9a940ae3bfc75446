"""Factors emitted per joint and per timestep."""

from .joint_factors import (
    joint_limit_factors,
    linear_a_factors,
    linear_a_factors_from_maps,
    linear_dynamics_factors,
    linear_dynamics_factors_from_maps,
    linear_fd_priors,
    planar_jacobian,
)
from .joint_limit import JointLimitFactor

__all__ = [
    "JointLimitFactor",
    "joint_limit_factors",
    "linear_a_factors",
    "linear_a_factors_from_maps",
    "linear_dynamics_factors",
    "linear_dynamics_factors_from_maps",
    "linear_fd_priors",
    "planar_jacobian",
]
