"""Joint and link data structures for JAX Dynamics.

This module provides the immutable records describing the two links a joint
connects and the screw joint variants with their kinematics.
"""

from .joint_params import JointEffortType, JointParams, ScalarLimits
from .link import Link
from .screw_joint import (
    JointType,
    ScrewJoint,
    TwistAccelJacobians,
    TwistJacobians,
    joint_frame_screw_axis,
    prismatic_joint,
    revolute_joint,
    screw_joint,
)

__all__ = [
    "JointEffortType",
    "JointParams",
    "ScalarLimits",
    "Link",
    "JointType",
    "ScrewJoint",
    "TwistAccelJacobians",
    "TwistJacobians",
    "joint_frame_screw_axis",
    "prismatic_joint",
    "revolute_joint",
    "screw_joint",
]
