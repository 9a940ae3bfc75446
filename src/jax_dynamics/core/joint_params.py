"""Joint parameters: effort type and scalar limits."""

import enum
from dataclasses import dataclass, field

import numpy as np


class JointEffortType(enum.Enum):
    ACTUATED = "actuated"
    UNACTUATED = "unactuated"
    IMPEDANCE = "impedance"


@dataclass(frozen=True)
class ScalarLimits:
    """Limits on the joint coordinate, with the soft margin used by limit factors."""
    value_lower_limit: float = -np.pi
    value_upper_limit: float = np.pi
    value_limit_threshold: float = 1e-9


@dataclass(frozen=True)
class JointParams:
    """Immutable joint parameters.

    Velocity, acceleration and torque limits are symmetric: the admissible
    range is [-limit, limit], shrunk by the matching threshold in limit factors.
    """
    effort_type: JointEffortType = JointEffortType.ACTUATED
    scalar_limits: ScalarLimits = field(default_factory=ScalarLimits)
    velocity_limit: float = 10000.0
    velocity_limit_threshold: float = 0.0
    acceleration_limit: float = 10000.0
    acceleration_limit_threshold: float = 0.0
    torque_limit: float = 10000.0
    torque_limit_threshold: float = 0.0
