"""Variable keys for dynamics factor graphs.

Every unknown in a kinodynamic factor graph is identified by the entity it
belongs to (a link, a joint, or a link/joint pair for wrenches), the discrete
timestep, and the kind of quantity. Keys are plain named tuples so they are
hashable, ordered, and readable in error messages.
"""

from typing import NamedTuple

POSE = "p"
TWIST = "V"
TWIST_ACCEL = "A"
WRENCH = "F"
TORQUE = "T"
JOINT_ANGLE = "q"
JOINT_VEL = "v"
JOINT_ACCEL = "a"

NO_ID = -1


class DynamicsKey(NamedTuple):
    """Key of a single variable: (symbol, link id, joint id, timestep)."""
    symbol: str
    link_id: int
    joint_id: int
    t: int

    def __str__(self):
        ids = [str(i) for i in (self.link_id, self.joint_id) if i != NO_ID]
        return f"{self.symbol}({','.join(ids)}){self.t}"


def pose_key(link_id: int, t: int = 0) -> DynamicsKey:
    return DynamicsKey(POSE, link_id, NO_ID, t)


def twist_key(link_id: int, t: int = 0) -> DynamicsKey:
    return DynamicsKey(TWIST, link_id, NO_ID, t)


def twist_accel_key(link_id: int, t: int = 0) -> DynamicsKey:
    return DynamicsKey(TWIST_ACCEL, link_id, NO_ID, t)


def wrench_key(link_id: int, joint_id: int, t: int = 0) -> DynamicsKey:
    """Wrench applied on link `link_id` through joint `joint_id`."""
    return DynamicsKey(WRENCH, link_id, joint_id, t)


def torque_key(joint_id: int, t: int = 0) -> DynamicsKey:
    return DynamicsKey(TORQUE, NO_ID, joint_id, t)


def joint_angle_key(joint_id: int, t: int = 0) -> DynamicsKey:
    return DynamicsKey(JOINT_ANGLE, NO_ID, joint_id, t)


def joint_vel_key(joint_id: int, t: int = 0) -> DynamicsKey:
    return DynamicsKey(JOINT_VEL, NO_ID, joint_id, t)


def joint_accel_key(joint_id: int, t: int = 0) -> DynamicsKey:
    return DynamicsKey(JOINT_ACCEL, NO_ID, joint_id, t)
