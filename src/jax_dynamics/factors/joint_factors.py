"""Per-joint factors for a single timestep.

The linear builders assume the kinematics (poses, twists, joint velocities)
are already known, which makes the acceleration and dynamics constraints
linear in the remaining unknowns. Every constraint is a hard equality.

Notation: p and c are the parent and child links, T_cp = wTc^-1 wTp is the
parent COM pose seen from the child COM frame, S_c the child-frame screw axis.
"""

import logging
from typing import List, Mapping, Optional, Union

import jax.numpy as jnp
import numpy as np
from jax import Array

from .. import keys
from .. import values as known
from ..config import OptimizerSetting
from ..core.screw_joint import ScrewJoint
from ..errors import MissingValueError
from ..linear.factor_graph import GaussianFactorGraph
from ..linear.noise_model import NoiseModel
from ..transforms import se3
from ..values import Values
from .joint_limit import JointLimitFactor

logger = logging.getLogger(__name__)


def planar_jacobian(planar_axis: Array) -> np.ndarray:
    """(3, 6) selector of the wrench components that vanish in planar motion.

    For motion in the plane normal to `planar_axis` the moments about the two
    in-plane axes and the force along `planar_axis` are zero.
    """
    planar_axis = np.asarray(planar_axis, dtype=np.float64)
    for i in range(3):
        if planar_axis[i] == 1.0 and np.count_nonzero(planar_axis) == 1:
            moments = [k for k in range(3) if k != i]
            H = np.zeros((3, 6))
            H[0, moments[0]] = 1.0
            H[1, moments[1]] = 1.0
            H[2, 3 + i] = 1.0
            return H
    raise ValueError(f"Planar axis must be a unit coordinate axis, got {planar_axis}")


def _child_T_parent(joint: ScrewJoint, known_values: Values, t: int) -> Array:
    wTp = known.pose(known_values, joint.parent.id, t)
    wTc = known.pose(known_values, joint.child.id, t)
    return se3.between(wTc, wTp)


def linear_a_factors(joint: ScrewJoint, t: int, known_values: Values) -> GaussianFactorGraph:
    """Twist acceleration constraint across the joint.

    A_c - Ad(T_cp) A_p - S_c a = ad(V_c) S_c v, with the child twist V_c and
    the joint velocity v read from `known_values`.
    """
    T_cp = _child_T_parent(joint, known_values, t)
    V_c = known.twist(known_values, joint.child.id, t)
    S_c = joint.screw_axis(joint.child)
    v = known.joint_vel(known_values, joint.id, t)

    rhs = se3.ad(V_c) @ S_c * v

    graph = GaussianFactorGraph()
    graph.add(
        [
            (keys.twist_accel_key(joint.child.id, t), jnp.eye(6)),
            (keys.twist_accel_key(joint.parent.id, t), -se3.adjoint(T_cp)),
            (keys.joint_accel_key(joint.id, t), -S_c),
        ],
        rhs,
        NoiseModel.constrained(6),
    )
    logger.debug("Built acceleration factor for joint %s at t=%d", joint.name, t)
    return graph


def linear_dynamics_factors(joint: ScrewJoint, t: int, known_values: Values,
                            planar_axis: Optional[Array] = None) -> GaussianFactorGraph:
    """Torque and wrench transmission constraints across the joint.

    * torque:  S_c^T F_c - tau = 0
    * wrench equivalence:  F_p + Ad(T_cp)^T F_c = 0
    * planar (if `planar_axis` is given):  P F_c = 0
    """
    T_cp = _child_T_parent(joint, known_values, t)
    S_c = joint.screw_axis(joint.child)
    wrench_p = keys.wrench_key(joint.parent.id, joint.id, t)
    wrench_c = keys.wrench_key(joint.child.id, joint.id, t)

    graph = GaussianFactorGraph()
    graph.add(
        [(wrench_c, S_c.reshape(1, 6)), (keys.torque_key(joint.id, t), -np.eye(1))],
        np.zeros(1),
        NoiseModel.constrained(1),
    )
    graph.add(
        [(wrench_p, jnp.eye(6)), (wrench_c, se3.adjoint(T_cp).T)],
        np.zeros(6),
        NoiseModel.constrained(6),
    )
    if planar_axis is not None:
        graph.add([(wrench_c, planar_jacobian(planar_axis))], np.zeros(3), NoiseModel.constrained(3))

    logger.debug("Built %d dynamics factors for joint %s at t=%d", len(graph), joint.name, t)
    return graph


def _lookup(mapping: Mapping, name: str, kind: str):
    try:
        return mapping[name]
    except KeyError:
        raise MissingValueError(name, kind) from None


def _known_values_from_maps(joint: ScrewJoint, t: int, poses: Mapping[str, Array],
                            twists: Optional[Mapping[str, Array]] = None,
                            joint_vels: Optional[Mapping[str, float]] = None) -> Values:
    known_values = Values()
    for link in joint.links():
        known_values.insert(keys.pose_key(link.id, t), _lookup(poses, link.name, "poses"))
    if twists is not None:
        known_values.insert(keys.twist_key(joint.child.id, t),
                            _lookup(twists, joint.child.name, "twists"))
    if joint_vels is not None:
        known_values.insert(keys.joint_vel_key(joint.id, t),
                            _lookup(joint_vels, joint.name, "joint velocities"))
    return known_values


def linear_a_factors_from_maps(joint: ScrewJoint, t: int, poses: Mapping[str, Array],
                               twists: Mapping[str, Array],
                               joint_vels: Mapping[str, float]) -> GaussianFactorGraph:
    """`linear_a_factors` with known quantities keyed by link and joint names."""
    known_values = _known_values_from_maps(joint, t, poses, twists, joint_vels)
    return linear_a_factors(joint, t, known_values)


def linear_dynamics_factors_from_maps(joint: ScrewJoint, t: int, poses: Mapping[str, Array],
                                      planar_axis: Optional[Array] = None) -> GaussianFactorGraph:
    """`linear_dynamics_factors` with link poses keyed by link name."""
    known_values = _known_values_from_maps(joint, t, poses)
    return linear_dynamics_factors(joint, t, known_values, planar_axis)


def linear_fd_priors(joint: ScrewJoint, t: int,
                     torques: Union[Values, Mapping[str, float]]) -> GaussianFactorGraph:
    """Hard prior fixing the joint torque, for forward dynamics.

    `torques` is either a `Values` holding the torque key or a mapping from
    joint name to torque.
    """
    if isinstance(torques, Values):
        tau = known.torque(torques, joint.id, t)
    else:
        tau = _lookup(torques, joint.name, "torques")

    graph = GaussianFactorGraph()
    graph.add([(keys.torque_key(joint.id, t), np.eye(1))], np.array([tau], dtype=np.float64),
              NoiseModel.constrained(1))
    return graph


def joint_limit_factors(joint: ScrewJoint, t: int,
                        opt: Optional[OptimizerSetting] = None) -> List[JointLimitFactor]:
    """Limit penalties on the joint angle, velocity, acceleration and torque."""
    opt = opt if opt is not None else OptimizerSetting()
    params = joint.parameters
    limits = params.scalar_limits
    return [
        JointLimitFactor(keys.joint_angle_key(joint.id, t), opt.jl_cost_model,
                         limits.value_lower_limit, limits.value_upper_limit,
                         limits.value_limit_threshold),
        JointLimitFactor(keys.joint_vel_key(joint.id, t), opt.jl_cost_model,
                         -params.velocity_limit, params.velocity_limit,
                         params.velocity_limit_threshold),
        JointLimitFactor(keys.joint_accel_key(joint.id, t), opt.jl_cost_model,
                         -params.acceleration_limit, params.acceleration_limit,
                         params.acceleration_limit_threshold),
        JointLimitFactor(keys.torque_key(joint.id, t), opt.jl_cost_model,
                         -params.torque_limit, params.torque_limit,
                         params.torque_limit_threshold),
    ]
