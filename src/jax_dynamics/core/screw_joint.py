"""Screw-type joints: revolute, prismatic and helical screw.

A screw joint connects a parent and a child link through one scalar degree of
freedom q. The relative motion is the exponential of a fixed screw axis scaled
by q, composed with the rest transform between the two centre-of-mass frames:

    pMc(q) = pMc(0) @ exp(S_c q),      cMp(q) = pMc(q)^-1

All kinematic quantities are returned in the requested link's COM frame.
Jacobians are closed form and are only computed when asked for; they use the
right-trivialized convention of `jax_dynamics.transforms.se3`.
"""

import enum
from typing import NamedTuple, Optional, Tuple

import jax.numpy as jnp
from jax import Array
from flax import struct

from ..keys import joint_angle_key
from ..transforms import se3
from ..values import Values, joint_accel, joint_angle, joint_vel
from .joint_params import JointParams
from .link import Link


class JointType(enum.Enum):
    REVOLUTE = "revolute"
    PRISMATIC = "prismatic"
    SCREW = "screw"


class TwistJacobians(NamedTuple):
    """Derivatives of a propagated twist, shapes (6,), (6,) and (6, 6)."""
    H_q: Array
    H_q_dot: Array
    H_other_twist: Array


class TwistAccelJacobians(NamedTuple):
    """Derivatives of a propagated twist acceleration."""
    H_q: Array
    H_q_dot: Array
    H_q_ddot: Array
    H_this_twist: Array
    H_other_twist_accel: Array


def joint_frame_screw_axis(joint_type: JointType, axis: Array, thread_pitch: float = 0.0) -> Array:
    """Screw axis [w, v] in the joint frame for a unit joint `axis`.

    Revolute joints rotate about the axis, prismatic joints slide along it and
    screw joints advance `thread_pitch` per full turn.
    """
    axis = jnp.asarray(axis, dtype=jnp.float64)
    zeros = jnp.zeros(3, dtype=axis.dtype)
    if joint_type == JointType.REVOLUTE:
        return jnp.concatenate([axis, zeros])
    if joint_type == JointType.PRISMATIC:
        return jnp.concatenate([zeros, axis])
    if joint_type == JointType.SCREW:
        return jnp.concatenate([axis, axis * thread_pitch / (2.0 * jnp.pi)])
    raise ValueError(f"Unsupported joint type: {joint_type}")


@struct.dataclass
class ScrewJoint:
    """Immutable PyTree representation of a one-dof screw joint.

    Attributes:
        id: Joint identifier used in variable keys. Static.
        name: Joint name used by the name-keyed factor builders. Static.
        joint_type: Which screw variant this joint is. Static.
        parameters: Effort type and limits. Static.
        thread_pitch: Advance per revolution for screw joints, 0 otherwise. Static.
        parent: Parent link.
        child: Child link.
        wTj: (4, 4) pose of the joint frame in the world frame.
        axis: (3,) joint axis in the joint frame.
        pMccom: (4, 4) rest transform, child COM frame in parent COM frame.
        parent_screw_axis: (6,) screw axis expressed in the parent COM frame.
        child_screw_axis: (6,) screw axis expressed in the child COM frame.
    """
    id: int = struct.field(pytree_node=False)
    name: str = struct.field(pytree_node=False)
    joint_type: JointType = struct.field(pytree_node=False)
    parameters: JointParams = struct.field(pytree_node=False)
    thread_pitch: float = struct.field(pytree_node=False)
    parent: Link
    child: Link
    wTj: Array
    axis: Array
    pMccom: Array
    parent_screw_axis: Array
    child_screw_axis: Array

    @classmethod
    def create(
        cls,
        id: int,
        name: str,
        joint_type: JointType,
        wTj: Array,
        parent: Link,
        child: Link,
        axis: Array,
        parameters: Optional[JointParams] = None,
        thread_pitch: float = 0.0,
    ) -> "ScrewJoint":
        """Build a joint and derive its screw axes in both link frames."""
        wTj = jnp.asarray(wTj, dtype=jnp.float64)
        axis = jnp.asarray(axis, dtype=jnp.float64)
        jS = joint_frame_screw_axis(joint_type, axis, thread_pitch)

        jTpcom = se3.between(wTj, parent.com_pose)
        jTccom = se3.between(wTj, child.com_pose)

        return cls(
            id=id,
            name=name,
            joint_type=joint_type,
            parameters=parameters if parameters is not None else JointParams(),
            thread_pitch=float(thread_pitch),
            parent=parent,
            child=child,
            wTj=wTj,
            axis=axis,
            pMccom=se3.between(parent.com_pose, child.com_pose),
            parent_screw_axis=-se3.adjoint(se3.inverse(jTpcom)) @ jS,
            child_screw_axis=se3.adjoint(se3.inverse(jTccom)) @ jS,
        )

    # Topology

    def key(self, t: int = 0):
        """Key of this joint's angle at timestep t."""
        return joint_angle_key(self.id, t)

    def links(self) -> Tuple[Link, Link]:
        return self.parent, self.child

    def is_child_link(self, link: Link) -> bool:
        if link.id == self.child.id:
            return True
        if link.id == self.parent.id:
            return False
        raise ValueError(f"Link '{link.name}' is not connected to joint '{self.name}'")

    def other_link(self, link: Link) -> Link:
        return self.parent if self.is_child_link(link) else self.child

    def screw_axis(self, link: Link) -> Array:
        """Screw axis expressed in the COM frame of `link`."""
        return self.child_screw_axis if self.is_child_link(link) else self.parent_screw_axis

    # Poses

    def _parent_T_child(self, q, jacobian: bool):
        Sq = self.child_screw_axis * q
        exp = se3.exp(Sq)
        pMc = self.pMccom @ exp
        if not jacobian:
            return pMc
        # pMc_H_q = pMc_H_exp @ exp_H_Sq @ S
        _, pMc_H_exp = se3.compose_jacobians(self.pMccom, exp)
        exp_H_Sq = se3.expmap_derivative(Sq)
        return pMc, pMc_H_exp @ exp_H_Sq @ self.child_screw_axis

    def _child_T_parent(self, q, jacobian: bool):
        if not jacobian:
            return se3.inverse(self._parent_T_child(q, False))
        pMc, pMc_H_q = self._parent_T_child(q, True)
        return se3.inverse(pMc), se3.inverse_jacobian(pMc) @ pMc_H_q

    def transform_to(self, link: Link, q, jacobian: bool = False):
        """Transform from the other link's COM frame to `link`'s COM frame.

        Returns the (4, 4) pose, or (pose, H_q) with H_q of shape (6,) when
        `jacobian` is set.
        """
        if self.is_child_link(link):
            return self._child_T_parent(q, jacobian)
        return self._parent_T_child(q, jacobian)

    def transform_from(self, link: Link, q, jacobian: bool = False):
        """Transform from `link`'s COM frame to the other link's COM frame."""
        return self.transform_to(self.other_link(link), q, jacobian)

    def adjoint_map_jacobian_joint_angle(self, link: Link, q) -> Array:
        """Derivative of Ad(transform_to(link, q)) with respect to q.

        transform_to(link, q) = exp(-S q) @ transform_to(link, 0) with S the
        screw axis in `link`'s frame, so dAd/dq = -ad(S) @ Ad(transform_to(link, q)).
        """
        T = self.transform_to(link, q)
        return -se3.ad(self.screw_axis(link)) @ se3.adjoint(T)

    # Twists

    def transform_twist_to(self, link: Link, q, q_dot, other_twist: Optional[Array] = None,
                           jacobians: bool = False):
        """Twist of `link` given the other link's twist and the joint state.

        V_this = Ad(T_this_other) V_other + S q_dot, with an absent other twist
        treated as zero. With `jacobians` set, returns (twist, TwistJacobians).
        """
        other_twist = jnp.zeros(6) if other_twist is None else jnp.asarray(other_twist)
        screw_axis = self.screw_axis(link)
        this_ad_other = se3.adjoint(self.transform_to(link, q))

        twist = this_ad_other @ other_twist + screw_axis * q_dot
        if not jacobians:
            return twist

        H_q = self.adjoint_map_jacobian_joint_angle(link, q) @ other_twist
        return twist, TwistJacobians(H_q=H_q, H_q_dot=screw_axis, H_other_twist=this_ad_other)

    def transform_twist_from(self, link: Link, q, q_dot, this_twist: Optional[Array] = None,
                             jacobians: bool = False):
        """Twist of the other link given `link`'s twist and the joint state."""
        return self.transform_twist_to(self.other_link(link), q, q_dot, this_twist, jacobians)

    def transform_twist_accel_to(self, link: Link, q, q_dot, q_ddot,
                                 this_twist: Optional[Array] = None,
                                 other_twist_accel: Optional[Array] = None,
                                 jacobians: bool = False):
        """Twist acceleration of `link`.

        A_this = Ad(T_this_other) A_other + ad(V_this) S q_dot + S q_ddot, with
        absent twist arguments treated as zero. With `jacobians` set, returns
        (twist_accel, TwistAccelJacobians).
        """
        this_twist = jnp.zeros(6) if this_twist is None else jnp.asarray(this_twist)
        other_twist_accel = (jnp.zeros(6) if other_twist_accel is None
                             else jnp.asarray(other_twist_accel))
        screw_axis = self.screw_axis(link)
        this_ad_other = se3.adjoint(self.transform_to(link, q))

        bracket = se3.bracket(this_twist, screw_axis * q_dot, jacobians=jacobians)
        if jacobians:
            bracket, (H_this_twist, _) = bracket

        twist_accel = this_ad_other @ other_twist_accel + bracket + screw_axis * q_ddot
        if not jacobians:
            return twist_accel

        return twist_accel, TwistAccelJacobians(
            H_q=self.adjoint_map_jacobian_joint_angle(link, q) @ other_twist_accel,
            H_q_dot=se3.ad(this_twist) @ screw_axis,
            H_q_ddot=screw_axis,
            H_this_twist=H_this_twist,
            H_other_twist_accel=this_ad_other,
        )

    def transform_twist_accel_from(self, link: Link, q, q_dot, q_ddot,
                                   other_twist: Optional[Array] = None,
                                   this_twist_accel: Optional[Array] = None,
                                   jacobians: bool = False):
        """Twist acceleration of the other link given `link`'s twist acceleration.

        `other_twist` is the twist of the link whose acceleration is returned.
        """
        return self.transform_twist_accel_to(self.other_link(link), q, q_dot, q_ddot,
                                             other_twist, this_twist_accel, jacobians)

    # Wrenches

    def transform_wrench_to_torque(self, link: Link, wrench: Optional[Array] = None,
                                   jacobian: bool = False):
        """Joint torque produced by a wrench on `link`: S^T F.

        The Jacobian with respect to the wrench is the screw axis itself.
        """
        screw_axis = self.screw_axis(link)
        wrench = jnp.zeros(6) if wrench is None else jnp.asarray(wrench)
        torque = screw_axis @ wrench
        if not jacobian:
            return torque
        return torque, screw_axis

    # Named-value adapters

    def transform_to_values(self, link: Link, known_values: Values, t: int = 0,
                            jacobian: bool = False):
        """`transform_to` reading this joint's angle at timestep t from `known_values`."""
        return self.transform_to(link, joint_angle(known_values, self.id, t), jacobian)

    def transform_twist_to_values(self, link: Link, known_values: Values,
                                  other_twist: Optional[Array] = None, t: int = 0,
                                  jacobians: bool = False):
        """`transform_twist_to` reading angle and velocity from `known_values`."""
        q = joint_angle(known_values, self.id, t)
        q_dot = joint_vel(known_values, self.id, t)
        return self.transform_twist_to(link, q, q_dot, other_twist, jacobians)

    def transform_twist_accel_to_values(self, link: Link, known_values: Values,
                                        this_twist: Optional[Array] = None,
                                        other_twist_accel: Optional[Array] = None,
                                        t: int = 0, jacobians: bool = False):
        """`transform_twist_accel_to` reading angle, velocity and acceleration from `known_values`."""
        q = joint_angle(known_values, self.id, t)
        q_dot = joint_vel(known_values, self.id, t)
        q_ddot = joint_accel(known_values, self.id, t)
        return self.transform_twist_accel_to(link, q, q_dot, q_ddot, this_twist,
                                             other_twist_accel, jacobians)


def revolute_joint(id: int, name: str, wTj: Array, parent: Link, child: Link, axis: Array,
                   parameters: Optional[JointParams] = None) -> ScrewJoint:
    return ScrewJoint.create(id, name, JointType.REVOLUTE, wTj, parent, child, axis, parameters)


def prismatic_joint(id: int, name: str, wTj: Array, parent: Link, child: Link, axis: Array,
                    parameters: Optional[JointParams] = None) -> ScrewJoint:
    return ScrewJoint.create(id, name, JointType.PRISMATIC, wTj, parent, child, axis, parameters)


def screw_joint(id: int, name: str, wTj: Array, parent: Link, child: Link, axis: Array,
                thread_pitch: float, parameters: Optional[JointParams] = None) -> ScrewJoint:
    return ScrewJoint.create(id, name, JointType.SCREW, wTj, parent, child, axis, parameters,
                             thread_pitch=thread_pitch)
