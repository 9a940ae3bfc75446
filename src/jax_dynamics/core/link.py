"""Link record consumed by screw joints.

Only the data the joint kinematics need is kept here: an integer id used in
variable keys, a name used by the name-keyed factor builders, and the pose of
the link's centre of mass in the world frame.
"""

import jax.numpy as jnp
from jax import Array
from flax import struct


@struct.dataclass
class Link:
    """Immutable PyTree representation of a rigid link.

    Attributes:
        id: Integer link identifier. Marked as a static field for JIT compilation.
        name: Link name. Marked as a static field for JIT compilation.
        com_pose: Array of shape (4, 4), SE(3) pose of the centre of mass
                  frame expressed in the world frame.
    """
    id: int = struct.field(pytree_node=False)
    name: str = struct.field(pytree_node=False)
    com_pose: Array

    @classmethod
    def create(cls, id: int, name: str, com_pose=None) -> "Link":
        if com_pose is None:
            com_pose = jnp.eye(4)
        return cls(id=id, name=name, com_pose=jnp.asarray(com_pose, dtype=jnp.float64))
