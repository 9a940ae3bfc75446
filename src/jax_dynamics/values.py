"""Named-value lookup used to feed known quantities into joints and factors."""

from typing import Any, Dict, Hashable, Iterator, Optional

import jax.numpy as jnp
from jax import Array

from . import keys
from .errors import MissingValueError


class Values:
    """Mapping from variable keys to known values.

    Unlike a plain dict, lookups of absent keys raise `MissingValueError` and
    inserting an existing key is refused; use `update` to overwrite.
    """

    def __init__(self, initial: Optional[Dict[Hashable, Any]] = None):
        self._values: Dict[Hashable, Any] = {}
        if initial:
            for key, value in initial.items():
                self.insert(key, value)

    def insert(self, key: Hashable, value: Any) -> None:
        if key in self._values:
            raise ValueError(f"{key} already exists in values")
        self._values[key] = value

    def update(self, key: Hashable, value: Any) -> None:
        self._values[key] = value

    def at(self, key: Hashable) -> Any:
        try:
            return self._values[key]
        except KeyError:
            raise MissingValueError(key) from None

    def exists(self, key: Hashable) -> bool:
        return key in self._values

    def keys(self):
        return self._values.keys()

    def __contains__(self, key) -> bool:
        return key in self._values

    def __getitem__(self, key):
        return self.at(key)

    def __iter__(self) -> Iterator[Hashable]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self):
        items = ", ".join(f"{k}: {v}" for k, v in self._values.items())
        return f"Values({{{items}}})"


def pose(values: Values, link_id: int, t: int = 0) -> Array:
    return jnp.asarray(values.at(keys.pose_key(link_id, t)))


def twist(values: Values, link_id: int, t: int = 0) -> Array:
    return jnp.asarray(values.at(keys.twist_key(link_id, t)))


def twist_accel(values: Values, link_id: int, t: int = 0) -> Array:
    return jnp.asarray(values.at(keys.twist_accel_key(link_id, t)))


def wrench(values: Values, link_id: int, joint_id: int, t: int = 0) -> Array:
    return jnp.asarray(values.at(keys.wrench_key(link_id, joint_id, t)))


def torque(values: Values, joint_id: int, t: int = 0) -> float:
    return values.at(keys.torque_key(joint_id, t))


def joint_angle(values: Values, joint_id: int, t: int = 0) -> float:
    return values.at(keys.joint_angle_key(joint_id, t))


def joint_vel(values: Values, joint_id: int, t: int = 0) -> float:
    return values.at(keys.joint_vel_key(joint_id, t))


def joint_accel(values: Values, joint_id: int, t: int = 0) -> float:
    return values.at(keys.joint_accel_key(joint_id, t))
