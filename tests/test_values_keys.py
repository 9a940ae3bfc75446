"""Tests for variable keys and known-value lookup."""

import jax.numpy as jnp
import numpy as np
import pytest

from jax_dynamics import values
from jax_dynamics.errors import MissingValueError
from jax_dynamics.keys import (
    NO_ID,
    DynamicsKey,
    joint_angle_key,
    pose_key,
    torque_key,
    twist_key,
    wrench_key,
)
from jax_dynamics.values import Values


def test_keys_are_distinct():
    """Test keys differ by kind, entity and timestep."""
    keys = {pose_key(1, 0), twist_key(1, 0), pose_key(2, 0), pose_key(1, 1),
            joint_angle_key(1, 0), torque_key(1, 0), wrench_key(1, 2, 0), wrench_key(2, 1, 0)}
    assert len(keys) == 8


def test_key_fields():
    """Test keys carry their entity ids."""
    assert wrench_key(3, 4, 5) == DynamicsKey("F", 3, 4, 5)
    assert torque_key(4, 5).link_id == NO_ID
    assert pose_key(3).t == 0


def test_key_str():
    """Test the readable key format."""
    assert str(joint_angle_key(2, 0)) == "q(2)0"
    assert str(wrench_key(1, 2, 3)) == "F(1,2)3"
    assert str(pose_key(7, 1)) == "p(7)1"


def test_values_insert_and_update():
    """Test inserting twice is refused while update overwrites."""
    known = Values()
    known.insert(joint_angle_key(1), 0.5)

    with pytest.raises(ValueError):
        known.insert(joint_angle_key(1), 0.7)

    known.update(joint_angle_key(1), 0.7)
    assert known.at(joint_angle_key(1)) == 0.7
    assert len(known) == 1
    assert joint_angle_key(1) in known


def test_values_missing_key():
    """Test a missing key raises MissingValueError naming the key."""
    known = Values({pose_key(1): jnp.eye(4)})

    with pytest.raises(MissingValueError, match=r"p\(2\)0"):
        known.at(pose_key(2))
    with pytest.raises(KeyError):
        values.pose(known, 1, t=3)
    assert not known.exists(pose_key(2))


def test_typed_getters():
    """Test the typed getters read the matching keys."""
    twist = jnp.arange(6.0)
    known = Values({
        twist_key(1, 2): twist,
        wrench_key(1, 3, 2): -twist,
        torque_key(3, 2): 1.5,
    })

    np.testing.assert_allclose(values.twist(known, 1, 2), twist)
    np.testing.assert_allclose(values.wrench(known, 1, 3, 2), -twist)
    assert values.torque(known, 3, 2) == 1.5
