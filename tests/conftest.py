"""Shared links and joints for the kinematics and factor tests."""

import jax.numpy as jnp
import pytest

from jax_dynamics.core import JointParams, Link, ScalarLimits, prismatic_joint, revolute_joint, screw_joint
from jax_dynamics.transforms import se3, so3


@pytest.fixture
def l1():
    return Link.create(1, "l1", se3.translation(jnp.array([0.0, 0.0, 1.0])))


@pytest.fixture
def l2():
    return Link.create(2, "l2", se3.translation(jnp.array([0.0, 0.0, 3.0])))


@pytest.fixture
def revolute(l1, l2):
    """Revolute joint about x, half way between the two link COMs."""
    return revolute_joint(1, "j1", se3.translation(jnp.array([0.0, 0.0, 2.0])), l1, l2,
                          jnp.array([1.0, 0.0, 0.0]))


@pytest.fixture
def tilted_links():
    parent = Link.create(3, "base", se3.from_position_and_rotation(
        jnp.array([0.2, -0.1, 0.5]), so3.exp(jnp.array([0.1, 0.3, -0.2]))))
    child = Link.create(4, "arm", se3.from_position_and_rotation(
        jnp.array([0.4, 0.6, 1.5]), so3.exp(jnp.array([-0.5, 0.2, 0.7]))))
    return parent, child


@pytest.fixture
def tilted_wTj():
    return se3.from_position_and_rotation(jnp.array([0.3, 0.1, 1.0]), so3.exp(jnp.array([0.0, 0.4, 0.25])))


@pytest.fixture
def prismatic(tilted_links, tilted_wTj):
    parent, child = tilted_links
    params = JointParams(scalar_limits=ScalarLimits(0.0, 0.5, 0.01), velocity_limit=2.0,
                         velocity_limit_threshold=0.1)
    return prismatic_joint(2, "slider", tilted_wTj, parent, child, jnp.array([0.0, 0.0, 1.0]), params)


@pytest.fixture
def helical(tilted_links, tilted_wTj):
    parent, child = tilted_links
    axis = jnp.array([1.0, 2.0, 2.0]) / 3.0
    return screw_joint(3, "screw", tilted_wTj, parent, child, axis, thread_pitch=0.5)


@pytest.fixture(params=["revolute", "prismatic", "helical"])
def joint(request):
    """Each joint variant in turn."""
    return request.getfixturevalue(request.param)
