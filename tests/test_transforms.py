"""Tests for the transforms module."""

import hypothesis
import jax
import jax.numpy as jnp
import numpy as np
from hypothesis import given, settings
from hypothesis import strategies as st

from jax_dynamics.numerical import numerical_derivative, numerical_pose_derivative
from jax_dynamics.transforms import se3, so3

# Use hypothesis profile for CI
hypothesis.settings.register_profile("ci", max_examples=10, deadline=None)


def _random_twist(key, scale=1.0):
    return jax.random.uniform(key, (6,), minval=-scale, maxval=scale)


# SO(3) Lie Group Tests
def test_so3_exp_identity():
    """Test SO(3) exp with zero vector gives identity."""
    R = so3.exp(jnp.zeros(3))
    np.testing.assert_allclose(R, jnp.eye(3), rtol=1e-6, atol=1e-6)


def test_so3_log_identity():
    """Test SO(3) log with identity matrix gives zero vector."""
    log_r = so3.log(jnp.eye(3))
    np.testing.assert_allclose(log_r, jnp.zeros(3), rtol=1e-6, atol=1e-6)


def test_so3_exp_log_roundtrip():
    """Test SO(3) exp(log(R)) = R roundtrip."""
    axis_angle = jnp.array([0.0, 0.0, jnp.pi / 4])

    R = so3.exp(axis_angle)
    log_r = so3.log(R)

    np.testing.assert_allclose(so3.exp(log_r), R, rtol=1e-9, atol=1e-9)
    np.testing.assert_allclose(log_r, axis_angle, rtol=1e-9, atol=1e-9)


def test_so3_log_small_angle():
    """Test SO(3) log keeps full precision for tiny rotations."""
    axis_angle = jnp.array([1e-7, -2e-7, 3e-7])
    np.testing.assert_allclose(so3.log(so3.exp(axis_angle)), axis_angle, rtol=1e-8, atol=1e-15)


def test_so3_log_near_pi():
    """Test SO(3) log close to a half turn."""
    axis = jnp.array([1.0, 2.0, -2.0]) / 3.0
    axis_angle = axis * (jnp.pi - 1e-7)
    np.testing.assert_allclose(so3.log(so3.exp(axis_angle)), axis_angle, atol=1e-6)


def test_so3_apply():
    """Test SO(3) apply function."""
    R = so3.exp(jnp.array([0.0, 0.0, jnp.pi / 2]))
    v_rotated = so3.apply(R, jnp.array([1.0, 0.0, 0.0]))
    np.testing.assert_allclose(v_rotated, jnp.array([0.0, 1.0, 0.0]), rtol=1e-6, atol=1e-6)


def test_so3_skew_symmetric():
    """Test skew-symmetric matrix function."""
    K = so3.skew_symmetric(jnp.array([1.0, 2.0, 3.0]))

    expected = jnp.array([[0.0, -3.0, 2.0], [3.0, 0.0, -1.0], [-2.0, 1.0, 0.0]])
    np.testing.assert_allclose(K, expected, rtol=1e-6, atol=1e-6)
    np.testing.assert_allclose(K, -K.T, rtol=1e-6, atol=1e-6)


def test_so3_expmap_derivative():
    """Test SO(3) right Jacobian against finite differences."""
    omega = jnp.array([0.3, -0.5, 0.8])
    numerical = numerical_derivative(
        lambda d: np.asarray(so3.log(so3.exp(omega).T @ so3.exp(omega + d))), np.zeros(3))
    np.testing.assert_allclose(so3.expmap_derivative(omega), numerical, atol=1e-7)


# SE(3) Lie Group Tests
def test_se3_from_position_and_rotation():
    """Test SE(3) construction from position and rotation."""
    T = se3.from_position_and_rotation(jnp.array([1.0, 2.0, 3.0]), jnp.eye(3))

    expected = jnp.array([[1.0, 0.0, 0.0, 1.0], [0.0, 1.0, 0.0, 2.0], [0.0, 0.0, 1.0, 3.0], [0.0, 0.0, 0.0, 1.0]])
    np.testing.assert_allclose(T, expected, rtol=1e-6, atol=1e-6)


def test_se3_exp_pure_translation():
    """Test SE(3) exp of a twist without rotation is a translation."""
    T = se3.exp(jnp.array([0.0, 0.0, 0.0, 1.0, 2.0, 3.0]))
    np.testing.assert_allclose(T, se3.translation(jnp.array([1.0, 2.0, 3.0])), atol=1e-12)


def test_se3_exp_rotation_about_offset_axis():
    """Test SE(3) exp of a unit screw about an axis through (0, 1, 0)."""
    # Rotation about z through q = (0, 1, 0): v = -w x q
    w = jnp.array([0.0, 0.0, 1.0])
    v = -jnp.cross(w, jnp.array([0.0, 1.0, 0.0]))
    T = se3.exp(jnp.concatenate([w, v]) * jnp.pi)

    # The axis point is fixed, the origin is mirrored through it
    np.testing.assert_allclose(se3.apply(T, jnp.array([0.0, 1.0, 0.0])), [0.0, 1.0, 0.0], atol=1e-12)
    np.testing.assert_allclose(se3.apply(T, jnp.zeros(3)), [0.0, 2.0, 0.0], atol=1e-12)


def test_se3_exp_log_roundtrip():
    """Test SE(3) exp(log(T)) = T roundtrip."""
    twist = jnp.array([0.1, 0.2, 0.3, 0.05, 0.1, 0.15])

    T = se3.exp(twist)
    log_twist = se3.log(T)

    np.testing.assert_allclose(se3.exp(log_twist), T, rtol=1e-9, atol=1e-9)
    np.testing.assert_allclose(log_twist, twist, rtol=1e-9, atol=1e-9)


def test_se3_multiply():
    """Test composition of transforms."""
    # Translation by [1, 0, 0]
    t1 = se3.from_position_and_rotation(jnp.array([1.0, 0.0, 0.0]), jnp.eye(3))
    # Translation by [0, 1, 0] + 90° rotation around Z
    t2 = se3.from_position_and_rotation(jnp.array([0.0, 1.0, 0.0]), so3.exp(jnp.array([0.0, 0.0, jnp.pi / 2])))

    transformed = se3.apply(se3.multiply(t1, t2), jnp.array([1.0, 0.0, 0.0]))

    np.testing.assert_allclose(transformed, jnp.array([1.0, 2.0, 0.0]), rtol=1e-6, atol=1e-6)


def test_se3_between():
    """Test between(T1, T2) recovers the relative transform."""
    T1 = se3.exp(jnp.array([0.1, -0.2, 0.3, 1.0, 0.0, -1.0]))
    T12 = se3.exp(jnp.array([-0.4, 0.2, 0.1, 0.0, 2.0, 0.5]))
    np.testing.assert_allclose(se3.between(T1, T1 @ T12), T12, atol=1e-12)


def test_se3_adjoint():
    """Test SE(3) adjoint block structure."""
    T = se3.exp(jnp.array([0.1, 0.2, 0.3, 0.05, 0.1, 0.15]))
    Ad_T = se3.adjoint(T)

    R = se3.get_rotation(T)
    t_skew = so3.skew_symmetric(se3.get_position(T))

    assert Ad_T.shape == (6, 6)
    np.testing.assert_allclose(Ad_T[:3, :3], R, rtol=1e-6, atol=1e-6)
    np.testing.assert_allclose(Ad_T[:3, 3:], jnp.zeros((3, 3)), rtol=1e-6, atol=1e-6)
    np.testing.assert_allclose(Ad_T[3:, :3], t_skew @ R, rtol=1e-6, atol=1e-6)
    np.testing.assert_allclose(Ad_T[3:, 3:], R, rtol=1e-6, atol=1e-6)


@given(st.integers(min_value=0, max_value=100))
@settings(deadline=None)
def test_se3_adjoint_conjugation(seed):
    """Test T exp(xi) T^-1 = exp(Ad(T) xi)."""
    key1, key2 = jax.random.split(jax.random.PRNGKey(seed))
    T = se3.exp(_random_twist(key1, 2.0))
    xi = _random_twist(key2)

    np.testing.assert_allclose(
        T @ se3.exp(xi) @ se3.inverse(T), se3.exp(se3.adjoint(T) @ xi), rtol=1e-9, atol=1e-9)


def test_se3_ad_is_derivative_of_adjoint():
    """Test d/dt Ad(exp(t xi)) at t = 0 equals ad(xi)."""
    xi = jnp.array([0.3, -0.1, 0.2, 1.0, 0.5, -0.4])
    numerical = numerical_derivative(lambda t: np.asarray(se3.adjoint(se3.exp(xi * t))), 0.0)
    np.testing.assert_allclose(se3.ad(xi), numerical, atol=1e-8)


def test_se3_bracket_jacobians():
    """Test bracket Jacobians against finite differences."""
    xi = jnp.array([0.3, -0.1, 0.2, 1.0, 0.5, -0.4])
    y = jnp.array([-0.7, 0.4, 0.1, 0.2, -0.3, 0.9])

    result, (H_xi, H_y) = se3.bracket(xi, y, jacobians=True)

    np.testing.assert_allclose(result, se3.ad(xi) @ y, atol=1e-12)
    np.testing.assert_allclose(H_xi, numerical_derivative(lambda x: se3.bracket(x, y), np.asarray(xi)), atol=1e-8)
    np.testing.assert_allclose(H_y, numerical_derivative(lambda x: se3.bracket(xi, x), np.asarray(y)), atol=1e-8)


@given(st.integers(min_value=0, max_value=100))
@settings(deadline=None)
def test_se3_expmap_derivative(seed):
    """Test exp(xi + d) ~ exp(xi) exp(J d) against finite differences."""
    xi = _random_twist(jax.random.PRNGKey(seed), 1.5)
    numerical = numerical_pose_derivative(lambda d: se3.exp(xi + d), np.zeros(6))
    np.testing.assert_allclose(se3.expmap_derivative(xi), numerical, atol=1e-6)


def test_se3_expmap_derivative_small_angle():
    """Test the exponential map derivative close to zero rotation."""
    xi = jnp.array([1e-5, -2e-5, 0.0, 0.3, -0.2, 1.0])
    numerical = numerical_pose_derivative(lambda d: se3.exp(xi + d), np.zeros(6))
    np.testing.assert_allclose(se3.expmap_derivative(xi), numerical, atol=1e-6)


def test_se3_inverse_jacobian():
    """Test the Jacobian of the inverse against finite differences."""
    T = se3.exp(jnp.array([0.4, -0.3, 0.9, 1.0, -2.0, 0.5]))
    numerical = numerical_pose_derivative(lambda d: se3.inverse(se3.retract(T, d)), np.zeros(6))
    np.testing.assert_allclose(se3.inverse_jacobian(T), numerical, atol=1e-6)


def test_se3_compose_jacobians():
    """Test the Jacobians of composition against finite differences."""
    T1 = se3.exp(jnp.array([0.4, -0.3, 0.9, 1.0, -2.0, 0.5]))
    T2 = se3.exp(jnp.array([-0.2, 0.6, 0.1, 0.3, 0.3, -1.0]))

    H1, H2 = se3.compose_jacobians(T1, T2)

    numerical1 = numerical_pose_derivative(lambda d: se3.retract(T1, d) @ T2, np.zeros(6))
    numerical2 = numerical_pose_derivative(lambda d: T1 @ se3.retract(T2, d), np.zeros(6))
    np.testing.assert_allclose(H1, numerical1, atol=1e-6)
    np.testing.assert_allclose(H2, numerical2, atol=1e-6)


# Batched and JIT tests
def test_se3_batch_exp_log():
    """Test SE(3) exp/log work with batched inputs."""
    batch_size = 5
    twists = jax.random.uniform(jax.random.PRNGKey(42), (batch_size, 6), minval=-1.0, maxval=1.0)

    T_batch = se3.exp(twists)
    log_batch = se3.log(T_batch)

    assert T_batch.shape == (batch_size, 4, 4)
    assert log_batch.shape == (batch_size, 6)
    np.testing.assert_allclose(log_batch, twists, rtol=1e-9, atol=1e-9)


@given(st.integers(min_value=0, max_value=100))
@settings(deadline=None)
def test_transform_inverse_property(seed):
    """Test that applying T and then T^-1 returns the original points."""
    key1, key2 = jax.random.split(jax.random.PRNGKey(seed))

    twists = jax.random.uniform(key1, (5, 6), minval=-3.0, maxval=3.0)
    transforms = se3.exp(twists)
    inverse_transforms = se3.inverse(transforms)

    points = jax.random.uniform(key2, (10, 3), minval=-10.0, maxval=10.0)
    transformed = jax.vmap(lambda T: se3.apply(T, points))(transforms)
    back_to_original = jax.vmap(se3.apply)(inverse_transforms, transformed)

    original_batched = jnp.broadcast_to(points[None], (5, 10, 3))
    np.testing.assert_allclose(back_to_original, original_batched, rtol=1e-9, atol=1e-9)


def test_se3_jit_compatibility():
    """Test SE(3) functions are JIT compatible."""
    twist = jnp.array([0.1, 0.2, 0.3, 0.05, 0.1, 0.15])

    T = jax.jit(se3.exp)(twist)
    log_twist = jax.jit(se3.log)(T)
    J = jax.jit(se3.expmap_derivative)(twist)

    np.testing.assert_allclose(log_twist, twist, rtol=1e-9, atol=1e-9)
    np.testing.assert_allclose(J, se3.expmap_derivative(twist), atol=1e-12)
