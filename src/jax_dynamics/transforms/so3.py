"""SO(3) and so(3) Lie group operations in JAX.

This module implements the rotation part of the rigid-motion primitives using
rotation matrices and axis-angle vectors. All functions are pure, JIT-able,
and operate on JAX arrays.
"""

import jax
import jax.numpy as jnp

Array = jax.Array

# Below this angle the closed-form coefficients are replaced by their Taylor series.
_SMALL_ANGLE = 1e-4

# Above pi minus this margin the axis is recovered from the symmetric part of R.
_NEAR_PI = 1e-5


def skew_symmetric(v: Array) -> Array:
    """
    Convert 3D vector to skew-symmetric matrix.

    Args:
        v: (..., 3) vector

    Returns:
        (..., 3, 3) skew-symmetric matrix [v]_x such that [v]_x u = v x u
    """
    zeros = jnp.zeros(v.shape[:-1], dtype=v.dtype)

    return jnp.stack([
        jnp.stack([zeros, -v[..., 2], v[..., 1]], axis=-1),
        jnp.stack([v[..., 2], zeros, -v[..., 0]], axis=-1),
        jnp.stack([-v[..., 1], v[..., 0], zeros], axis=-1)
    ], axis=-2)


def exp(omega: Array) -> Array:
    """
    SO(3) exponential map: convert axis-angle vector to rotation matrix.

    Implements Rodrigues' formula R = I + sin(t) K + (1 - cos(t)) K^2 with K the
    skew matrix of the unit axis.

    Args:
        omega: (..., 3) array of axis-angle vectors

    Returns:
        (..., 3, 3) array of rotation matrices
    """
    angle = jnp.linalg.norm(omega, axis=-1, keepdims=True)
    small_angle = angle < 1e-8

    # For tiny angles K is built from omega itself: R ~ I + [w] + [w]^2 / 2
    safe_angle = jnp.where(small_angle, 1.0, angle)
    axis = jnp.where(small_angle, omega, omega / safe_angle)

    sin_term = jnp.where(small_angle, 1.0, jnp.sin(safe_angle))
    cos_term = jnp.where(small_angle, 0.5, 1.0 - jnp.cos(safe_angle))

    K = skew_symmetric(axis)
    I = jnp.broadcast_to(jnp.eye(3, dtype=omega.dtype), omega.shape[:-1] + (3, 3))

    return (I +
            sin_term[..., None] * K +
            cos_term[..., None] * jnp.matmul(K, K))


def log(R: Array) -> Array:
    """
    SO(3) logarithm map: convert rotation matrix to axis-angle vector.

    The angle is recovered with atan2 so that it stays accurate close to the
    identity, where arccos of the trace loses half of the significant digits.

    Args:
        R: (..., 3, 3) array of rotation matrices

    Returns:
        (..., 3) array of axis-angle vectors
    """
    # skew_part = 2 sin(t) * axis
    skew_part = jnp.stack([
        R[..., 2, 1] - R[..., 1, 2],
        R[..., 0, 2] - R[..., 2, 0],
        R[..., 1, 0] - R[..., 0, 1]
    ], axis=-1)

    sin_angle = 0.5 * jnp.linalg.norm(skew_part, axis=-1)
    cos_angle = 0.5 * (jnp.trace(R, axis1=-2, axis2=-1) - 1.0)
    angle = jnp.arctan2(sin_angle, cos_angle)

    small_angle = angle < _SMALL_ANGLE
    near_pi = angle > jnp.pi - _NEAR_PI

    # theta / (2 sin theta), Taylor series near zero
    safe_sin = jnp.where(small_angle | near_pi, 1.0, sin_angle)
    scale = jnp.where(small_angle,
                      0.5 + angle**2 / 12.0,
                      0.5 * angle / safe_sin)
    omega_general = scale[..., None] * skew_part

    # Near pi: (R + I) / 2 ~ a a^T, take the column with the largest diagonal
    B = 0.5 * (R + jnp.eye(3, dtype=R.dtype))
    diag_vals = jnp.diagonal(B, axis1=-2, axis2=-1)
    max_idx = jnp.argmax(diag_vals, axis=-1)
    axis_pi = jnp.take_along_axis(B, max_idx[..., None, None], axis=-1)[..., 0]
    axis_pi = axis_pi / jnp.linalg.norm(axis_pi, axis=-1, keepdims=True)
    # Resolve the sign ambiguity with the (tiny) skew part
    sign = jnp.where(jnp.sum(axis_pi * skew_part, axis=-1) < 0.0, -1.0, 1.0)
    omega_pi = (sign * angle)[..., None] * axis_pi

    return jnp.where(near_pi[..., None], omega_pi, omega_general)


def apply(R: Array, v: Array) -> Array:
    """
    Apply rotation to vector(s).

    Args:
        R: (..., 3, 3) rotation matrix
        v: (..., 3) or (..., N, 3) vector(s) to rotate

    Returns:
        (..., 3) or (..., N, 3) rotated vector(s)
    """
    if v.ndim == R.ndim - 1:  # Single vector case
        return jnp.einsum('...ij,...j->...i', R, v)
    else:  # Multiple vectors case
        return jnp.einsum('...ij,...nj->...ni', R, v)


def expmap_derivative(omega: Array) -> Array:
    """
    Right Jacobian of the SO(3) exponential map.

    exp(omega + d) ~ exp(omega) exp(Jr(omega) d) with
    Jr = I - (1 - cos t) / t^2 [w] + (t - sin t) / t^3 [w]^2.

    Args:
        omega: (..., 3) axis-angle vector

    Returns:
        (..., 3, 3) right Jacobian
    """
    angle = jnp.linalg.norm(omega, axis=-1, keepdims=True)[..., None]
    small_angle = angle < _SMALL_ANGLE
    safe_angle = jnp.where(small_angle, 1.0, angle)
    angle_sq = angle * angle

    a = jnp.where(small_angle,
                  0.5 - angle_sq / 24.0,
                  (1.0 - jnp.cos(safe_angle)) / safe_angle**2)
    b = jnp.where(small_angle,
                  1.0 / 6.0 - angle_sq / 120.0,
                  (safe_angle - jnp.sin(safe_angle)) / safe_angle**3)

    W = skew_symmetric(omega)
    I = jnp.broadcast_to(jnp.eye(3, dtype=omega.dtype), W.shape)
    return I - a * W + b * jnp.matmul(W, W)
