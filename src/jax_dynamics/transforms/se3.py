"""SE(3) and se(3) Lie group operations in JAX.

This module implements SE(3) rigid body transforms using homogeneous matrices
and 6D twist vectors ordered as [wx, wy, wz, vx, vy, vz] (angular part first).
All functions are pure, JIT-able, and operate on JAX arrays.

Derivatives follow the right-trivialized convention: a Jacobian H of a
pose-valued function f satisfies f(x + dx) ~ f(x) @ exp(H dx).
"""

from typing import Tuple

import jax
import jax.numpy as jnp

from . import so3

Array = jax.Array

_SMALL_ANGLE = 1e-3


def from_position_and_rotation(p: Array, R: Array) -> Array:
    """
    Construct SE(3) transform from position and rotation.

    Args:
        p: (..., 3) position vector
        R: (..., 3, 3) rotation matrix

    Returns:
        (..., 4, 4) homogeneous transformation matrix
    """
    batch_shape = jnp.broadcast_shapes(p.shape[:-1], R.shape[:-2])
    p = jnp.broadcast_to(p, batch_shape + (3,))
    R = jnp.broadcast_to(R, batch_shape + (3, 3))

    T = jnp.zeros(batch_shape + (4, 4), dtype=jnp.result_type(p, R))
    T = T.at[..., :3, :3].set(R)
    T = T.at[..., :3, 3].set(p)
    T = T.at[..., 3, 3].set(1.0)

    return T


def translation(p: Array) -> Array:
    """Pure translation by (..., 3) vector p."""
    p = jnp.asarray(p, dtype=jnp.float64)
    return from_position_and_rotation(p, jnp.eye(3, dtype=p.dtype))


def exp(twist: Array) -> Array:
    """
    SE(3) exponential map: convert twist to transformation matrix.

    Small rotation angles use Taylor series approximations of the coefficients
    of V = I + A [w] + B [w]^2 to avoid catastrophic cancellation.

    Args:
        twist: (..., 6) array of twists [wx, wy, wz, vx, vy, vz].

    Returns:
        (..., 4, 4) array of transformation matrices.
    """
    w, v = twist[..., :3], twist[..., 3:]
    angle = jnp.linalg.norm(w, axis=-1, keepdims=True)[..., None]

    R = so3.exp(w)

    angle_sq = angle * angle
    is_small_angle = angle < _SMALL_ANGLE
    safe_angle = jnp.where(is_small_angle, 1.0, angle)

    # A = (1 - cos(theta)) / theta^2
    A = jnp.where(is_small_angle,
                  0.5 - angle_sq / 24.0 + angle_sq * angle_sq / 720.0,
                  (1.0 - jnp.cos(safe_angle)) / safe_angle**2)

    # B = (theta - sin(theta)) / theta^3
    B = jnp.where(is_small_angle,
                  1.0 / 6.0 - angle_sq / 120.0 + angle_sq * angle_sq / 5040.0,
                  (safe_angle - jnp.sin(safe_angle)) / safe_angle**3)

    K = so3.skew_symmetric(w)
    I = jnp.broadcast_to(jnp.eye(3, dtype=twist.dtype), K.shape)
    V = I + A * K + B * jnp.matmul(K, K)

    t = jnp.einsum("...ij,...j->...i", V, v)

    return from_position_and_rotation(t, R)


def log(T: Array) -> Array:
    """
    SE(3) logarithm map: convert transformation matrix to twist.

    Args:
        T: (..., 4, 4) array of transformation matrices.

    Returns:
        (..., 6) array of twists [wx, wy, wz, vx, vy, vz].
    """
    R, t = T[..., :3, :3], T[..., :3, 3]

    w = so3.log(R)
    angle = jnp.linalg.norm(w, axis=-1, keepdims=True)[..., None]

    K = so3.skew_symmetric(w)
    is_small_angle = angle < _SMALL_ANGLE
    safe_angle = jnp.where(is_small_angle, 1.0, angle)
    half_angle = 0.5 * safe_angle

    # C = (1 - (theta/2) cot(theta/2)) / theta^2, tends to 1/12
    C = jnp.where(is_small_angle,
                  1.0 / 12.0 + angle * angle / 720.0,
                  (1.0 - half_angle * jnp.cos(half_angle) / jnp.sin(half_angle)) / safe_angle**2)

    I = jnp.broadcast_to(jnp.eye(3, dtype=T.dtype), K.shape)

    # V_inv = I - 0.5*K + C*K^2
    V_inv = I - 0.5 * K + C * jnp.matmul(K, K)

    v = jnp.einsum("...ij,...j->...i", V_inv, t)

    return jnp.concatenate([w, v], axis=-1)


def multiply(T1: Array, T2: Array) -> Array:
    """
    Multiply two SE(3) transformation matrices.

    Args:
        T1: (..., 4, 4) first transformation matrix
        T2: (..., 4, 4) second transformation matrix

    Returns:
        (..., 4, 4) result of T1 @ T2
    """
    return jnp.matmul(T1, T2)


def inverse(T: Array) -> Array:
    """
    Compute inverse of SE(3) transformation matrix.

    Uses the block structure: T^-1 = [[R^T, -R^T @ t], [0, 1]]

    Args:
        T: (..., 4, 4) transformation matrix

    Returns:
        (..., 4, 4) inverse transformation matrix
    """
    R = T[..., :3, :3]
    t = T[..., :3, 3]

    R_inv = jnp.swapaxes(R, -1, -2)
    t_inv = -jnp.einsum("...ij,...j->...i", R_inv, t)

    return from_position_and_rotation(t_inv, R_inv)


def between(T1: Array, T2: Array) -> Array:
    """Relative transform T1^-1 @ T2."""
    return jnp.matmul(inverse(T1), T2)


def local(T1: Array, T2: Array) -> Array:
    """Local coordinates of T2 around T1: log(T1^-1 @ T2)."""
    return log(between(T1, T2))


def retract(T: Array, twist: Array) -> Array:
    """Move T along a body-frame twist: T @ exp(twist)."""
    return jnp.matmul(T, exp(twist))


def apply(T: Array, points: Array) -> Array:
    """
    Apply SE(3) transformation to points.

    Args:
        T: (..., 4, 4) transformation matrix
        points: (..., 3) or (..., N, 3) points to transform

    Returns:
        (..., 3) or (..., N, 3) transformed points
    """
    ones = jnp.ones_like(points[..., 0:1])
    points_h = jnp.concatenate([points, ones], axis=-1)

    if points.ndim == T.ndim - 1:
        transformed_h = jnp.einsum("...ij,...j->...i", T, points_h)
    else:
        transformed_h = jnp.einsum("...ij,...nj->...ni", T, points_h)

    return transformed_h[..., :3]


def get_position(T: Array) -> Array:
    """Extract (..., 3) position from SE(3) transformation matrix."""
    return T[..., :3, 3]


def get_rotation(T: Array) -> Array:
    """Extract (..., 3, 3) rotation matrix from SE(3) transformation matrix."""
    return T[..., :3, :3]


def adjoint(T: Array) -> Array:
    """
    Compute the Adjoint matrix of an SE(3) transformation.

    The Adjoint maps twists expressed in the frame of T's columns to the frame
    of its rows: [[R, 0], [[t]_x R, R]].

    Args:
        T: (..., 4, 4) transformation matrix

    Returns:
        (..., 6, 6) Adjoint matrix
    """
    R = T[..., :3, :3]
    t = T[..., :3, 3]

    t_skew = so3.skew_symmetric(t)
    zeros = jnp.zeros_like(R)

    top = jnp.concatenate([R, zeros], axis=-1)
    bottom = jnp.concatenate([jnp.matmul(t_skew, R), R], axis=-1)

    return jnp.concatenate([top, bottom], axis=-2)


def ad(twist: Array) -> Array:
    """
    Lie bracket operator of se(3): ad(xi) y = [xi, y].

    For xi = (w, v): [[[w], 0], [[v], [w]]]

    Args:
        twist: (..., 6) twist

    Returns:
        (..., 6, 6) matrix
    """
    W = so3.skew_symmetric(twist[..., :3])
    V = so3.skew_symmetric(twist[..., 3:])
    zeros = jnp.zeros_like(W)

    top = jnp.concatenate([W, zeros], axis=-1)
    bottom = jnp.concatenate([V, W], axis=-1)

    return jnp.concatenate([top, bottom], axis=-2)


def bracket(xi: Array, y: Array, jacobians: bool = False):
    """
    Lie bracket ad(xi) y of two twists.

    With ``jacobians=True`` also returns the pair (H_xi, H_y) = (-ad(y), ad(xi)).
    """
    result = jnp.einsum("...ij,...j->...i", ad(xi), y)
    if not jacobians:
        return result
    return result, (-ad(y), ad(xi))


def expmap_derivative(twist: Array) -> Array:
    """
    Right Jacobian of the SE(3) exponential map.

    exp(xi + d) ~ exp(xi) @ exp(J(xi) d) with J = [[Jr, 0], [Q, Jr]], where Jr
    is the SO(3) right Jacobian of w and Q couples the linear part.

    Args:
        twist: (6,) twist [w, v]

    Returns:
        (6, 6) Jacobian
    """
    w, v = twist[:3], twist[3:]
    Jr = so3.expmap_derivative(w)
    Q = _expmap_derivative_q(w, v)
    zeros = jnp.zeros((3, 3), dtype=twist.dtype)

    top = jnp.concatenate([Jr, zeros], axis=-1)
    bottom = jnp.concatenate([Q, Jr], axis=-1)

    return jnp.concatenate([top, bottom], axis=-2)


def _expmap_derivative_q(w: Array, v: Array) -> Array:
    W = so3.skew_symmetric(w)
    V = so3.skew_symmetric(v)
    phi = jnp.linalg.norm(w)
    is_small_angle = phi < _SMALL_ANGLE
    safe_phi = jnp.where(is_small_angle, 1.0, phi)

    s, c = jnp.sin(safe_phi), jnp.cos(safe_phi)
    phi2, phi3 = safe_phi**2, safe_phi**3
    phi4, phi5 = safe_phi**4, safe_phi**5

    a = jnp.where(is_small_angle, 1.0 / 6.0, (safe_phi - s) / phi3)
    b = jnp.where(is_small_angle, -1.0 / 24.0, (1.0 - phi2 / 2.0 - c) / phi4)
    d = jnp.where(is_small_angle, 1.0 / 120.0, (2.0 * safe_phi - 3.0 * s + safe_phi * c) / (2.0 * phi5))

    WV = W @ V
    VW = V @ W
    WVW = WV @ W

    return (-0.5 * V
            + a * (WV + VW - WVW)
            + b * (W @ WV + VW @ W - 3.0 * WVW)
            + d * (WVW @ W + W @ WVW))


def inverse_jacobian(T: Array) -> Array:
    """Jacobian of T -> T^-1, which is -Ad(T)."""
    return -adjoint(T)


def compose_jacobians(T1: Array, T2: Array) -> Tuple[Array, Array]:
    """Jacobians of (T1, T2) -> T1 @ T2 with respect to T1 and T2."""
    return adjoint(inverse(T2)), jnp.eye(6, dtype=T1.dtype)
